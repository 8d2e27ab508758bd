"""
API tests for user, product, sale and audit endpoints.
"""

from fastapi.testclient import TestClient


# =============================================================================
# USER TESTS
# =============================================================================


class TestUsersAPI:
    def test_login_success(self, client: TestClient, api_seller):
        response = client.post("/users/login", json={
            "email": "seller@shop.test",
            "password": "secret123",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == api_seller.id
        assert data["permissionProfileId"] == "profile-seller"
        assert data["active"] is True

    def test_login_bad_password_returns_403(self, client: TestClient, api_seller):
        response = client.post("/users/login", json={
            "email": "seller@shop.test",
            "password": "nope-nope",
        })

        assert response.status_code == 403

    def test_admin_creates_user(self, client: TestClient, api_admin, headers_for):
        response = client.post("/users", json={
            "name": "Carla",
            "email": "carla@shop.test",
            "password": "secret123",
            "phone": "11988887777",
        }, headers=headers_for(api_admin))

        assert response.status_code == 201
        assert response.json()["email"] == "carla@shop.test"

    def test_seller_cannot_create_user(self, client: TestClient, api_seller, headers_for):
        response = client.post("/users", json={
            "name": "Carla",
            "email": "carla@shop.test",
            "password": "secret123",
        }, headers=headers_for(api_seller))

        assert response.status_code == 403

    def test_deactivate_hides_user_from_default_listing(
        self, client: TestClient, api_admin, api_seller, headers_for
    ):
        response = client.delete(f"/users/{api_seller.id}", headers=headers_for(api_admin))
        assert response.status_code == 200
        assert response.json()["active"] is False

        active = client.get("/users", headers=headers_for(api_admin)).json()
        everyone = client.get(
            "/users", params={"includeInactive": "true"}, headers=headers_for(api_admin)
        ).json()

        assert api_seller.id not in [u["id"] for u in active]
        assert api_seller.id in [u["id"] for u in everyone]

    def test_deactivated_user_header_rejected(self, client: TestClient, api_admin, api_seller, headers_for):
        client.delete(f"/users/{api_seller.id}", headers=headers_for(api_admin))

        response = client.get("/users", headers=headers_for(api_seller))

        assert response.status_code == 403

    def test_get_unknown_user_returns_404(self, client: TestClient, api_admin, headers_for):
        response = client.get("/users/missing", headers=headers_for(api_admin))

        assert response.status_code == 404

    def test_logout_keeps_other_users_cache(
        self, client: TestClient, app_context, api_admin, api_seller, headers_for
    ):
        """
        GIVEN the admin's user listing is cached
        WHEN the seller logs out
        THEN the shared cache is left alone
        """
        client.get("/users", headers=headers_for(api_admin))
        assert "users" in app_context.cache.keys()

        response = client.post("/users/logout", headers=headers_for(api_seller))

        assert response.status_code == 204
        assert "users" in app_context.cache.keys()


# =============================================================================
# CATALOG & SALES TESTS
# =============================================================================


class TestCatalogAPI:
    def test_product_and_sale_flow(self, client: TestClient, api_seller, headers_for):
        """
        GIVEN a product created through the API
        WHEN a sale of two units is posted and then cancelled
        THEN stock drops and is restored
        """
        headers = headers_for(api_seller)
        product = client.post("/products", json={
            "name": "Película 3D",
            "price": "30",
            "costPrice": "5",
            "stock": 10,
            "category": "Acessorios",
        }, headers=headers).json()

        sale = client.post("/sales", json={
            "items": [{
                "productId": product["id"],
                "quantity": 2,
                "unitPrice": "30",
                "unitCost": "5",
            }],
            "payments": [{"method": "pix", "amount": "60"}],
        }, headers=headers)

        assert sale.status_code == 201
        assert sale.json()["id"] == "ID-1"
        listed = client.get("/products", params={"category": "Acessorios"}, headers=headers).json()
        assert listed[0]["stock"] == 8

        cancelled = client.post(
            f"/sales/{sale.json()['id']}/cancel", json={"reason": "Defeito"}, headers=headers
        )
        assert cancelled.json()["status"] == "cancelled"
        assert client.get("/products", headers=headers).json()[0]["stock"] == 10

    def test_stock_update(self, client: TestClient, api_seller, headers_for):
        headers = headers_for(api_seller)
        product = client.post("/products", json={"name": "Cabo USB-C"}, headers=headers).json()

        response = client.put(
            f"/products/{product['id']}/stock",
            json={"newStock": 12, "reason": "Compra"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["stock"] == 12
        assert response.json()["stockHistory"][-1]["adjustment"] == 12

    def test_purchase_adds_stock_and_notifies(self, client: TestClient, app_context, api_seller, headers_for):
        headers = headers_for(api_seller)
        product = client.post("/products", json={"name": "Carregador 20W", "stock": 1}, headers=headers).json()

        response = client.post("/products/purchases", json={
            "supplierName": "Distribuidora X",
            "items": [{"productId": product["id"], "quantity": 4, "unitCost": "25"}],
        }, headers=headers)

        assert response.status_code == 201
        assert response.json()[0]["stock"] == 5
        app_context.notifier.send_purchase_notification.assert_called_once()

    def test_sale_without_items_returns_422(self, client: TestClient, api_seller, headers_for):
        response = client.post("/sales", json={"items": []}, headers=headers_for(api_seller))

        assert response.status_code == 422


class TestAuditLogsAPI:
    def test_admin_reads_audit_trail(self, client: TestClient, api_admin, api_seller, headers_for):
        session = client.post(
            "/cash-sessions", json={"openingBalance": "10"}, headers=headers_for(api_seller)
        ).json()
        client.post(
            f"/cash-sessions/{session['id']}/movements",
            json={"type": "deposit", "amount": "5", "reason": "Troco"},
            headers=headers_for(api_seller),
        )

        general = client.get("/audit-logs", headers=headers_for(api_admin))
        register = client.get(
            "/audit-logs/cash-register",
            params={"sessionId": session["id"]},
            headers=headers_for(api_admin),
        )

        assert general.status_code == 200
        assert "CASH_OPEN" in [e["action"] for e in general.json()]
        assert [e["action"] for e in register.json()] == ["CASH_SUPPLY"]
        assert register.json()[0]["movementType"] == "deposit"

    def test_seller_cannot_read_audit_trail(self, client: TestClient, api_seller, headers_for):
        assert client.get("/audit-logs", headers=headers_for(api_seller)).status_code == 403
