"""
Integration tests for SqlAlchemyRemoteDataService with SQLite.

Tests cover:
- Insert, get, update and delete of plain rows
- Equality and comparison filters, ordering and limits
- Translation of database errors into RemoteDataError
"""

import pytest

from shopdesk.core.exceptions import RemoteDataError, RemoteIntegrityError


@pytest.fixture
def brands(remote):
    for name in ("Apple", "Motorola", "Samsung", "Xiaomi"):
        remote.insert("brands", {"id": name.lower(), "name": name})
    return remote


class TestCrud:
    def test_insert_generates_id(self, remote):
        row = remote.insert("brands", {"name": "LG", "attributes": {"origin": "KR"}})

        assert row["id"]
        assert remote.get("brands", row["id"])["attributes"] == {"origin": "KR"}

    def test_unknown_columns_are_ignored(self, remote):
        row = remote.insert("brands", {"id": "b1", "name": "LG", "logo_url": "x"})

        assert "logo_url" not in row

    def test_get_missing_row(self, remote):
        assert remote.get("brands", "missing") is None

    def test_update(self, brands):
        updated = brands.update("brands", "apple", {"name": "Apple Inc"})

        assert updated["name"] == "Apple Inc"
        assert brands.get("brands", "apple")["name"] == "Apple Inc"

    def test_update_missing_row(self, remote):
        with pytest.raises(RemoteDataError) as exc_info:
            remote.update("brands", "missing", {"name": "X"})

        assert exc_info.value.code == "ROW_NOT_FOUND"

    def test_delete_and_delete_all(self, brands):
        brands.delete("brands", "apple")
        assert brands.count("brands") == 3

        assert brands.delete_all("brands") == 3
        assert brands.select("brands") == []

    def test_insert_many(self, remote):
        written = remote.insert_many("categories", [{"name": "Capas"}, {"name": "Cabos"}])

        assert written == 2
        assert remote.count("categories") == 2


class TestQueries:
    def test_equality_filter(self, brands):
        rows = brands.select("brands", filters={"name": "Samsung"})

        assert [r["id"] for r in rows] == ["samsung"]

    def test_range_filter_order_and_limit(self, brands):
        rows = brands.select(
            "brands",
            filters={"name": [("gte", "B"), ("lt", "X")]},
            order_by="name",
            descending=True,
            limit=1,
        )

        assert [r["name"] for r in rows] == ["Samsung"]

    def test_neq_filter_count(self, brands):
        assert brands.count("brands", {"name": ("neq", "Apple")}) == 3


class TestErrors:
    def test_unknown_table(self, remote):
        with pytest.raises(RemoteDataError) as exc_info:
            remote.select("customers")

        assert exc_info.value.code == "UNKNOWN_TABLE"

    def test_unknown_filter_column(self, brands):
        with pytest.raises(RemoteDataError) as exc_info:
            brands.select("brands", filters={"country": "BR"})

        assert exc_info.value.code == "UNKNOWN_COLUMN"

    def test_unsupported_operator(self, brands):
        with pytest.raises(RemoteDataError) as exc_info:
            brands.select("brands", filters={"name": ("like", "A%")})

        assert exc_info.value.code == "BAD_FILTER"

    def test_duplicate_primary_key_is_integrity_error(self, brands):
        with pytest.raises(RemoteIntegrityError):
            brands.insert("brands", {"id": "apple", "name": "Apple again"})

    def test_session_day_constraint(self, remote):
        """
        GIVEN a cash session row for a user and day
        WHEN another row with the same user and day is inserted
        THEN the storage constraint rejects it
        """
        base = {
            "user_id": "u1",
            "session_date": "2024-05-10",
            "open_time": "2024-05-10T12:00:00+00:00",
            "status": "open",
        }
        remote.insert("cash_sessions", {**base, "id": "s1", "display_id": 1})

        with pytest.raises(RemoteIntegrityError):
            remote.insert("cash_sessions", {**base, "id": "s2", "display_id": 2})
