"""
Integration tests for UserService: authentication, accounts and permission profiles.
"""

import pytest

from shopdesk.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    RemoteDataError,
    ValidationError,
)
from shopdesk.domain.models import ADMIN_PROFILE_ID, AuditAction
from shopdesk.repositories.sqlalchemy import SqlAlchemyAuthProvider
from shopdesk.services import ProfileUpdate, UserCreate, UserService, UserUpdate


# =============================================================================
# LOGIN TESTS
# =============================================================================


class TestLogin:
    def test_login_returns_profile_and_audits(self, user_service, audit_service, seller_user):
        user = user_service.login(seller_user.email, "secret123")

        assert user.id == seller_user.id
        assert user.permission_profile_id == "profile-seller"
        logins = [e for e in audit_service.get_audit_logs() if e.action == AuditAction.LOGIN]
        assert [e.user_id for e in logins] == [seller_user.id]

    def test_login_email_is_case_insensitive(self, user_service, seller_user):
        assert user_service.login(seller_user.email.upper(), "secret123").id == seller_user.id

    def test_wrong_password(self, user_service, seller_user):
        with pytest.raises(AuthorizationError):
            user_service.login(seller_user.email, "wrong-password")

    @pytest.mark.parametrize("email,password", [("", "secret123"), ("a@b.co", "")])
    def test_missing_credentials(self, user_service, email, password):
        with pytest.raises(ValidationError):
            user_service.login(email, password)

    def test_deactivated_user_is_signed_out(self, user_service, auth, seller_user, admin_user):
        """
        GIVEN a seller deactivated by an administrator
        WHEN the seller logs in with the right password
        THEN login fails and no session remains signed in
        """
        user_service.deactivate_user(seller_user.id, admin_user)

        with pytest.raises(AuthorizationError, match="deactivated"):
            user_service.login(seller_user.email, "secret123")

        assert auth.get_user() is None

    def test_missing_profile_falls_back_to_admin_stub(self, user_service, session_factory):
        external = SqlAlchemyAuthProvider(session_factory, bcrypt_rounds=4, provision_profiles=False)
        auth_user = external.sign_up("owner@shop.test", "secret123", {"name": "Owner"})

        user = user_service.login("owner@shop.test", "secret123")

        assert user.id == auth_user.id
        assert user.is_admin
        assert user.name == "Owner"

    def test_logout_clears_cache(self, user_service, cache, seller_user):
        user_service.list_users()
        assert cache.keys()

        user_service.logout(seller_user.id, seller_user.name)

        assert cache.keys() == []

    def test_server_logout_keeps_shared_state(self, user_service, audit_service, cache, seller_user):
        """
        GIVEN a cache shared with other users
        WHEN a user logs out without ending the local session
        THEN the logout is audited and the cache survives
        """
        user_service.list_users()

        user_service.logout(seller_user.id, seller_user.name, end_local_session=False)

        assert "users" in cache.keys()
        logouts = [e for e in audit_service.get_audit_logs() if e.action == AuditAction.LOGOUT]
        assert [e.user_id for e in logouts] == [seller_user.id]


# =============================================================================
# ACCOUNT TESTS
# =============================================================================


class TestAccounts:
    def test_add_user_applies_profile_fields(self, user_service, admin_user):
        user = user_service.add_user(UserCreate(
            name=" Maria ", email="Maria@Shop.test", password="secret123", phone="11999998888",
        ), actor=admin_user)

        assert user.name == "Maria"
        assert user.email == "maria@shop.test"
        assert user.phone == "11999998888"
        assert user.active

    @pytest.mark.parametrize("data", [
        UserCreate(name="", email="x@shop.test", password="secret123"),
        UserCreate(name="X", email="not-an-email", password="secret123"),
        UserCreate(name="X", email="x@shop.test", password="123"),
    ])
    def test_invalid_input_rejected(self, user_service, data):
        with pytest.raises(ValidationError):
            user_service.add_user(data)

    def test_duplicate_email_rejected(self, user_service, seller_user):
        with pytest.raises(ValidationError) as exc_info:
            user_service.add_user(UserCreate(name="Dup", email=seller_user.email, password="secret123"))

        assert exc_info.value.code == "EMAIL_TAKEN"

    def test_profile_never_provisioned(self, remote, session_factory, cache, audit_service, call):
        """
        GIVEN a backend that does not create the profile row on sign-up
        WHEN a user is added
        THEN polling gives up with PROFILE_NOT_PROVISIONED
        """
        slow_backend = UserService(
            remote,
            SqlAlchemyAuthProvider(session_factory, bcrypt_rounds=4, provision_profiles=False),
            cache,
            audit_service,
            call=call,
            poll_interval_seconds=0.0,
            max_poll_attempts=2,
            sleep=lambda seconds: None,
        )

        with pytest.raises(RemoteDataError) as exc_info:
            slow_backend.add_user(UserCreate(name="Ghost", email="ghost@shop.test", password="secret123"))

        assert exc_info.value.code == "PROFILE_NOT_PROVISIONED"

    def test_deactivate_is_soft_delete(self, user_service, remote, seller_user, admin_user):
        deactivated = user_service.deactivate_user(seller_user.id, admin_user)

        assert deactivated.active is False
        assert remote.get("users", seller_user.id) is not None
        assert seller_user.id not in [u.id for u in user_service.list_users()]
        assert seller_user.id in [u.id for u in user_service.list_users(include_inactive=True)]

    def test_cannot_deactivate_self(self, user_service, admin_user):
        with pytest.raises(ValidationError):
            user_service.deactivate_user(admin_user.id, admin_user)

    def test_get_unknown_user(self, user_service):
        with pytest.raises(NotFoundError):
            user_service.get_user("nobody")

    def test_update_fields(self, user_service, seller_user, admin_user):
        updated = user_service.update_user(
            seller_user.id, UserUpdate(name="Seller Renamed", phone="1133334444"), admin_user.id
        )

        assert updated.name == "Seller Renamed"
        assert user_service.get_user(seller_user.id).phone == "1133334444"

    def test_password_change_only_for_own_account(self, user_service, seller_user, admin_user):
        with pytest.raises(AuthorizationError):
            user_service.update_user(seller_user.id, UserUpdate(password="newpass1"), admin_user.id)

    def test_own_password_change(self, user_service, seller_user):
        user_service.login(seller_user.email, "secret123")

        user_service.update_user(seller_user.id, UserUpdate(password="newpass1"), seller_user.id)

        assert user_service.login(seller_user.email, "newpass1").id == seller_user.id
        with pytest.raises(AuthorizationError):
            user_service.login(seller_user.email, "secret123")


class TestFirstRun:
    def test_register_admin_once(self, user_service):
        assert not user_service.check_admin_exists()

        admin = user_service.register_admin("Owner", "owner@shop.test", "secret123")

        assert admin.is_admin
        assert user_service.check_admin_exists()
        with pytest.raises(ValidationError):
            user_service.register_admin("Another", "another@shop.test", "secret123")

    def test_default_profiles_seeded_once(self, user_service):
        user_service.ensure_default_profiles()
        user_service.ensure_default_profiles()

        ids = sorted(p.id for p in user_service.list_permission_profiles())
        assert ids == [ADMIN_PROFILE_ID, "profile-seller"]


# =============================================================================
# PERMISSION TESTS
# =============================================================================


class TestPermissions:
    def test_admin_has_every_grant(self, user_service, admin_user):
        assert user_service.is_admin(admin_user)
        assert user_service.has_permission(admin_user, "anything_at_all")

    def test_seller_has_no_management_grants(self, user_service, seller_user):
        assert not user_service.is_admin(seller_user)
        assert not user_service.has_permission(seller_user, "can_reopen_cash_session")
        assert not user_service.has_permission(seller_user, "can_manage_users")

    def test_custom_profile_grant(self, user_service, user_factory, admin_user):
        profile = user_service.add_permission_profile("Caixa", {"can_manage_all_cash_sessions": True}, admin_user)
        cashier = user_factory(permission_profile_id=profile.id)

        assert user_service.has_permission(cashier, "can_manage_all_cash_sessions")
        assert not user_service.has_permission(cashier, "can_manage_users")

    def test_update_profile(self, user_service, admin_user):
        profile = user_service.add_permission_profile("Estoque", {}, admin_user)

        updated = user_service.update_permission_profile(
            profile.id, ProfileUpdate(name="Estoquista", permissions={"can_manage_stock": True}), admin_user
        )

        assert updated.name == "Estoquista"
        assert user_service.get_permission_profile(profile.id).allows("can_manage_stock")

    def test_failed_profile_write_leaves_cached_grants_untouched(
        self, user_service, remote, monkeypatch, seller_user, admin_user
    ):
        """
        GIVEN the seller profile is cached
        WHEN an update granting the reopen permission fails to persist
        THEN the cached profile keeps its stored name and grants
        """
        user_service.list_permission_profiles()

        def reject(*args, **kwargs):
            raise RemoteDataError("write rejected")

        monkeypatch.setattr(remote, "update", reject)

        with pytest.raises(RemoteDataError):
            user_service.update_permission_profile(
                "profile-seller",
                ProfileUpdate(name="Hacked", permissions={"can_reopen_cash_session": True}),
                admin_user,
            )

        profile = user_service.get_permission_profile("profile-seller")
        assert profile.name == "Vendedor"
        assert not profile.allows("can_reopen_cash_session")
        assert not user_service.has_permission(seller_user, "can_reopen_cash_session")

    def test_update_unknown_profile(self, user_service, admin_user):
        with pytest.raises(NotFoundError):
            user_service.update_permission_profile("profile-x", ProfileUpdate(name="X"), admin_user)

    def test_admin_profile_cannot_be_deleted(self, user_service, admin_user):
        with pytest.raises(ValidationError):
            user_service.delete_permission_profile(ADMIN_PROFILE_ID, admin_user)

    def test_profile_in_use_cannot_be_deleted(self, user_service, seller_user, admin_user):
        with pytest.raises(ValidationError, match="1 active user"):
            user_service.delete_permission_profile("profile-seller", admin_user)

    def test_unused_profile_deleted(self, user_service, admin_user):
        profile = user_service.add_permission_profile("Temp", {}, admin_user)

        user_service.delete_permission_profile(profile.id, admin_user)

        assert user_service.get_permission_profile(profile.id) is None
