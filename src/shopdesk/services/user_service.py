"""Users, authentication and permission profiles."""

import logging
import re
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from shopdesk.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    RemoteDataError,
    ValidationError,
)
from shopdesk.domain.models import (
    ADMIN_PROFILE_ID,
    AuditAction,
    AuditEntity,
    PermissionProfile,
    User,
)
from shopdesk.repositories.mappers import profile_from_row, profile_to_row, user_from_row
from shopdesk.repositories.protocols import AuthProvider, RemoteDataService
from shopdesk.services.audit_service import AuditService
from shopdesk.services.cache_service import STATIC_TTL_SECONDS, CacheService
from shopdesk.services.resilience import RemoteCaller

logger = logging.getLogger(__name__)

USERS_KEY = "users"
PROFILES_KEY = "permission_profiles"
SELLER_PROFILE_ID = "profile-seller"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

DEFAULT_PROFILES = (
    PermissionProfile(
        id=ADMIN_PROFILE_ID,
        name="Administrador",
        permissions={
            "can_manage_users": True,
            "can_reopen_cash_session": True,
            "can_manage_all_cash_sessions": True,
        },
    ),
    PermissionProfile(
        id=SELLER_PROFILE_ID,
        name="Vendedor",
        permissions={
            "can_manage_users": False,
            "can_reopen_cash_session": False,
            "can_manage_all_cash_sessions": False,
        },
    ),
)


@dataclass
class UserCreate:
    """Input data for creating a user account."""

    name: str
    email: str
    password: str
    permission_profile_id: str = SELLER_PROFILE_ID
    phone: str = ""


@dataclass
class UserUpdate:
    """Partial update for a user. ``password`` only applies to the acting user's own account."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    permission_profile_id: Optional[str] = None
    active: Optional[bool] = None
    password: Optional[str] = None


@dataclass
class ProfileUpdate:
    name: Optional[str] = None
    permissions: dict[str, bool] = field(default_factory=dict)


class UserService:
    """
    Service for user accounts and permission profiles.

    Users are never physically deleted; deactivation keeps their sessions and
    audit entries pointing at a real record.
    """

    def __init__(
        self,
        remote: RemoteDataService,
        auth: AuthProvider,
        cache: CacheService,
        audit: AuditService,
        call: Optional[RemoteCaller] = None,
        static_ttl_seconds: float = STATIC_TTL_SECONDS,
        poll_interval_seconds: float = 0.5,
        max_poll_attempts: int = 10,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._remote = remote
        self._auth = auth
        self._cache = cache
        self._audit = audit
        self._call = call or RemoteCaller()
        self._static_ttl = static_ttl_seconds
        self._poll_interval = poll_interval_seconds
        self._max_poll_attempts = max_poll_attempts
        self._sleep = sleep

    # ===== Authentication =====

    def login(self, email: str, password: str) -> User:
        """
        Sign in and return the user's profile.

        Raises:
            ValidationError: e-mail or password missing.
            AuthorizationError: bad credentials or deactivated account.
        """
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("E-mail and password are required")

        auth_user = self._call(
            lambda: self._auth.sign_in_with_password(email, password), "sign in"
        )
        user = self.get_profile(auth_user.id)
        if user is None:
            logger.warning("No profile row for %s, using administrator stub", auth_user.email)
            user = User(
                id=auth_user.id,
                name=auth_user.name or auth_user.email,
                email=auth_user.email,
                permission_profile_id=ADMIN_PROFILE_ID,
                created_at=auth_user.created_at,
            )
        if not user.active:
            self._auth.sign_out()
            raise AuthorizationError("This user account has been deactivated")

        self._audit.add_audit_log(
            user.id, user.name, AuditAction.LOGIN, AuditEntity.USER, user.id, "Login"
        )
        return user

    def logout(self, user_id: str, user_name: str, end_local_session: bool = True) -> None:
        """
        Record the logout.

        With ``end_local_session`` the auth provider is signed out and the whole
        cache is dropped. Only a single-user context should do that; a server
        shares both across every caller.
        """
        self._audit.add_audit_log(
            user_id, user_name, AuditAction.LOGOUT, AuditEntity.USER, user_id, "Logout"
        )
        if end_local_session:
            self._auth.sign_out()
            self._cache.clear_all()

    # ===== Users =====

    def get_profile(self, user_id: str) -> Optional[User]:
        row = self._call(lambda: self._remote.get("users", user_id), "get user")
        return user_from_row(row) if row else None

    def get_user(self, user_id: str) -> User:
        user = self.get_profile(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def list_users(self, include_inactive: bool = False) -> list[User]:
        def fetch() -> list[User]:
            rows = self._call(
                lambda: self._remote.select("users", order_by="name"), "list users"
            )
            return [user_from_row(r) for r in rows]

        users = self._cache.fetch_with_cache(USERS_KEY, fetch)
        if include_inactive:
            return list(users)
        return [u for u in users if u.active]

    def add_user(self, data: UserCreate, actor: Optional[User] = None) -> User:
        """
        Create credentials and wait for the backend to provision the profile row.

        Raises:
            ValidationError: invalid input or e-mail already registered.
            RemoteDataError: the profile never appeared.
        """
        self._validate_user_create(data)
        auth_user = self._call(
            lambda: self._auth.sign_up(
                data.email.strip().lower(),
                data.password,
                {"name": data.name.strip(), "permission_profile_id": data.permission_profile_id},
            ),
            "sign up",
        )

        user = self._wait_for_profile(auth_user.id)
        changes = {
            "name": data.name.strip(),
            "phone": data.phone,
            "permission_profile_id": data.permission_profile_id,
        }
        row = self._call(
            lambda: self._remote.update("users", user.id, changes), "update new user"
        )
        user = user_from_row(row)
        self._cache.clear_cache([USERS_KEY])

        if actor is not None:
            self._audit.add_audit_log(
                actor.id, actor.name, AuditAction.CREATE, AuditEntity.USER, user.id,
                f"Usuário {user.name} criado",
            )
        logger.info("User %s created", user.email)
        return user

    def update_user(self, user_id: str, data: UserUpdate, acting_user_id: str) -> User:
        if data.password is not None:
            if user_id != acting_user_id:
                raise AuthorizationError("You can only change your own password")
            if len(data.password) < 6:
                raise ValidationError("Password must have at least 6 characters")
            self._call(lambda: self._auth.update_user(data.password), "update password")

        changes = {
            key: value
            for key, value in {
                "name": data.name,
                "email": data.email,
                "phone": data.phone,
                "permission_profile_id": data.permission_profile_id,
                "active": data.active,
            }.items()
            if value is not None
        }
        if changes:
            row = self._call(
                lambda: self._remote.update("users", user_id, changes), "update user"
            )
            user = user_from_row(row)
        else:
            user = self.get_user(user_id)
        self._cache.clear_cache([USERS_KEY])
        return user

    def deactivate_user(self, user_id: str, actor: User) -> User:
        """Soft delete: the row stays, ``active`` becomes False."""
        if user_id == actor.id:
            raise ValidationError("You cannot deactivate your own account")
        user = self.get_user(user_id)
        row = self._call(
            lambda: self._remote.update("users", user_id, {"active": False}),
            "deactivate user",
        )
        self._cache.clear_cache([USERS_KEY])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.DELETE, AuditEntity.USER, user_id,
            f"Usuário {user.name} desativado",
        )
        return user_from_row(row)

    def check_admin_exists(self) -> bool:
        total = self._call(
            lambda: self._remote.count(
                "users", {"permission_profile_id": ADMIN_PROFILE_ID, "active": True}
            ),
            "count administrators",
        )
        return total > 0

    def register_admin(self, name: str, email: str, password: str) -> User:
        """First-run setup: create the default profiles and the first administrator."""
        if self.check_admin_exists():
            raise ValidationError("An administrator is already registered")
        self.ensure_default_profiles()
        return self.add_user(UserCreate(
            name=name, email=email, password=password, permission_profile_id=ADMIN_PROFILE_ID,
        ))

    # ===== Permission profiles =====

    def ensure_default_profiles(self) -> None:
        existing = {p.id for p in self.list_permission_profiles()}
        missing = [p for p in DEFAULT_PROFILES if p.id not in existing]
        if not missing:
            return
        self._call(
            lambda: self._remote.insert_many(
                "permissions_profiles", [profile_to_row(p) for p in missing]
            ),
            "seed permission profiles",
        )
        self._cache.clear_cache([PROFILES_KEY])

    def list_permission_profiles(self) -> list[PermissionProfile]:
        def fetch() -> list[PermissionProfile]:
            rows = self._call(
                lambda: self._remote.select("permissions_profiles", order_by="name"),
                "list permission profiles",
            )
            return [profile_from_row(r) for r in rows]

        return self._cache.fetch_with_cache(PROFILES_KEY, fetch, ttl_seconds=self._static_ttl)

    def get_permission_profile(self, profile_id: str) -> Optional[PermissionProfile]:
        for profile in self.list_permission_profiles():
            if profile.id == profile_id:
                return profile
        return None

    def add_permission_profile(self, name: str, permissions: dict[str, bool], actor: User) -> PermissionProfile:
        if not (name or "").strip():
            raise ValidationError("Profile name is required")
        profile = PermissionProfile(
            id=f"profile-{uuid.uuid4().hex[:12]}", name=name.strip(), permissions=dict(permissions)
        )
        self._call(
            lambda: self._remote.insert("permissions_profiles", profile_to_row(profile)),
            "add permission profile",
        )
        self._cache.clear_cache([PROFILES_KEY])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.CREATE, AuditEntity.PERMISSION_PROFILE,
            profile.id, f"Perfil {profile.name} criado",
        )
        return profile

    def update_permission_profile(self, profile_id: str, data: ProfileUpdate, actor: User) -> PermissionProfile:
        """Apply ``data`` to a profile. The cached copy only changes after the write succeeds."""
        current = self.get_permission_profile(profile_id)
        if current is None:
            raise NotFoundError("Permission profile", profile_id)
        profile = replace(
            current,
            name=data.name.strip() if data.name is not None else current.name,
            permissions={**current.permissions, **data.permissions},
        )
        self._call(
            lambda: self._remote.update("permissions_profiles", profile_id, {
                "name": profile.name,
                "permissions": dict(profile.permissions),
            }),
            "update permission profile",
        )
        self._cache.clear_cache([PROFILES_KEY])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.UPDATE, AuditEntity.PERMISSION_PROFILE,
            profile_id, f"Perfil {profile.name} atualizado",
        )
        return profile

    def delete_permission_profile(self, profile_id: str, actor: User) -> None:
        if profile_id == ADMIN_PROFILE_ID:
            raise ValidationError("The administrator profile cannot be deleted")
        in_use = self._call(
            lambda: self._remote.count(
                "users", {"permission_profile_id": profile_id, "active": True}
            ),
            "count profile users",
        )
        if in_use:
            raise ValidationError(f"Profile is assigned to {in_use} active user(s)")
        self._call(
            lambda: self._remote.delete("permissions_profiles", profile_id),
            "delete permission profile",
        )
        self._cache.clear_cache([PROFILES_KEY])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.DELETE, AuditEntity.PERMISSION_PROFILE,
            profile_id, "Perfil removido",
        )

    # ===== Permission checks =====

    def is_admin(self, user: User) -> bool:
        return user.is_admin

    def has_permission(self, user: User, grant: str) -> bool:
        if user.is_admin:
            return True
        profile = self.get_permission_profile(user.permission_profile_id)
        return profile is not None and profile.allows(grant)

    # ===== Internals =====

    def _wait_for_profile(self, user_id: str) -> User:
        for attempt in range(self._max_poll_attempts):
            user = self.get_profile(user_id)
            if user is not None:
                return user
            logger.debug("Profile for %s not provisioned yet (attempt %d)", user_id, attempt + 1)
            self._sleep(self._poll_interval)
        raise RemoteDataError(
            f"User profile was not provisioned for {user_id}", code="PROFILE_NOT_PROVISIONED"
        )

    @staticmethod
    def _validate_user_create(data: UserCreate) -> None:
        if not (data.name or "").strip():
            raise ValidationError("Name is required")
        if not _EMAIL_RE.match((data.email or "").strip()):
            raise ValidationError(f"Invalid e-mail: {data.email}")
        if not data.password or len(data.password) < 6:
            raise ValidationError("Password must have at least 6 characters")
