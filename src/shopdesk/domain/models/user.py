"""User and permission profile domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ADMIN_PROFILE_ID = "profile-admin"
SYSTEM_USER_ID = "system"


@dataclass
class PermissionProfile:
    """Named set of boolean grants (e.g. can_reopen_cash_session)."""

    id: str
    name: str
    permissions: dict[str, bool] = field(default_factory=dict)

    def allows(self, grant: str) -> bool:
        return bool(self.permissions.get(grant, False))


@dataclass
class User:
    """
    Application user profile.

    Never physically deleted: deactivation flips ``active`` so sessions and
    audit entries keep pointing at a real record.
    """

    id: str
    name: str
    email: str
    permission_profile_id: str
    phone: str = ""
    active: bool = True
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.permission_profile_id == ADMIN_PROFILE_ID


@dataclass(frozen=True)
class AuthUser:
    """Identity returned by the authentication provider."""

    id: str
    email: str
    name: Optional[str] = None
    created_at: Optional[datetime] = None
