"""Authentication sub-interface of the remote data service."""

from typing import Any, Optional, Protocol

from shopdesk.domain.models import AuthUser


class AuthProvider(Protocol):
    """
    Interface for credential management.

    Signing up may asynchronously provision a row in the ``users`` table on
    the backend side; callers must not assume it exists immediately.
    """

    def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        """Authenticate and make the user current. Raises AuthorizationError."""
        ...

    def sign_up(self, email: str, password: str, metadata: Optional[dict[str, Any]] = None) -> AuthUser:
        """Create credentials. Raises ValidationError when the e-mail is taken."""
        ...

    def sign_out(self) -> None:
        """Forget the current user."""
        ...

    def update_user(self, password: str) -> AuthUser:
        """Change the current user's password."""
        ...

    def get_user(self) -> Optional[AuthUser]:
        """Return the currently signed-in user, if any."""
        ...
