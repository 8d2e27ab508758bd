"""Repository protocol definitions (interfaces)."""

from shopdesk.repositories.protocols.remote_data import RemoteDataService, Filters, Row
from shopdesk.repositories.protocols.auth_provider import AuthProvider

__all__ = [
    "RemoteDataService",
    "AuthProvider",
    "Filters",
    "Row",
]
