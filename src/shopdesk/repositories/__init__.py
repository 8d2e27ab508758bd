"""Repository layer - remote data access abstractions and implementations."""

from shopdesk.repositories.protocols import RemoteDataService, AuthProvider

__all__ = [
    "RemoteDataService",
    "AuthProvider",
]
