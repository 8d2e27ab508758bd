"""SQLAlchemy implementations of the remote data service and auth provider."""

from shopdesk.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    init_db,
    init_db_with_url,
    reset_database,
    Base,
)
from shopdesk.repositories.sqlalchemy.remote_data import SqlAlchemyRemoteDataService
from shopdesk.repositories.sqlalchemy.auth_provider import (
    SqlAlchemyAuthProvider,
    hash_password,
    verify_password,
)

__all__ = [
    "get_engine",
    "get_session_factory",
    "init_db",
    "init_db_with_url",
    "reset_database",
    "Base",
    "SqlAlchemyRemoteDataService",
    "SqlAlchemyAuthProvider",
    "hash_password",
    "verify_password",
]
