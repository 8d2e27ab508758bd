"""SQLAlchemy implementation of AuthProvider with bcrypt-hashed credentials."""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from shopdesk.core.exceptions import AuthorizationError, ValidationError
from shopdesk.domain.models import AuthUser
from shopdesk.repositories.sqlalchemy.orm_models import AuthCredentialORM, UserORM

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_ID = "profile-seller"


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against its bcrypt hash (timing-safe)."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class SqlAlchemyAuthProvider:
    """
    Credential store living next to the row store.

    ``sign_up`` also provisions the ``users`` profile row, standing in for the
    database trigger the hosted backend runs. With ``provision_profiles=False``
    the profile is left for an external process to create.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        bcrypt_rounds: int = 12,
        provision_profiles: bool = True,
    ):
        self._session_factory = session_factory
        self._rounds = bcrypt_rounds
        self._provision_profiles = provision_profiles
        self._current: Optional[AuthUser] = None
        self._lock = threading.Lock()

    def sign_in_with_password(self, email: str, password: str) -> AuthUser:
        with self._session_factory() as db:
            cred = db.query(AuthCredentialORM).filter(
                AuthCredentialORM.email == email.strip().lower()
            ).first()
            if cred is None or not verify_password(password, cred.password_hash):
                raise AuthorizationError("Invalid login credentials")
            user = self._to_auth_user(cred)
        with self._lock:
            self._current = user
        return user

    def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuthUser:
        metadata = metadata or {}
        normalized = email.strip().lower()
        created_at = datetime.now(timezone.utc).isoformat()
        cred = AuthCredentialORM(
            id=str(uuid.uuid4()),
            email=normalized,
            password_hash=hash_password(password, self._rounds),
            name=metadata.get("name"),
            created_at=created_at,
        )
        with self._session_factory() as db:
            db.add(cred)
            if self._provision_profiles:
                db.add(UserORM(
                    id=cred.id,
                    name=metadata.get("name") or normalized,
                    email=normalized,
                    phone="",
                    permission_profile_id=metadata.get("permission_profile_id", DEFAULT_PROFILE_ID),
                    active=True,
                    created_at=created_at,
                ))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise ValidationError(
                    f"User already registered: {normalized}", code="EMAIL_TAKEN"
                ) from None
            user = self._to_auth_user(cred)
        logger.info("Signed up %s", normalized)
        return user

    def sign_out(self) -> None:
        with self._lock:
            self._current = None

    def update_user(self, password: str) -> AuthUser:
        current = self.get_user()
        if current is None:
            raise AuthorizationError("No signed-in user")
        with self._session_factory() as db:
            cred = db.get(AuthCredentialORM, current.id)
            if cred is None:
                raise AuthorizationError("Signed-in user no longer exists")
            cred.password_hash = hash_password(password, self._rounds)
            db.commit()
        return current

    def get_user(self) -> Optional[AuthUser]:
        with self._lock:
            return self._current

    @staticmethod
    def _to_auth_user(cred: AuthCredentialORM) -> AuthUser:
        return AuthUser(
            id=cred.id,
            email=cred.email,
            name=cred.name,
            created_at=datetime.fromisoformat(cred.created_at) if cred.created_at else None,
        )
