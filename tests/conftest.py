"""
Pytest configuration and fixtures for shopdesk tests.

This module provides:
- In-memory SQLite database fixtures
- A controllable clock and a recording broadcaster for the cache
- Services wired with an inline task queue and no-op retry sleeps
- Factory helpers for users and stored cash sessions
- A FastAPI test client backed by the test database
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import sessionmaker

from shopdesk.app_context import AppContext, set_app_context
from shopdesk.config.settings import Settings, reset_settings, set_settings
from shopdesk.core.timezone import now_local
from shopdesk.domain.models import ADMIN_PROFILE_ID, CashSession, SessionStatus, User
from shopdesk.main import app
from shopdesk.repositories.mappers import session_to_row
from shopdesk.repositories.sqlalchemy import (
    Base,
    SqlAlchemyAuthProvider,
    SqlAlchemyRemoteDataService,
)
from shopdesk.services import (
    AuditService,
    BackupService,
    CacheService,
    CashSessionService,
    ImmediateTaskQueue,
    ParameterService,
    ProductService,
    RemoteCaller,
    SalesService,
    UserCreate,
    UserService,
)


# =============================================================================
# TEST DOUBLES
# =============================================================================


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingBroadcaster:
    """Broadcaster that remembers what was posted and lets tests inject messages."""

    def __init__(self):
        self.posted: list[dict] = []
        self.handler = None
        self.closed = False

    def post(self, message: dict) -> None:
        self.posted.append(message)

    def listen(self, handler) -> None:
        self.handler = handler

    def close(self) -> None:
        self.closed = True

    def receive(self, message: dict) -> None:
        self.handler(message)


def no_sleep(seconds: float) -> None:
    pass


# =============================================================================
# SETTINGS & DATABASE FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def test_settings():
    """Deterministic settings for every test."""
    settings = Settings(
        _env_file=None,
        database_url="sqlite://",
        local_timezone="America/Sao_Paulo",
        retry_delay_seconds=0.0,
        remote_timeout_seconds=5.0,
        provisioning_poll_interval_seconds=0.0,
        provisioning_max_attempts=3,
    )
    set_settings(settings)
    yield settings
    reset_settings()


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=test_engine
    )


@pytest.fixture
def remote(session_factory) -> SqlAlchemyRemoteDataService:
    """Provide the row store backed by the test database."""
    return SqlAlchemyRemoteDataService(session_factory)


@pytest.fixture
def auth(session_factory) -> SqlAlchemyAuthProvider:
    # Minimum bcrypt cost keeps the suite fast
    return SqlAlchemyAuthProvider(session_factory, bcrypt_rounds=4)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


@pytest.fixture
def tasks() -> ImmediateTaskQueue:
    return ImmediateTaskQueue()


@pytest.fixture
def call() -> RemoteCaller:
    return RemoteCaller(retries=3, delay_seconds=0.0, timeout_seconds=5.0, sleep=no_sleep)


@pytest.fixture
def cache(broadcaster, clock) -> CacheService:
    return CacheService(broadcaster=broadcaster, default_ttl_seconds=300, clock=clock)


@pytest.fixture
def audit_service(remote, cache, tasks, call) -> AuditService:
    return AuditService(remote, cache, tasks, call=call)


@pytest.fixture
def user_service(remote, auth, cache, audit_service, call) -> UserService:
    return UserService(
        remote,
        auth,
        cache,
        audit_service,
        call=call,
        static_ttl_seconds=1800,
        poll_interval_seconds=0.0,
        max_poll_attempts=3,
        sleep=no_sleep,
    )


@pytest.fixture
def cash_session_service(remote, cache, audit_service, user_service, tasks, call) -> CashSessionService:
    return CashSessionService(
        remote, cache, audit_service, permissions=user_service, tasks=tasks, call=call
    )


@pytest.fixture
def product_service(remote, cache, audit_service, call, tasks, notifier) -> ProductService:
    return ProductService(remote, cache, audit_service, call=call, tasks=tasks, notifier=notifier)


@pytest.fixture
def parameter_service(remote, cache, audit_service, call) -> ParameterService:
    return ParameterService(remote, cache, audit_service, call=call)


@pytest.fixture
def notifier() -> MagicMock:
    mock = MagicMock()
    mock.send_sale_notification.return_value = True
    return mock


@pytest.fixture
def sales_service(remote, cache, audit_service, product_service, tasks, notifier, call) -> SalesService:
    return SalesService(
        remote, cache, audit_service, product_service, tasks, notifier=notifier, call=call
    )


@pytest.fixture
def backup_service(remote, cache, audit_service, call) -> BackupService:
    return BackupService(remote, cache, audit_service, call=call)


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def user_factory(user_service) -> Callable[..., User]:
    """Factory for creating users through the auth provider."""
    user_service.ensure_default_profiles()

    def _create_user(
        name: Optional[str] = None,
        permission_profile_id: str = "profile-seller",
        password: str = "secret123",
        email: Optional[str] = None,
    ) -> User:
        suffix = uuid.uuid4().hex[:8]
        return user_service.add_user(UserCreate(
            name=name or f"User {suffix}",
            email=email or f"user-{suffix}@shop.test",
            password=password,
            permission_profile_id=permission_profile_id,
        ))

    return _create_user


@pytest.fixture
def admin_user(user_factory) -> User:
    return user_factory(name="Admin", permission_profile_id=ADMIN_PROFILE_ID)


@pytest.fixture
def seller_user(user_factory) -> User:
    return user_factory(name="Seller")


@pytest.fixture
def other_seller(user_factory) -> User:
    return user_factory(name="Other Seller")


@pytest.fixture
def stored_session_factory(remote) -> Callable[..., CashSession]:
    """Write a cash session row directly, e.g. one opened on an earlier day."""
    counter = {"display_id": 100}

    def _store(
        user_id: str,
        open_time: Optional[datetime] = None,
        status: SessionStatus = SessionStatus.OPEN,
        opening_balance: Decimal = Decimal("100"),
        **extra,
    ) -> CashSession:
        counter["display_id"] += 1
        session = CashSession(
            id=str(uuid.uuid4()),
            user_id=user_id,
            display_id=counter["display_id"],
            open_time=open_time or now_local(),
            opening_balance=opening_balance,
            cash_in_register=opening_balance,
            status=status,
            **extra,
        )
        remote.insert("cash_sessions", session_to_row(session))
        return session

    return _store


@pytest.fixture
def yesterday_morning() -> datetime:
    return (now_local() - timedelta(days=1)).replace(hour=10, minute=0, second=0, microsecond=0)


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def app_context(test_engine, session_factory, tasks) -> AppContext:
    ctx = AppContext(
        engine=test_engine,
        auth=SqlAlchemyAuthProvider(session_factory, bcrypt_rounds=4),
        tasks=tasks,
        notifier=MagicMock(),
        sleep=no_sleep,
    )
    set_app_context(ctx)
    yield ctx
    set_app_context(None)


@pytest.fixture
def client(app_context) -> TestClient:
    """Provide FastAPI test client with test database."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def api_admin(app_context) -> User:
    users = app_context.users
    users.ensure_default_profiles()
    return users.add_user(UserCreate(
        name="Admin", email="admin@shop.test", password="secret123",
        permission_profile_id=ADMIN_PROFILE_ID,
    ))


@pytest.fixture
def api_seller(app_context) -> User:
    users = app_context.users
    users.ensure_default_profiles()
    return users.add_user(UserCreate(
        name="Seller", email="seller@shop.test", password="secret123",
    ))


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    """Build the request headers identifying the acting user."""

    def _headers(user: User) -> dict[str, str]:
        return {"X-User-Id": user.id}

    return _headers
