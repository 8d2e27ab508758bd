"""Application context for in-process service management.

Owns the per-context state (cache, task queue, broadcaster endpoint) and
wires every service against it. The HTTP API and scripts both go through it.
"""

import time
from typing import Callable, Optional

from sqlalchemy import Engine
from sqlalchemy.orm import sessionmaker

from shopdesk.config.settings import Settings, get_settings, set_settings
from shopdesk.notifications import TelegramNotifier
from shopdesk.repositories.protocols import AuthProvider, RemoteDataService
from shopdesk.repositories.sqlalchemy import (
    Base,
    SqlAlchemyAuthProvider,
    SqlAlchemyRemoteDataService,
    get_session_factory,
    init_db,
    init_db_with_url,
)
from shopdesk.services import (
    AuditService,
    BackgroundTaskQueue,
    BackupService,
    BroadcastHub,
    CacheBroadcaster,
    CacheService,
    CashSessionService,
    NullBroadcaster,
    ParameterService,
    ProductService,
    RemoteCaller,
    SalesService,
    TaskQueue,
    UserService,
)


class AppContext:
    """
    Application context providing in-process access to all services.

    Collaborators may be injected (tests, a second context sharing a
    broadcast hub); anything left out is built from settings on first use.
    Contexts given the same ``hub`` invalidate each other's caches over the
    configured channel name.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine: Optional[Engine] = None,
        remote: Optional[RemoteDataService] = None,
        auth: Optional[AuthProvider] = None,
        broadcaster: Optional[CacheBroadcaster] = None,
        hub: Optional[BroadcastHub] = None,
        tasks: Optional[TaskQueue] = None,
        notifier: Optional[TelegramNotifier] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if settings is not None:
            set_settings(settings)
        self._engine = engine
        self._remote = remote
        self._auth = auth
        self._broadcaster = broadcaster
        self._hub = hub
        self._tasks = tasks
        self._notifier = notifier
        self._clock = clock
        self._sleep = sleep

        # Service instances (lazy initialized)
        self._cache: Optional[CacheService] = None
        self._call: Optional[RemoteCaller] = None
        self._audit: Optional[AuditService] = None
        self._users: Optional[UserService] = None
        self._cash_sessions: Optional[CashSessionService] = None
        self._products: Optional[ProductService] = None
        self._parameters: Optional[ParameterService] = None
        self._sales: Optional[SalesService] = None
        self._backup: Optional[BackupService] = None

    @property
    def settings(self) -> Settings:
        return get_settings()

    def initialize(self, database_url: Optional[str] = None) -> None:
        """Create the database tables, optionally pointing at another database first."""
        if self._engine is not None:
            Base.metadata.create_all(bind=self._engine)
        elif database_url:
            init_db_with_url(database_url)
        else:
            init_db()

    # Infrastructure accessors
    def _session_factory(self) -> sessionmaker:
        if self._engine is not None:
            return sessionmaker(
                autocommit=False, autoflush=False, expire_on_commit=False, bind=self._engine
            )
        return get_session_factory()

    @property
    def remote(self) -> RemoteDataService:
        if self._remote is None:
            self._remote = SqlAlchemyRemoteDataService(self._session_factory())
        return self._remote

    @property
    def auth(self) -> AuthProvider:
        if self._auth is None:
            self._auth = SqlAlchemyAuthProvider(self._session_factory())
        return self._auth

    @property
    def tasks(self) -> TaskQueue:
        if self._tasks is None:
            self._tasks = BackgroundTaskQueue(max_workers=self.settings.background_workers)
        return self._tasks

    @property
    def call(self) -> RemoteCaller:
        if self._call is None:
            settings = self.settings
            self._call = RemoteCaller(
                retries=settings.retry_attempts,
                delay_seconds=settings.retry_delay_seconds,
                timeout_seconds=settings.remote_timeout_seconds,
                sleep=self._sleep,
            )
        return self._call

    @property
    def cache(self) -> CacheService:
        if self._cache is None:
            broadcaster = self._broadcaster
            if broadcaster is None and self._hub is not None:
                broadcaster = self._hub.open(self.settings.cache_channel_name)
            self._cache = CacheService(
                broadcaster=broadcaster or NullBroadcaster(),
                default_ttl_seconds=self.settings.cache_ttl_seconds,
                clock=self._clock,
            )
        return self._cache

    @property
    def notifier(self) -> TelegramNotifier:
        if self._notifier is None:
            settings = self.settings
            self._notifier = TelegramNotifier(
                bot_token=settings.telegram_bot_token,
                chat_id=settings.telegram_chat_id,
                timeout=settings.notification_timeout_seconds,
            )
        return self._notifier

    # Service accessors
    @property
    def audit(self) -> AuditService:
        if self._audit is None:
            self._audit = AuditService(self.remote, self.cache, self.tasks, call=self.call)
        return self._audit

    @property
    def users(self) -> UserService:
        if self._users is None:
            settings = self.settings
            self._users = UserService(
                self.remote,
                self.auth,
                self.cache,
                self.audit,
                call=self.call,
                static_ttl_seconds=settings.static_cache_ttl_seconds,
                poll_interval_seconds=settings.provisioning_poll_interval_seconds,
                max_poll_attempts=settings.provisioning_max_attempts,
                sleep=self._sleep,
            )
        return self._users

    @property
    def cash_sessions(self) -> CashSessionService:
        if self._cash_sessions is None:
            self._cash_sessions = CashSessionService(
                self.remote,
                self.cache,
                self.audit,
                permissions=self.users,
                tasks=self.tasks,
                call=self.call,
            )
        return self._cash_sessions

    @property
    def products(self) -> ProductService:
        if self._products is None:
            self._products = ProductService(
                self.remote,
                self.cache,
                self.audit,
                call=self.call,
                tasks=self.tasks,
                notifier=self.notifier,
            )
        return self._products

    @property
    def parameters(self) -> ParameterService:
        if self._parameters is None:
            self._parameters = ParameterService(
                self.remote,
                self.cache,
                self.audit,
                call=self.call,
                ttl_seconds=self.settings.static_cache_ttl_seconds,
            )
        return self._parameters

    @property
    def sales(self) -> SalesService:
        if self._sales is None:
            self._sales = SalesService(
                self.remote,
                self.cache,
                self.audit,
                self.products,
                self.tasks,
                notifier=self.notifier,
                call=self.call,
            )
        return self._sales

    @property
    def backup(self) -> BackupService:
        if self._backup is None:
            self._backup = BackupService(self.remote, self.cache, self.audit, call=self.call)
        return self._backup

    def close(self) -> None:
        """Finish pending side effects and detach from the broadcast channel."""
        if self._tasks is not None:
            self._tasks.shutdown()
        if self._cache is not None:
            self._cache.close()


# Global application context (one per process)
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: Optional[AppContext]) -> None:
    """Set (or clear) the global application context."""
    global _app_context
    _app_context = context
