"""Full backup and restore of the business tables."""

import logging
from typing import Any, Optional

from shopdesk.core.exceptions import ValidationError
from shopdesk.domain.models import AuditAction, AuditEntity, User
from shopdesk.repositories.protocols import RemoteDataService
from shopdesk.services.audit_service import AuditService
from shopdesk.services.cache_service import CacheService
from shopdesk.services.resilience import RemoteCaller

logger = logging.getLogger(__name__)

# Dependency order: referenced tables first. Credentials are not part of a backup.
BACKUP_TABLES = (
    "permissions_profiles",
    "users",
    "brands",
    "categories",
    "grades",
    "product_conditions",
    "storage_locations",
    "warranties",
    "payment_methods",
    "receipt_terms",
    "products",
    "cash_sessions",
    "sales",
    "audit_logs",
    "cash_register_audit_logs",
)

BackupData = dict[str, list[dict[str, Any]]]


class BackupService:
    def __init__(
        self,
        remote: RemoteDataService,
        cache: CacheService,
        audit: AuditService,
        call: Optional[RemoteCaller] = None,
    ):
        self._remote = remote
        self._cache = cache
        self._audit = audit
        self._call = call or RemoteCaller()

    def get_full_backup(self) -> BackupData:
        """Every row of every backup table, keyed by table name."""
        backup: BackupData = {}
        for table in BACKUP_TABLES:
            backup[table] = self._call(lambda: self._remote.select(table), f"backup {table}")
        logger.info("Backup read %d rows", sum(len(rows) for rows in backup.values()))
        return backup

    def restore_full_backup(self, data: BackupData, actor: User) -> None:
        """
        Replace the contents of every backup table with ``data``.

        Raises:
            ValidationError: a table is missing from ``data``.
        """
        missing = [t for t in BACKUP_TABLES if not isinstance(data.get(t), list)]
        if missing:
            raise ValidationError(
                f"Backup file is invalid or corrupted (missing tables: {', '.join(missing)})",
                code="INVALID_BACKUP",
            )

        for table in reversed(BACKUP_TABLES):
            self._call(lambda: self._remote.delete_all(table), f"clear {table}")
        for table in BACKUP_TABLES:
            rows = data[table]
            if rows:
                self._call(lambda: self._remote.insert_many(table, rows), f"restore {table}")

        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.BACKUP_RESTORE, AuditEntity.SYSTEM, actor.id,
            "Sistema restaurado a partir de backup completo.",
        )
        self._cache.clear_all()
        logger.info("Backup restored by %s", actor.id)
