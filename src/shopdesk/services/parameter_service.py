"""Near-static lookup tables (brands, categories, payment methods, ...)."""

import uuid
from typing import Any, Optional

from shopdesk.core.exceptions import NotFoundError, ValidationError
from shopdesk.domain.models import AuditAction, AuditEntity, ParameterItem, User
from shopdesk.repositories.mappers import parameter_from_row, parameter_to_row
from shopdesk.repositories.protocols import RemoteDataService
from shopdesk.services.audit_service import AuditService
from shopdesk.services.cache_service import STATIC_TTL_SECONDS, CacheService
from shopdesk.services.resilience import RemoteCaller

# Each table is also its cache key.
PARAMETER_ENTITIES: dict[str, AuditEntity] = {
    "brands": AuditEntity.BRAND,
    "categories": AuditEntity.CATEGORY,
    "grades": AuditEntity.GRADE,
    "product_conditions": AuditEntity.CONDITION,
    "storage_locations": AuditEntity.STORAGE_LOCATION,
    "warranties": AuditEntity.WARRANTY,
    "payment_methods": AuditEntity.PAYMENT_METHOD,
    "receipt_terms": AuditEntity.RECEIPT_TERM,
}


class ParameterService:
    """Generic CRUD over the parameter tables, cached with the long TTL."""

    def __init__(
        self,
        remote: RemoteDataService,
        cache: CacheService,
        audit: AuditService,
        call: Optional[RemoteCaller] = None,
        ttl_seconds: float = STATIC_TTL_SECONDS,
    ):
        self._remote = remote
        self._cache = cache
        self._audit = audit
        self._call = call or RemoteCaller()
        self._ttl = ttl_seconds

    def list_items(self, table: str) -> list[ParameterItem]:
        self._entity(table)

        def fetch() -> list[ParameterItem]:
            rows = self._call(
                lambda: self._remote.select(table, order_by="name"), f"list {table}"
            )
            return [parameter_from_row(r) for r in rows]

        return self._cache.fetch_with_cache(table, fetch, ttl_seconds=self._ttl)

    def add_item(
        self,
        table: str,
        name: str,
        actor: User,
        attributes: Optional[dict[str, Any]] = None,
    ) -> ParameterItem:
        entity = self._entity(table)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required")
        item = ParameterItem(id=str(uuid.uuid4()), name=name, attributes=dict(attributes or {}))
        self._call(lambda: self._remote.insert(table, parameter_to_row(item)), f"add {table}")
        self._cache.clear_cache([table])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.CREATE, entity, item.id, f"{name} criado",
        )
        return item

    def update_item(
        self,
        table: str,
        item_id: str,
        actor: User,
        name: Optional[str] = None,
        attributes: Optional[dict[str, Any]] = None,
    ) -> ParameterItem:
        entity = self._entity(table)
        changes: dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Name is required")
            changes["name"] = name.strip()
        if attributes is not None:
            changes["attributes"] = dict(attributes)
        if self._call(lambda: self._remote.get(table, item_id), f"get {table}") is None:
            raise NotFoundError(table, item_id)
        row = self._call(lambda: self._remote.update(table, item_id, changes), f"update {table}")
        item = parameter_from_row(row)
        self._cache.clear_cache([table])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.UPDATE, entity, item_id, f"{item.name} atualizado",
        )
        return item

    def delete_item(self, table: str, item_id: str, actor: User) -> None:
        entity = self._entity(table)
        self._call(lambda: self._remote.delete(table, item_id), f"delete {table}")
        self._cache.clear_cache([table])
        self._audit.add_audit_log(
            actor.id, actor.name, AuditAction.DELETE, entity, item_id, "Removido",
        )

    @staticmethod
    def _entity(table: str) -> AuditEntity:
        try:
            return PARAMETER_ENTITIES[table]
        except KeyError:
            raise ValidationError(f"Unknown parameter table: {table}") from None
