"""
Auditable repository base class.

Extends BaseRepository so that create/update/delete on tracked entities
append a row to the audit log in the same transaction.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from core.database import Base
from core.enums import AuditAction, PermissionModule
from repositories.audit_log_repo import AuditLogRepository
from repositories.base import BaseRepository

ModelType = TypeVar("ModelType", bound=Base)


class AuditableRepository(BaseRepository[ModelType]):
    """
    Repository base class with automatic audit entries.

    Subclasses set:
    - entity_type: e.g. "role"
    - module: the PermissionModule the entity belongs to
    and implement _serialize_for_audit(obj).
    """

    entity_type: str
    module: PermissionModule

    def __init__(self, db: AsyncSession, model: type[ModelType], *, enable_audit: bool = True):
        super().__init__(db, model)
        self.audit_log = AuditLogRepository(db)
        self._audit_enabled = enable_audit

    @abstractmethod
    def _serialize_for_audit(self, obj: ModelType) -> dict[str, Any]:
        """Convert entity to dict for the audit entry."""
        ...

    async def emit_audit(
        self,
        action: AuditAction,
        obj: ModelType,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if not self._audit_enabled:
            return
        payload = {"entity": self._serialize_for_audit(obj)}
        if metadata:
            payload.update(metadata)
        await self.audit_log.record(
            action=action,
            entity_type=self.entity_type,
            entity_id=getattr(obj, "id", None),
            module=self.module.value,
            metadata=payload,
        )

    async def _on_after_create(self, obj: ModelType) -> None:
        await super()._on_after_create(obj)
        await self.emit_audit(AuditAction.CREATED, obj)

    async def _on_after_update(self, obj: ModelType) -> None:
        await super()._on_after_update(obj)
        await self.emit_audit(AuditAction.UPDATED, obj)

    async def _on_before_delete(self, obj: ModelType) -> None:
        await super()._on_before_delete(obj)
        await self.emit_audit(AuditAction.DELETED, obj)


def audit_fields(obj: Any, *fields: str) -> dict[str, Any]:
    """Pick fields off a model as JSON-safe values (dates and Decimals become strings)"""
    data: dict[str, Any] = {}
    for name in fields:
        value = getattr(obj, name)
        if value is not None and not isinstance(value, (str, int, float, bool, list, dict)):
            value = str(value)
        data[name] = value
    return data
