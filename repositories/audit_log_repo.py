from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.context import get_actor_context
from core.enums import AuditAction
from models.audit_log import AuditLog


class AuditLogRepository:
    """
    Append-only access to the audit log.

    Deliberately not a BaseRepository: there is no update or delete.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        action: AuditAction | str,
        entity_type: str,
        entity_id: str | None = None,
        module: str | None = None,
        metadata: dict[str, Any] | None = None,
        actor_id: str | None = None,
    ) -> AuditLog:
        """Write one audit entry; the actor defaults to the request's user"""
        context = get_actor_context()
        entry = AuditLog(
            actor_id=actor_id if actor_id is not None else context.user_id,
            action=action.value if isinstance(action, AuditAction) else action,
            entity_type=entity_type,
            entity_id=entity_id,
            module=module,
            details=metadata,
            ip_address=context.ip_address,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def search(
        self,
        page: int = 1,
        limit: int = 10,
        actor_id: str | None = None,
        module: str | None = None,
    ) -> tuple[list[AuditLog], int]:
        """Newest-first page of entries plus the total matching count"""
        filters = []
        if actor_id:
            filters.append(AuditLog.actor_id == actor_id)
        if module:
            filters.append(AuditLog.module == module)

        total = await self.db.scalar(
            select(func.count()).select_from(AuditLog).where(*filters)
        )
        result = await self.db.execute(
            select(AuditLog)
            .where(*filters)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0
