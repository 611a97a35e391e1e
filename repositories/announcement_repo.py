from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import PermissionModule
from models.announcement import Announcement
from repositories.auditable_repo import AuditableRepository, audit_fields


class AnnouncementRepository(AuditableRepository[Announcement]):
    entity_type = "announcement"
    module = PermissionModule.SCHOOL_PROFILE

    def __init__(self, db: AsyncSession):
        super().__init__(db, Announcement)

    def _serialize_for_audit(self, obj: Announcement) -> dict[str, Any]:
        return audit_fields(obj, "id", "title", "is_published", "author_id")

    async def list_announcements(self, published_only: bool = False) -> list[Announcement]:
        query = select(Announcement).order_by(Announcement.created_at.desc())
        if published_only:
            query = query.where(Announcement.is_published.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())
