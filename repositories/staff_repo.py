from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import AuditAction, PermissionModule, StaffStatus
from models.staff import Staff
from repositories.auditable_repo import AuditableRepository, audit_fields


class StaffRepository(AuditableRepository[Staff]):
    entity_type = "staff"
    module = PermissionModule.STAFF
    conflict_message = "A staff record already exists for this user"

    def __init__(self, db: AsyncSession):
        super().__init__(db, Staff)

    def _serialize_for_audit(self, obj: Staff) -> dict[str, Any]:
        return audit_fields(obj, "id", "user_id", "position", "department", "status")

    async def get_by_user_id(self, user_id: str) -> Staff | None:
        result = await self.db.execute(select(Staff).where(Staff.user_id == user_id))
        return result.scalar_one_or_none()

    async def list_staff(self, status: StaffStatus | None = None) -> list[Staff]:
        query = select(Staff).order_by(Staff.created_at.desc())
        if status:
            query = query.where(Staff.status == status.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def set_status(self, staff: Staff, status: StaffStatus) -> Staff:
        staff.status = status.value
        await self._flush()
        await self.db.refresh(staff)
        action = AuditAction.ACTIVATED if status == StaffStatus.ACTIVE else AuditAction.DEACTIVATED
        await self.emit_audit(action, staff)
        return staff
