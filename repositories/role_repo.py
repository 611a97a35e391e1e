from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import PermissionModule
from models.role import Role
from repositories.auditable_repo import AuditableRepository


class RoleRepository(AuditableRepository[Role]):
    """Repository for Role operations"""

    entity_type = "role"
    module = PermissionModule.USER_MANAGEMENT
    conflict_message = "A role with this name already exists"

    def __init__(self, db: AsyncSession, *, enable_audit: bool = True):
        super().__init__(db, Role, enable_audit=enable_audit)

    def _serialize_for_audit(self, obj: Role) -> dict[str, Any]:
        return {
            "id": obj.id,
            "name": obj.name,
            "description": obj.description,
            "is_system": obj.is_system,
            "grants_all": obj.grants_all,
        }

    async def get_by_name(self, name: str) -> Role | None:
        """Get role by name, ignoring case"""
        result = await self.db.execute(
            select(Role).where(func.lower(Role.name) == name.lower())
        )
        return result.scalar_one_or_none()

    async def list_roles(self, skip: int = 0, limit: int = 100) -> list[Role]:
        result = await self.db.execute(
            select(Role).offset(skip).limit(limit).order_by(Role.name)
        )
        return list(result.scalars().all())
