from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import PermissionModule
from models.school import SchoolProfile
from repositories.auditable_repo import AuditableRepository, audit_fields

DEFAULT_SCHOOL_NAME = "Hiigsi School"


class SchoolProfileRepository(AuditableRepository[SchoolProfile]):
    entity_type = "school_profile"
    module = PermissionModule.SCHOOL_PROFILE

    def __init__(self, db: AsyncSession):
        super().__init__(db, SchoolProfile)

    def _serialize_for_audit(self, obj: SchoolProfile) -> dict[str, Any]:
        return audit_fields(obj, "id", "school_name", "email", "phone")

    async def get_profile(self) -> SchoolProfile | None:
        result = await self.db.execute(
            select(SchoolProfile).order_by(SchoolProfile.created_at).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_or_create(self) -> SchoolProfile:
        """The profile is a singleton; the first read creates it"""
        profile = await self.get_profile()
        if profile is None:
            profile = await self.create(SchoolProfile(school_name=DEFAULT_SCHOOL_NAME))
        return profile
