from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db_transactional
from core.enums import PermissionAction, PermissionModule
from repositories.school_repo import SchoolProfileRepository
from schemas.school import SchoolProfileResponse, SchoolProfileUpdate

router = APIRouter()

MODULE = PermissionModule.SCHOOL_PROFILE


@router.get(
    "/school-profile",
    response_model=SchoolProfileResponse,
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def get_school_profile(db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    """Returns the profile, creating the default one on first read"""
    return await SchoolProfileRepository(db).get_or_create()


@router.put(
    "/school-profile",
    response_model=SchoolProfileResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def update_school_profile(
    data: SchoolProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    repo = SchoolProfileRepository(db)
    profile = await repo.get_or_create()
    for field, value in data.model_dump(mode="json", exclude_unset=True).items():
        setattr(profile, field, value)
    return await repo.update(profile)
