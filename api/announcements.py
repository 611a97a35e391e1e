from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db, get_db_transactional
from core.enums import PermissionAction, PermissionModule
from core.exceptions import ResourceNotFoundError
from models.announcement import Announcement
from models.user import User
from repositories.announcement_repo import AnnouncementRepository
from schemas.announcement import AnnouncementCreate, AnnouncementResponse, AnnouncementUpdate

router = APIRouter()

MODULE = PermissionModule.SCHOOL_PROFILE


async def _get_announcement_or_404(repo: AnnouncementRepository, announcement_id: str) -> Announcement:
    announcement = await repo.get_by_id(announcement_id)
    if not announcement:
        raise ResourceNotFoundError("Announcement", announcement_id)
    return announcement


@router.get(
    "/announcements",
    response_model=list[AnnouncementResponse],
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def list_announcements(
    db: Annotated[AsyncSession, Depends(get_db)],
    published_only: bool = False,
):
    return await AnnouncementRepository(db).list_announcements(published_only)


@router.post(
    "/announcements",
    response_model=AnnouncementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_announcement(
    data: AnnouncementCreate,
    current_user: Annotated[User, Depends(require_permission(PermissionAction.CREATE, MODULE))],
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    return await AnnouncementRepository(db).create(
        Announcement(**data.model_dump(), author_id=current_user.id)
    )


@router.put(
    "/announcements/{announcement_id}",
    response_model=AnnouncementResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def update_announcement(
    announcement_id: str,
    data: AnnouncementUpdate,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    repo = AnnouncementRepository(db)
    announcement = await _get_announcement_or_404(repo, announcement_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(announcement, field, value)
    return await repo.update(announcement)


@router.delete(
    "/announcements/{announcement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(PermissionAction.DELETE, MODULE))],
)
async def delete_announcement(
    announcement_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    repo = AnnouncementRepository(db)
    await repo.delete(await _get_announcement_or_404(repo, announcement_id))
