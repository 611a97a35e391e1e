from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db, get_db_transactional
from core.enums import PermissionAction, PermissionModule, StaffStatus
from core.exceptions import ConflictError, ResourceNotFoundError
from models.staff import Staff
from repositories.staff_repo import StaffRepository
from repositories.user_repo import UserRepository
from schemas.staff import StaffCreate, StaffResponse, StaffUpdate

router = APIRouter()

MODULE = PermissionModule.STAFF


async def _get_staff_or_404(repo: StaffRepository, staff_id: str) -> Staff:
    staff = await repo.get_by_id(staff_id)
    if not staff:
        raise ResourceNotFoundError("Staff", staff_id)
    return staff


@router.get(
    "",
    response_model=list[StaffResponse],
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def list_staff(
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: StaffStatus | None = Query(None, alias="status"),
):
    return await StaffRepository(db).list_staff(status=status_filter)


@router.post(
    "",
    response_model=StaffResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(PermissionAction.CREATE, MODULE))],
)
async def create_staff(data: StaffCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    """Attach a staff record to an existing user (one per user)"""
    if not await UserRepository(db).get_live_by_id(data.user_id):
        raise ResourceNotFoundError("User", data.user_id)

    repo = StaffRepository(db)
    if await repo.get_by_user_id(data.user_id):
        raise ConflictError("A staff record already exists for this user")
    fields = data.model_dump()
    fields["status"] = data.status.value
    return await repo.create(Staff(**fields))


@router.get(
    "/{staff_id}",
    response_model=StaffResponse,
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def get_staff(staff_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    return await _get_staff_or_404(StaffRepository(db), staff_id)


@router.put(
    "/{staff_id}",
    response_model=StaffResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def update_staff(
    staff_id: str, data: StaffUpdate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    repo = StaffRepository(db)
    staff = await _get_staff_or_404(repo, staff_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(staff, field, value.value if isinstance(value, StaffStatus) else value)
    return await repo.update(staff)


@router.delete(
    "/{staff_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(PermissionAction.DELETE, MODULE))],
)
async def delete_staff(staff_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    repo = StaffRepository(db)
    await repo.delete(await _get_staff_or_404(repo, staff_id))


@router.post(
    "/{staff_id}/activate",
    response_model=StaffResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def activate_staff(staff_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    repo = StaffRepository(db)
    return await repo.set_status(await _get_staff_or_404(repo, staff_id), StaffStatus.ACTIVE)


@router.post(
    "/{staff_id}/deactivate",
    response_model=StaffResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def deactivate_staff(staff_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    repo = StaffRepository(db)
    return await repo.set_status(await _get_staff_or_404(repo, staff_id), StaffStatus.RESIGNED)
