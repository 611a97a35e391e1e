from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db, get_db_transactional
from core.enums import PermissionAction, PermissionModule
from repositories.permission_repo import PermissionRepository
from repositories.role_repo import RoleRepository
from schemas.role import (
    PermissionResponse,
    RoleCreate,
    RolePermissionAssign,
    RoleResponse,
    RoleUpdate,
    RoleWithPermissions,
)
from services.role_service import RoleService

router = APIRouter()

MODULE = PermissionModule.USER_MANAGEMENT


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(PermissionAction.CREATE, MODULE))],
)
async def create_role(data: RoleCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    role = await RoleService(db).create_role(data.name, data.description, data.permission_ids)
    return RoleResponse.model_validate(role)


@router.get(
    "",
    response_model=list[RoleResponse],
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def list_roles(
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    roles = await RoleRepository(db).list_roles(skip=skip, limit=limit)
    return [RoleResponse.model_validate(role) for role in roles]


@router.get(
    "/{role_id}",
    response_model=RoleWithPermissions,
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def get_role(role_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    """Role details with its permissions"""
    role = await RoleService(db).get_role(role_id)
    permissions = await PermissionRepository(db).get_permissions_for_role(role_id)
    return RoleWithPermissions(
        **RoleResponse.model_validate(role).model_dump(),
        permissions=[PermissionResponse.model_validate(p) for p in permissions],
    )


@router.put(
    "/{role_id}",
    response_model=RoleResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def update_role(
    role_id: str, data: RoleUpdate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    role = await RoleService(db).update_role(role_id, name=data.name, description=data.description)
    return RoleResponse.model_validate(role)


@router.delete(
    "/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(PermissionAction.DELETE, MODULE))],
)
async def delete_role(role_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    """Hard delete; holders of the role lose it"""
    await RoleService(db).delete_role(role_id)


@router.post(
    "/{role_id}/assign-permission",
    response_model=list[PermissionResponse],
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def assign_permission(
    role_id: str,
    data: RolePermissionAssign,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    """Grant a permission to a role; returns the role's permissions afterwards"""
    permissions = await RoleService(db).assign_permission(role_id, data.permission_id)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.delete(
    "/{role_id}/permissions/{permission_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def remove_permission(
    role_id: str, permission_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    await RoleService(db).remove_permission(role_id, permission_id)
