from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import CurrentUser, get_authz_service, require_permission
from core.database import get_db
from core.enums import PermissionAction, PermissionModule
from repositories.permission_repo import PermissionRepository
from schemas.role import PermissionPairResponse, PermissionResponse
from services.authz_service import AuthorizationService

router = APIRouter()


@router.get(
    "",
    response_model=list[PermissionResponse],
    dependencies=[
        Depends(require_permission(PermissionAction.READ, PermissionModule.USER_MANAGEMENT))
    ],
)
async def list_permissions(db: Annotated[AsyncSession, Depends(get_db)]):
    """The permission catalog"""
    permissions = await PermissionRepository(db).list_permissions()
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.get("/me", response_model=list[PermissionPairResponse])
async def my_permissions(
    current_user: CurrentUser,
    authz_service: Annotated[AuthorizationService, Depends(get_authz_service)],
):
    """Effective permissions of the caller; any authenticated user may ask"""
    keys = await authz_service.get_permissions(current_user.id)
    return [
        PermissionPairResponse(action=key.action, subject=key.subject)
        for key in sorted(keys, key=lambda k: (k.subject.value, k.action.value))
    ]
