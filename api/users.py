from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db, get_db_transactional
from core.enums import PermissionAction, PermissionModule, UserStatus
from core.exceptions import ConflictError, ResourceNotFoundError
from models.user import User
from repositories.permission_repo import PermissionRepository
from repositories.role_repo import RoleRepository
from repositories.user_repo import UserRepository
from schemas.role import RoleResponse
from schemas.user import AssignRoleRequest, UserCreate, UserResponse, UserUpdate

router = APIRouter()

MODULE = PermissionModule.USER_MANAGEMENT


async def _get_user_or_404(repo: UserRepository, user_id: str) -> User:
    user = await repo.get_live_by_id(user_id)
    if not user:
        raise ResourceNotFoundError("User", user_id)
    return user


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    current_user: Annotated[User, Depends(require_permission(PermissionAction.CREATE, MODULE))],
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    """Create a user and, optionally, give them a role in the same transaction"""
    user_repo = UserRepository(db)
    if await user_repo.get_by_email(data.email):
        raise ConflictError(f"Email '{data.email}' is already registered")

    role = None
    if data.role_id:
        role = await RoleRepository(db).get_by_id(data.role_id)
        if not role:
            raise ResourceNotFoundError("Role", data.role_id)

    user = await user_repo.create_user(name=data.name, email=data.email, password=data.password)
    if role:
        await PermissionRepository(db).assign_role_to_user(
            user.id, role.id, assigned_by=current_user.id
        )
    return UserResponse.model_validate(user)


@router.get(
    "",
    response_model=list[UserResponse],
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    status_filter: UserStatus | None = Query(None, alias="status"),
):
    users = await UserRepository(db).list_users(skip=skip, limit=limit, status=status_filter)
    return [UserResponse.model_validate(user) for user in users]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def get_user(user_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    return UserResponse.model_validate(await _get_user_or_404(UserRepository(db), user_id))


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def update_user(
    user_id: str,
    data: UserUpdate,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    user_repo = UserRepository(db)
    user = await _get_user_or_404(user_repo, user_id)

    if data.email is not None and data.email.lower() != user.email:
        if await user_repo.get_by_email(data.email):
            raise ConflictError(f"Email '{data.email}' is already registered")
        user.email = data.email.lower()
    if data.name is not None:
        user.name = data.name
    if data.status is not None:
        user.status = data.status.value

    return UserResponse.model_validate(await user_repo.update(user))


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(PermissionAction.DELETE, MODULE))],
)
async def delete_user(user_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    """Soft delete: the row stays, marked deleted and deactivated"""
    user_repo = UserRepository(db)
    await user_repo.soft_delete(await _get_user_or_404(user_repo, user_id))


@router.post(
    "/{user_id}/activate",
    response_model=UserResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def activate_user(user_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    user_repo = UserRepository(db)
    user = await _get_user_or_404(user_repo, user_id)
    return UserResponse.model_validate(await user_repo.set_status(user, UserStatus.ACTIVE))


@router.post(
    "/{user_id}/deactivate",
    response_model=UserResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def deactivate_user(user_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    user_repo = UserRepository(db)
    user = await _get_user_or_404(user_repo, user_id)
    return UserResponse.model_validate(await user_repo.set_status(user, UserStatus.INACTIVE))


@router.get(
    "/{user_id}/roles",
    response_model=list[RoleResponse],
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def list_user_roles(user_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    await _get_user_or_404(UserRepository(db), user_id)
    roles = await PermissionRepository(db).get_user_roles(user_id)
    return [RoleResponse.model_validate(role) for role in roles]


@router.post("/{user_id}/assign-role", status_code=status.HTTP_201_CREATED)
async def assign_role(
    user_id: str,
    data: AssignRoleRequest,
    current_user: Annotated[User, Depends(require_permission(PermissionAction.UPDATE, MODULE))],
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    """Assign a role to a user (409 if the user already holds it)"""
    await _get_user_or_404(UserRepository(db), user_id)
    role = await RoleRepository(db).get_by_id(data.role_id)
    if not role:
        raise ResourceNotFoundError("Role", data.role_id)

    perm_repo = PermissionRepository(db)
    if await perm_repo.user_has_role(user_id, role.id):
        raise ConflictError("User already has this role")
    await perm_repo.assign_role_to_user(user_id, role.id, assigned_by=current_user.id)

    return {"message": "Role assigned successfully", "user_id": user_id, "role_id": role.id}
