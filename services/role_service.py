import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictError, ResourceNotFoundError, SystemRoleError
from models.permission import Permission
from models.role import Role
from repositories.permission_repo import PermissionRepository
from repositories.role_repo import RoleRepository

logger = logging.getLogger(__name__)


class RoleService:
    """
    Role management rules.

    - names are unique ignoring case (pre-checked, then enforced by the
      uq_role_name_ci index so concurrent creates still yield one winner)
    - system roles cannot be updated, deleted, or have permissions changed
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.roles = RoleRepository(db)
        self.permissions = PermissionRepository(db)

    async def get_role(self, role_id: str) -> Role:
        role = await self.roles.get_by_id(role_id)
        if role is None:
            raise ResourceNotFoundError("Role", role_id)
        return role

    async def _get_permission(self, permission_id: str) -> Permission:
        permission = await self.permissions.get_by_id(permission_id)
        if permission is None:
            raise ResourceNotFoundError("Permission", permission_id)
        return permission

    async def create_role(
        self,
        name: str,
        description: str | None = None,
        permission_ids: list[str] | None = None,
    ) -> Role:
        if await self.roles.get_by_name(name):
            raise ConflictError(f"Role '{name}' already exists")

        role = await self.roles.create(Role(name=name, description=description))
        # Repeated ids in the request grant the permission once
        for permission_id in dict.fromkeys(permission_ids or []):
            await self._get_permission(permission_id)
            await self.permissions.assign_permission_to_role(role.id, permission_id)

        logger.info("Role created: %s (%s)", role.name, role.id)
        return role

    async def update_role(
        self, role_id: str, name: str | None = None, description: str | None = None
    ) -> Role:
        role = await self.get_role(role_id)
        if role.is_system:
            raise SystemRoleError("System roles cannot be modified.")

        if name is not None and name.lower() != role.name.lower():
            if await self.roles.get_by_name(name):
                raise ConflictError(f"Role '{name}' already exists")
        if name is not None:
            role.name = name
        if description is not None:
            role.description = description

        return await self.roles.update(role)

    async def delete_role(self, role_id: str) -> None:
        role = await self.get_role(role_id)
        if role.is_system:
            raise SystemRoleError("System roles cannot be deleted.")
        await self.permissions.detach_role(role.id)
        await self.roles.delete(role)
        logger.info("Role deleted: %s (%s)", role.name, role.id)

    async def assign_permission(self, role_id: str, permission_id: str) -> list[Permission]:
        """Grant a permission to a role; granting one it already has is a no-op"""
        role = await self.get_role(role_id)
        if role.is_system:
            raise SystemRoleError("Cannot modify permissions of a system role.")
        await self._get_permission(permission_id)

        if not await self.permissions.role_has_permission(role_id, permission_id):
            await self.permissions.assign_permission_to_role(role_id, permission_id)
        return await self.permissions.get_permissions_for_role(role_id)

    async def remove_permission(self, role_id: str, permission_id: str) -> None:
        role = await self.get_role(role_id)
        if role.is_system:
            raise SystemRoleError("Cannot modify permissions of a system role.")
        if not await self.permissions.remove_permission_from_role(role_id, permission_id):
            raise ResourceNotFoundError("Permission assignment", permission_id)
