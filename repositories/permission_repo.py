from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import AuditAction, PermissionModule
from core.exceptions import ConflictError
from models.permission import Permission, RolePermission, UserRole
from models.role import Role
from repositories.audit_log_repo import AuditLogRepository
from repositories.base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):
    """
    Permissions and the two join tables (role <-> permission, user <-> role).

    Assignment changes are written to the audit log under USER_MANAGEMENT.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, Permission)
        self.audit_log = AuditLogRepository(db)

    async def get_by_pair(self, action: str, subject: str) -> Permission | None:
        result = await self.db.execute(
            select(Permission).where(Permission.action == action, Permission.subject == subject)
        )
        return result.scalar_one_or_none()

    async def list_permissions(self) -> list[Permission]:
        result = await self.db.execute(
            select(Permission).order_by(Permission.subject, Permission.action)
        )
        return list(result.scalars().all())

    async def get_permissions_for_role(self, role_id: str) -> list[Permission]:
        """Get all permissions assigned to a role"""
        result = await self.db.execute(
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.subject, Permission.action)
        )
        return list(result.scalars().all())

    async def role_has_permission(self, role_id: str, permission_id: str) -> bool:
        result = await self.db.execute(
            select(RolePermission.id).where(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
        )
        return result.first() is not None

    async def assign_permission_to_role(self, role_id: str, permission_id: str) -> RolePermission:
        role_permission = RolePermission(role_id=role_id, permission_id=permission_id)
        self.db.add(role_permission)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ConflictError("Role already has this permission") from e

        await self.audit_log.record(
            action=AuditAction.ASSIGNED,
            entity_type="role",
            entity_id=role_id,
            module=PermissionModule.USER_MANAGEMENT.value,
            metadata={"permission_assigned": permission_id},
        )
        return role_permission

    async def remove_permission_from_role(self, role_id: str, permission_id: str) -> bool:
        result = await self.db.execute(
            delete(RolePermission).where(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
        )
        if not result.rowcount:
            return False

        await self.audit_log.record(
            action=AuditAction.UNASSIGNED,
            entity_type="role",
            entity_id=role_id,
            module=PermissionModule.USER_MANAGEMENT.value,
            metadata={"permission_removed": permission_id},
        )
        return True

    async def assign_role_to_user(
        self, user_id: str, role_id: str, assigned_by: str | None = None
    ) -> UserRole:
        """Assign a role to a user; a repeated assignment is a conflict"""
        user_role = UserRole(user_id=user_id, role_id=role_id, assigned_by=assigned_by)
        self.db.add(user_role)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ConflictError("User already has this role") from e

        await self.audit_log.record(
            action=AuditAction.ASSIGNED,
            entity_type="user",
            entity_id=user_id,
            module=PermissionModule.USER_MANAGEMENT.value,
            metadata={"role_assigned": role_id},
        )
        return user_role

    async def user_has_role(self, user_id: str, role_id: str) -> bool:
        result = await self.db.execute(
            select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
        )
        return result.first() is not None

    async def get_user_roles(self, user_id: str) -> list[Role]:
        """Get all roles assigned to a user"""
        result = await self.db.execute(
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.name)
        )
        return list(result.scalars().all())

    async def get_role_grant_rows(self, user_id: str) -> list[tuple[str, bool, str | None, str | None]]:
        """
        (role_name, grants_all, action, subject) for every role the user holds.

        Roles without permissions appear once with action/subject None.
        """
        result = await self.db.execute(
            select(Role.name, Role.grants_all, Permission.action, Permission.subject)
            .select_from(UserRole)
            .join(Role, Role.id == UserRole.role_id)
            .outerjoin(RolePermission, RolePermission.role_id == Role.id)
            .outerjoin(Permission, Permission.id == RolePermission.permission_id)
            .where(UserRole.user_id == user_id)
        )
        return [tuple(row) for row in result.all()]

    async def detach_role(self, role_id: str) -> None:
        """Drop every join row of a role before the role itself is deleted"""
        await self.db.execute(delete(RolePermission).where(RolePermission.role_id == role_id))
        await self.db.execute(delete(UserRole).where(UserRole.role_id == role_id))
