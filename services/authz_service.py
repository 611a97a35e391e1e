import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.enums import PermissionAction, PermissionModule
from core.exceptions import PermissionDeniedError
from core.rbac import PERMISSION_CATALOG, PermissionKey, RoleGrant, resolve_permissions
from core.telemetry import get_tracer
from repositories.permission_repo import PermissionRepository

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class AuthorizationService:
    """
    Answers "may user U perform action A on subject S?".

    Loads the user's role grants and resolves them with
    core.rbac.resolve_permissions. When bypass (god mode) is on, every
    check passes and every user resolves to the full catalog.
    """

    def __init__(self, db: AsyncSession, bypass: bool | None = None):
        self.db = db
        self.permission_repo = PermissionRepository(db)
        self.bypass = get_settings().rbac_bypass_enabled if bypass is None else bypass

    async def get_role_grants(self, user_id: str) -> list[RoleGrant]:
        rows = await self.permission_repo.get_role_grant_rows(user_id)

        by_role: dict[str, tuple[bool, set[PermissionKey]]] = {}
        for role_name, grants_all, action, subject in rows:
            _, permissions = by_role.setdefault(role_name, (grants_all, set()))
            if action and subject:
                permissions.add(PermissionKey(PermissionAction(action), PermissionModule(subject)))

        return [
            RoleGrant(role_name=name, grants_all=grants_all, permissions=frozenset(perms))
            for name, (grants_all, perms) in by_role.items()
        ]

    async def get_permissions(self, user_id: str) -> frozenset[PermissionKey]:
        """Union of the user's role permissions; empty when the user holds no roles"""
        if self.bypass:
            logger.warning("RBAC bypass enabled: granting full catalog to user %s", user_id)
            return PERMISSION_CATALOG
        return resolve_permissions(await self.get_role_grants(user_id))

    async def has_permission(
        self, user_id: str, action: PermissionAction, subject: PermissionModule
    ) -> bool:
        with tracer.start_as_current_span("rbac.has_permission") as span:
            span.set_attribute("rbac.action", action.value)
            span.set_attribute("rbac.subject", subject.value)

            if self.bypass:
                logger.warning(
                    "RBAC bypass enabled: %s %s GRANTED to user %s without a check",
                    action.value,
                    subject.value,
                    user_id,
                )
                return True

            granted = PermissionKey(action, subject) in await self.get_permissions(user_id)
            logger.debug(
                "Permission %s:%s %s for user %s",
                subject.value,
                action.value,
                "GRANTED" if granted else "DENIED",
                user_id,
            )
            span.set_attribute("rbac.granted", granted)
            return granted

    async def require_permission(
        self, user_id: str, action: PermissionAction, subject: PermissionModule
    ) -> None:
        """Raise PermissionDeniedError if the user lacks the pair"""
        if not await self.has_permission(user_id, action, subject):
            raise PermissionDeniedError(action.value, subject.value)

    async def is_admin(self, user_id: str) -> bool:
        """Holds a role that grants every permission"""
        return any(grant.grants_all for grant in await self.get_role_grants(user_id))
