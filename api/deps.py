import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import verify_token
from core.config import get_settings
from core.context import set_current_user
from core.database import get_db
from core.enums import PermissionAction, PermissionModule
from core.exceptions import AuthenticationError
from models.user import User
from repositories.user_repo import UserRepository
from schemas.token import TokenPayload
from services.authz_service import AuthorizationService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    """The session cookie wins; an Authorization: Bearer header is the fallback"""
    token = request.cookies.get(get_settings().auth_cookie_name)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


async def get_current_user_optional(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User | None:
    """
    Resolve the request's principal, or None.

    Missing, expired and malformed tokens all resolve to None, as do tokens
    whose user has since been deleted or deactivated.
    """
    token = _extract_token(request, credentials)
    if not token:
        return None

    try:
        payload = TokenPayload(**verify_token(token))
    except ValueError as e:
        logger.debug("Rejected session token: %s", e)
        return None

    user = await UserRepository(db).get_live_by_id(payload.sub)
    if user is None or not user.is_active:
        return None

    client_ip = request.client.host if request.client else None
    set_current_user(user.id, ip_address=client_ip)
    return user


async def get_current_user(
    user: Annotated[User | None, Depends(get_current_user_optional)],
) -> User:
    if user is None:
        raise AuthenticationError()
    return user


async def get_authz_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthorizationService:
    return AuthorizationService(db)


def require_permission(action: PermissionAction, subject: PermissionModule):
    """
    Dependency factory for route-level permission checking.

    Usage:
        @router.get(
            "/finance/invoices",
            dependencies=[Depends(require_permission(PermissionAction.READ, PermissionModule.FINANCE))],
        )

    No principal gives 401; a principal without the pair gives 403.
    """

    async def permission_checker(
        user: Annotated[User, Depends(get_current_user)],
        authz_service: Annotated[AuthorizationService, Depends(get_authz_service)],
    ) -> User:
        await authz_service.require_permission(user.id, action, subject)
        return user

    return permission_checker


CurrentUser = Annotated[User, Depends(get_current_user)]
