import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import as_utc, create_access_token, generate_reset_token
from core.config import get_settings
from core.enums import AuditAction, PermissionModule
from core.exceptions import (
    AuthorizationError,
    ConflictError,
    EmailDeliveryError,
    InactiveAccountError,
    InvalidCredentialsError,
    ServiceUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
)
from models.role import Role
from models.user import User
from repositories.audit_log_repo import AuditLogRepository
from repositories.permission_repo import PermissionRepository
from repositories.role_repo import RoleRepository
from repositories.user_repo import UserRepository
from services.email_service import EmailService

logger = logging.getLogger(__name__)

ADMIN_ROLE_NAME = "Admin"
DEFAULT_SIGNUP_ROLE_NAME = "Student"
FORGOT_PASSWORD_MESSAGE = (
    "If an account exists with this email, you will receive a password reset link."
)


@dataclass
class UserSession:
    user: User
    roles: list[str]
    is_admin: bool

    @property
    def redirect_url(self) -> str:
        return "/admin/dashboard" if self.is_admin else "/dashboard"


@dataclass
class LoginResult:
    session: UserSession
    access_token: str


class AuthService:
    """Credential checks, session tokens, signup and password reset"""

    def __init__(self, db: AsyncSession, email_service: EmailService | None = None):
        self.db = db
        self.settings = get_settings()
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)
        self.permissions = PermissionRepository(db)
        self.audit_log = AuditLogRepository(db)
        self.email_service = email_service or EmailService(self.settings)

    async def describe(self, user: User) -> UserSession:
        roles = await self.permissions.get_user_roles(user.id)
        return UserSession(
            user=user,
            roles=[role.name for role in roles],
            is_admin=any(role.grants_all for role in roles),
        )

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Verify credentials and issue a session token.

        Unknown email and wrong password raise the same InvalidCredentialsError
        so callers cannot tell which one failed.
        """
        user = await self.users.authenticate(email, password)
        if user is None:
            logger.info("Failed login attempt for %s", email)
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.info("Login refused for inactive user %s", user.id)
            raise InactiveAccountError()

        session = await self.describe(user)
        token = create_access_token(
            data={"sub": user.id, "email": user.email, "roles": session.roles}
        )

        user.last_login = datetime.now(UTC)
        await self.db.flush()
        await self.db.refresh(user)
        await self.audit_log.record(
            action=AuditAction.LOGIN,
            entity_type="user",
            entity_id=user.id,
            module=PermissionModule.USER_MANAGEMENT.value,
            actor_id=user.id,
        )
        logger.info("User %s logged in", user.id)
        return LoginResult(session=session, access_token=token)

    async def register(self, name: str, email: str, password: str) -> User:
        """Public signup; new accounts get the Student role when it exists"""
        if await self.users.get_by_email(email):
            raise ConflictError("An account with this email already exists")

        user = await self.users.create_user(name=name, email=email, password=password)
        role = await self.roles.get_by_name(DEFAULT_SIGNUP_ROLE_NAME)
        if role:
            await self.permissions.assign_role_to_user(user.id, role.id)
        return user

    async def register_admin(self, name: str, email: str, password: str, secret_key: str) -> User:
        configured = self.settings.admin_secret_key
        if not configured:
            raise ServiceUnavailableError("Admin registration is not configured")
        if not secrets.compare_digest(secret_key.encode(), configured.encode()):
            logger.warning("Admin registration attempted with an invalid secret key")
            raise AuthorizationError("Invalid admin secret key", "INVALID_ADMIN_SECRET")
        if await self.users.get_by_email(email):
            raise ConflictError("An account with this email already exists")

        user = await self.users.create_user(name=name, email=email, password=password)
        admin_role = await self.roles.get_by_name(ADMIN_ROLE_NAME)
        if admin_role is None:
            admin_role = await self.roles.create(
                Role(
                    name=ADMIN_ROLE_NAME,
                    description="Full system access",
                    is_system=True,
                    grants_all=True,
                )
            )
        await self.permissions.assign_role_to_user(user.id, admin_role.id)
        logger.info("Administrator account created: %s", user.id)
        return user

    async def forgot_password(self, email: str) -> str:
        """Issue a reset token for active accounts; always returns the generic message"""
        user = await self.users.get_by_email(email)
        if user is None or not user.is_active:
            logger.info("Password reset requested for unknown or inactive account")
            return FORGOT_PASSWORD_MESSAGE

        token, expires_at = generate_reset_token()
        user.password_reset_token = token
        user.password_reset_expires = expires_at
        await self.db.flush()

        try:
            await self.email_service.send_password_reset(user.email, token)
        except EmailDeliveryError as e:
            # The response must not reveal whether the account exists
            logger.error("Password reset email to user %s failed: %s", user.id, e.message)

        return FORGOT_PASSWORD_MESSAGE

    async def reset_password(self, token: str, new_password: str) -> User:
        user = await self.users.get_by_reset_token(token)
        if user is None or user.password_reset_expires is None:
            raise TokenInvalidError()

        if as_utc(user.password_reset_expires) < datetime.now(UTC):
            raise TokenExpiredError()

        user.password_reset_token = None
        user.password_reset_expires = None
        await self.users.set_password(user, new_password)
        await self.audit_log.record(
            action=AuditAction.PASSWORD_RESET,
            entity_type="user",
            entity_id=user.id,
            module=PermissionModule.USER_MANAGEMENT.value,
            actor_id=user.id,
        )
        logger.info("Password reset completed for user %s", user.id)
        return user
