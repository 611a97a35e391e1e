import asyncio
from datetime import UTC, datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import DUMMY_PASSWORD_HASH, get_password_hash, verify_password
from core.enums import AuditAction, PermissionModule, UserStatus
from models.user import User
from repositories.auditable_repo import AuditableRepository


class UserRepository(AuditableRepository[User]):
    """Repository for User operations (data access only)"""

    entity_type = "user"
    module = PermissionModule.USER_MANAGEMENT
    conflict_message = "A user with this email already exists"

    def __init__(self, db: AsyncSession, *, enable_audit: bool = True):
        super().__init__(db, User, enable_audit=enable_audit)

    def _serialize_for_audit(self, obj: User) -> dict[str, Any]:
        return {"id": obj.id, "email": obj.email, "name": obj.name, "status": obj.status}

    async def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup, including soft-deleted users"""
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_live_by_id(self, user_id: str) -> Optional[User]:
        """Get a user that has not been soft-deleted"""
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_by_reset_token(self, token: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.password_reset_token == token)
        )
        return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Return the user when email and password match, None otherwise.

        Status is not checked here; the caller decides how to treat
        inactive accounts once the password has been proven.
        """
        user = await self.get_by_email(email)

        if not user or user.deleted_at is not None:
            # Perform dummy hash check to prevent timing attacks
            await asyncio.to_thread(verify_password, password, DUMMY_PASSWORD_HASH)
            return None

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            return None

        return user

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        status: UserStatus = UserStatus.ACTIVE,
    ) -> User:
        """Create a new user with hashed password"""
        hashed = await asyncio.to_thread(get_password_hash, password)
        user = User(
            name=name,
            email=email.lower(),
            password_hash=hashed,
            status=status.value,
        )
        return await self.create(user)

    async def set_password(self, user: User, new_password: str) -> User:
        user.password_hash = await asyncio.to_thread(get_password_hash, new_password)
        return await self.update(user)

    async def set_status(self, user: User, status: UserStatus) -> User:
        user.status = status.value
        updated = await self.update(user)
        action = AuditAction.ACTIVATED if status == UserStatus.ACTIVE else AuditAction.DEACTIVATED
        await self.emit_audit(action, updated)
        return updated

    async def soft_delete(self, user: User) -> User:
        user.deleted_at = datetime.now(UTC)
        user.status = UserStatus.DEACTIVATED.value
        await self._flush()
        await self.emit_audit(AuditAction.DELETED, user)
        return user

    async def list_users(
        self,
        skip: int = 0,
        limit: int = 100,
        status: UserStatus | None = None,
    ) -> list[User]:
        """List users that have not been soft-deleted"""
        query = select(User).where(User.deleted_at.is_(None))
        if status:
            query = query.where(User.status == status.value)
        result = await self.db.execute(
            query.offset(skip).limit(limit).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())
