from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.enums import UserStatus
from models.mixins import BaseModel, SoftDeleteMixin


class User(BaseModel, SoftDeleteMixin, Base):
    """
    Login identity.

    Inherits from BaseModel:
        - id: CUID primary key
        - created_at / updated_at
    and from SoftDeleteMixin:
        - deleted_at: users are never hard-deleted
    """

    __tablename__ = "user"

    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    external_id: Mapped[str | None] = mapped_column(String, nullable=True, unique=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=UserStatus.ACTIVE.value
    )
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    password_reset_token: Mapped[str | None] = mapped_column(
        String, nullable=True, unique=True, index=True
    )
    password_reset_expires: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint(f"status IN {tuple(UserStatus.values())}", name="user_status_check"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value and self.deleted_at is None
