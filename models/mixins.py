"""
SQLAlchemy mixins shared by the school models.

    - CuidMixin: collision-resistant string primary key
    - TimestampMixin: created_at / updated_at
    - SoftDeleteMixin: deleted_at tombstone (users and students are never hard-deleted)
"""
from datetime import datetime

from cuid2 import cuid_wrapper
from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

generate_cuid = cuid_wrapper()


class CuidMixin:
    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TimestampMixin:
    """
    Timezone-aware creation and modification timestamps, set server-side.
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class SoftDeleteMixin:
    """
    Soft delete support (tombstone pattern).

    Query live rows only: .where(Model.deleted_at.is_(None))
    """

    @declared_attr
    def deleted_at(cls) -> Mapped[datetime | None]:
        return mapped_column(DateTime(timezone=True), nullable=True, index=True)


class BaseModel(CuidMixin, TimestampMixin):
    """CUID primary key plus timestamps - the shape of most tables"""

    __abstract__ = True
