from sqlalchemy import Boolean, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from models.mixins import BaseModel


class Role(BaseModel, Base):
    """Named permission bundle (e.g. 'Admin', 'Teacher', 'Accountant')"""

    __tablename__ = "role"

    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # System roles cannot be modified or deleted
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Holders are granted every permission in the catalog
    grants_all: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


# Role names are unique regardless of case
Index("uq_role_name_ci", func.lower(Role.name), unique=True)
