from datetime import date

from sqlalchemy import Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.enums import StudentStatus
from models.mixins import BaseModel, SoftDeleteMixin


class Student(BaseModel, SoftDeleteMixin, Base):
    __tablename__ = "student"

    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(String, nullable=False)
    class_id: Mapped[str] = mapped_column(
        String, ForeignKey("class_level.id"), nullable=False, index=True
    )
    section_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("section.id", ondelete="SET NULL"), nullable=True
    )
    admission_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    admission_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=StudentStatus.ACTIVE.value)
