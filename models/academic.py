from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.enums import RecordStatus
from models.mixins import BaseModel


class AcademicYear(BaseModel, Base):
    __tablename__ = "academic_year"

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)  # e.g. "2024-2025"
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class ClassLevel(BaseModel, Base):
    """A class/grade, e.g. name 'Grade 5', level 'Primary'"""

    __tablename__ = "class_level"

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    level: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=RecordStatus.ACTIVE.value)


class Section(BaseModel, Base):
    __tablename__ = "section"

    name: Mapped[str] = mapped_column(String, nullable=False)
    class_id: Mapped[str] = mapped_column(
        String, ForeignKey("class_level.id", ondelete="CASCADE"), nullable=False, index=True
    )
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=RecordStatus.ACTIVE.value)


class Subject(BaseModel, Base):
    __tablename__ = "subject"

    name: Mapped[str] = mapped_column(String, nullable=False)
    class_id: Mapped[str] = mapped_column(
        String, ForeignKey("class_level.id", ondelete="CASCADE"), nullable=False, index=True
    )
    teacher_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("staff.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(String, nullable=False, default=RecordStatus.ACTIVE.value)
