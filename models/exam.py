from datetime import date
from decimal import Decimal

from sqlalchemy import JSON, Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.enums import ExamStatus
from models.mixins import BaseModel


class Exam(BaseModel, Base):
    __tablename__ = "exam"

    name: Mapped[str] = mapped_column(String, nullable=False)
    academic_year_id: Mapped[str] = mapped_column(
        String, ForeignKey("academic_year.id"), nullable=False
    )
    term: Mapped[str] = mapped_column(String, nullable=False)
    class_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    subject_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default=ExamStatus.DRAFT.value)


class ExamSchedule(BaseModel, Base):
    """One sitting: a subject paper for a class, on a date, between two HH:MM times"""

    __tablename__ = "exam_schedule"

    exam_id: Mapped[str] = mapped_column(
        String, ForeignKey("exam.id", ondelete="CASCADE"), nullable=False, index=True
    )
    class_id: Mapped[str] = mapped_column(String, ForeignKey("class_level.id"), nullable=False)
    subject_id: Mapped[str] = mapped_column(String, ForeignKey("subject.id"), nullable=False)
    exam_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    room: Mapped[str | None] = mapped_column(String, nullable=True)


class ExamMark(BaseModel, Base):
    __tablename__ = "exam_mark"

    exam_id: Mapped[str] = mapped_column(
        String, ForeignKey("exam.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[str] = mapped_column(String, ForeignKey("student.id"), nullable=False)
    subject_id: Mapped[str] = mapped_column(String, ForeignKey("subject.id"), nullable=False)
    marks_obtained: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    max_marks: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)

    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", "subject_id", name="uq_exam_mark"),
    )
