from datetime import date

from sqlalchemy import Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base
from core.enums import AdmissionStatus
from models.mixins import BaseModel


class Admission(BaseModel, Base):
    """
    An application for a place in a class.

    Approval turns a Pending admission into a Student and links the two.
    """

    __tablename__ = "admission"

    student_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(String, nullable=False)
    applied_class_id: Mapped[str] = mapped_column(
        String, ForeignKey("class_level.id"), nullable=False, index=True
    )
    admission_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=AdmissionStatus.PENDING.value, index=True
    )
    student_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("student.id", ondelete="SET NULL"), nullable=True
    )


class Attendance(BaseModel, Base):
    __tablename__ = "attendance"

    student_id: Mapped[str] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=False
    )
    class_id: Mapped[str] = mapped_column(
        String, ForeignKey("class_level.id"), nullable=False, index=True
    )
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String, nullable=False)
    marked_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("user.id", ondelete="SET NULL"), nullable=True
    )

    # One mark per student per day; re-marking overwrites it
    __table_args__ = (
        UniqueConstraint("student_id", "attendance_date", name="uq_attendance_student_date"),
    )


class Promotion(BaseModel, Base):
    """History row written each time a student moves up a class"""

    __tablename__ = "promotion"

    student_id: Mapped[str] = mapped_column(
        String, ForeignKey("student.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_class_id: Mapped[str] = mapped_column(String, ForeignKey("class_level.id"), nullable=False)
    to_class_id: Mapped[str] = mapped_column(String, ForeignKey("class_level.id"), nullable=False)
    academic_year_id: Mapped[str] = mapped_column(
        String, ForeignKey("academic_year.id"), nullable=False
    )
    promotion_date: Mapped[date] = mapped_column(Date, nullable=False)
    promoted_by: Mapped[str | None] = mapped_column(
        String, ForeignKey("user.id", ondelete="SET NULL"), nullable=True
    )
