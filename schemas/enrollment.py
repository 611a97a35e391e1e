from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from core.enums import AdmissionStatus, AttendanceStatus, Gender


class AdmissionCreate(BaseModel):
    student_name: str = Field(..., min_length=2, max_length=150)
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date
    gender: Gender
    applied_class_id: str = Field(..., min_length=1)
    admission_date: date = Field(default_factory=date.today)


class AdmissionApprove(BaseModel):
    """Placement decided at approval; a missing admission number is generated"""

    section_id: str | None = None
    admission_number: str | None = Field(None, min_length=1, max_length=50)


class AdmissionResponse(BaseModel):
    id: str
    student_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date
    gender: Gender
    applied_class_id: str
    admission_date: date
    status: AdmissionStatus
    student_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AttendanceEntry(BaseModel):
    student_id: str = Field(..., min_length=1)
    status: AttendanceStatus


class AttendanceMark(BaseModel):
    class_id: str = Field(..., min_length=1)
    attendance_date: date
    records: list[AttendanceEntry] = Field(..., min_length=1)


class AttendanceResponse(BaseModel):
    id: str
    student_id: str
    class_id: str
    attendance_date: date
    status: AttendanceStatus
    marked_by: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PromotionCreate(BaseModel):
    student_ids: list[str] = Field(..., min_length=1)
    from_class_id: str = Field(..., min_length=1)
    to_class_id: str = Field(..., min_length=1)
    academic_year_id: str = Field(..., min_length=1)
    promotion_date: date = Field(default_factory=date.today)


class PromotionResponse(BaseModel):
    id: str
    student_id: str
    from_class_id: str
    to_class_id: str
    academic_year_id: str
    promotion_date: date
    promoted_by: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PromotionResult(BaseModel):
    """Students not in the source class (or no longer enrolled) are skipped"""

    promoted: list[PromotionResponse]
    skipped: list[str]
