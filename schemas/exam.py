from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.enums import ExamStatus

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ExamCreate(BaseModel):
    name: str = Field(..., min_length=3)
    academic_year_id: str = Field(..., min_length=1)
    term: str = Field(..., min_length=1)
    class_ids: list[str] = Field(..., min_length=1)
    subject_ids: list[str] = Field(..., min_length=1)
    status: ExamStatus = ExamStatus.DRAFT


class ExamUpdate(BaseModel):
    name: str | None = Field(None, min_length=3)
    term: str | None = Field(None, min_length=1)
    class_ids: list[str] | None = Field(None, min_length=1)
    subject_ids: list[str] | None = Field(None, min_length=1)
    status: ExamStatus | None = None


class ExamResponse(BaseModel):
    id: str
    name: str
    academic_year_id: str
    term: str
    class_ids: list[str]
    subject_ids: list[str]
    status: ExamStatus

    model_config = ConfigDict(from_attributes=True)


class ExamScheduleCreate(BaseModel):
    exam_id: str = Field(..., min_length=1)
    class_id: str = Field(..., min_length=1)
    subject_id: str = Field(..., min_length=1)
    exam_date: date
    start_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    end_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    room: str | None = None

    @model_validator(mode="after")
    def check_times(self) -> "ExamScheduleCreate":
        # Zero-padded HH:MM strings compare correctly as text
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ExamScheduleResponse(BaseModel):
    id: str
    exam_id: str
    class_id: str
    subject_id: str
    exam_date: date
    start_time: str
    end_time: str
    room: str | None = None

    model_config = ConfigDict(from_attributes=True)


class MarkEntry(BaseModel):
    exam_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)
    subject_id: str = Field(..., min_length=1)
    marks_obtained: Decimal = Field(..., ge=0)
    max_marks: Decimal = Field(..., gt=0)

    @model_validator(mode="after")
    def check_marks(self) -> "MarkEntry":
        if self.marks_obtained > self.max_marks:
            raise ValueError("marks_obtained cannot exceed max_marks")
        return self


class MarkResponse(BaseModel):
    id: str
    exam_id: str
    student_id: str
    subject_id: str
    marks_obtained: Decimal
    max_marks: Decimal

    model_config = ConfigDict(from_attributes=True)


class ReportCard(BaseModel):
    exam_id: str
    student_id: str
    marks: list[MarkResponse]
    total_obtained: Decimal
    total_max: Decimal
    percentage: Decimal
    grade: str
    result: str
    remarks: str
