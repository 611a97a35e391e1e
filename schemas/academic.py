from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.enums import RecordStatus


class AcademicYearCreate(BaseModel):
    name: str = Field(..., min_length=4, max_length=50, examples=["2024-2025"])
    start_date: date
    end_date: date
    is_current: bool = False

    @model_validator(mode="after")
    def check_dates(self) -> "AcademicYearCreate":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class AcademicYearUpdate(BaseModel):
    name: str | None = Field(None, min_length=4, max_length=50)
    start_date: date | None = None
    end_date: date | None = None
    is_current: bool | None = None


class AcademicYearResponse(BaseModel):
    id: str
    name: str
    start_date: date
    end_date: date
    is_current: bool

    model_config = ConfigDict(from_attributes=True)


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=2, description="Class name must be at least 2 characters")
    level: str = Field(..., min_length=3)
    status: RecordStatus = RecordStatus.ACTIVE


class ClassUpdate(BaseModel):
    name: str | None = Field(None, min_length=2)
    level: str | None = Field(None, min_length=3)
    status: RecordStatus | None = None


class ClassResponse(BaseModel):
    id: str
    name: str
    level: str
    status: RecordStatus

    model_config = ConfigDict(from_attributes=True)


class SectionCreate(BaseModel):
    name: str = Field(..., min_length=1)
    class_id: str = Field(..., min_length=1)
    capacity: int = Field(..., ge=1, description="Capacity must be a positive integer")
    status: RecordStatus = RecordStatus.ACTIVE


class SectionUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    capacity: int | None = Field(None, ge=1)
    status: RecordStatus | None = None


class SectionResponse(BaseModel):
    id: str
    name: str
    class_id: str
    capacity: int
    status: RecordStatus

    model_config = ConfigDict(from_attributes=True)


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=2)
    class_id: str = Field(..., min_length=1)
    teacher_id: str | None = None
    status: RecordStatus = RecordStatus.ACTIVE


class SubjectUpdate(BaseModel):
    name: str | None = Field(None, min_length=2)
    teacher_id: str | None = None
    status: RecordStatus | None = None


class SubjectResponse(BaseModel):
    id: str
    name: str
    class_id: str
    teacher_id: str | None = None
    status: RecordStatus

    model_config = ConfigDict(from_attributes=True)
