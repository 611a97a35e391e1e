from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from core.enums import Gender, StudentStatus


class StudentCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=150)
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date
    gender: Gender
    class_id: str = Field(..., min_length=1)
    section_id: str | None = None
    admission_number: str = Field(..., min_length=1, max_length=50)
    admission_date: date
    status: StudentStatus = StudentStatus.ACTIVE


class StudentUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=150)
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    class_id: str | None = None
    section_id: str | None = None
    status: StudentStatus | None = None


class StudentResponse(BaseModel):
    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date
    gender: Gender
    class_id: str
    section_id: str | None = None
    admission_number: str
    admission_date: date
    status: StudentStatus

    model_config = ConfigDict(from_attributes=True)
