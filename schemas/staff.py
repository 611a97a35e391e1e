from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from core.enums import StaffStatus


class StaffCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    position: str = Field(..., min_length=2, max_length=100)
    department: str | None = None
    phone: str | None = None
    hire_date: date | None = None
    status: StaffStatus = StaffStatus.ACTIVE


class StaffUpdate(BaseModel):
    position: str | None = Field(None, min_length=2, max_length=100)
    department: str | None = None
    phone: str | None = None
    hire_date: date | None = None
    status: StaffStatus | None = None


class StaffResponse(BaseModel):
    id: str
    user_id: str
    position: str
    department: str | None = None
    phone: str | None = None
    hire_date: date | None = None
    status: StaffStatus

    model_config = ConfigDict(from_attributes=True)
