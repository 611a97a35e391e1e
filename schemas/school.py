from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl


class SchoolProfileUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""

    school_name: str | None = Field(None, min_length=3)
    email: EmailStr | None = None
    phone: str | None = Field(None, min_length=10)
    address: str | None = Field(None, min_length=5)
    city: str | None = Field(None, min_length=2)
    state: str | None = Field(None, min_length=2)
    zip_code: str | None = Field(None, min_length=5)
    mission: str | None = None
    logo_url: HttpUrl | None = None


class SchoolProfileResponse(BaseModel):
    id: str
    school_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    mission: str | None = None
    logo_url: str | None = None
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
