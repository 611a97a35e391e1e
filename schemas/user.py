from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from core.enums import UserStatus


class UserCreate(BaseModel):
    """Admin-provisioned user"""

    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr = Field(..., description="User email address (unique)")
    password: str = Field(..., min_length=8, description="User password (min 8 characters)")
    role_id: str | None = Field(None, description="Role to assign on creation")


class UserUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    email: EmailStr | None = None
    status: UserStatus | None = None


class AssignRoleRequest(BaseModel):
    role_id: str = Field(..., min_length=1, description="Role ID to assign")


class UserResponse(BaseModel):
    """Schema for user responses (excludes password and reset token)"""

    id: str
    name: str
    email: str
    status: UserStatus
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
