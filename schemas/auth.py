from pydantic import BaseModel, EmailStr, Field

from schemas.user import UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, description="User password (min 8 characters)")


class AdminRegisterRequest(RegisterRequest):
    secret_key: str = Field(..., min_length=1, description="Must match ADMIN_SECRET_KEY")


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)


class SessionUser(UserResponse):
    """User as seen by the session endpoints"""

    roles: list[str] = []
    is_admin: bool = False


class LoginResponse(BaseModel):
    user: SessionUser
    access_token: str
    token_type: str = "bearer"
    redirect_url: str


class SessionResponse(BaseModel):
    user: SessionUser | None = None


class MessageResponse(BaseModel):
    message: str
