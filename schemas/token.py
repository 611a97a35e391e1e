from pydantic import BaseModel, ConfigDict, Field


class TokenPayload(BaseModel):
    """Session token claims"""

    sub: str = Field(..., description="User ID (subject)")
    email: str = Field(..., description="User email at issue time")
    roles: list[str] = Field(default_factory=list, description="Role names at issue time")
    exp: int = Field(..., description="Token expiration timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "sub": "clx0user123",
                "email": "accountant@hiigsi.com",
                "roles": ["Accountant"],
                "exp": 1234567890,
            }
        }
    )
