from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.enums import PermissionAction, PermissionModule


class PermissionResponse(BaseModel):
    id: str
    action: PermissionAction
    subject: PermissionModule
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PermissionPairResponse(BaseModel):
    action: PermissionAction
    subject: PermissionModule


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100, description="Unique role name")
    description: str | None = Field(None, max_length=500)
    permission_ids: list[str] = Field(
        default_factory=list, description="Permission IDs to grant on creation"
    )


class RoleUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    description: str | None = Field(None, max_length=500)


class RolePermissionAssign(BaseModel):
    permission_id: str = Field(..., min_length=1)


class RoleResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    is_system: bool
    grants_all: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleWithPermissions(RoleResponse):
    permissions: list[PermissionResponse] = []
