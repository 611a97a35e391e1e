from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AuditLogResponse(BaseModel):
    id: str
    actor_id: str | None = None
    action: str
    entity_type: str
    entity_id: str | None = None
    module: str | None = None
    metadata: dict[str, Any] | None = Field(None, validation_alias=AliasChoices("details", "metadata"))
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogPage(BaseModel):
    items: list[AuditLogResponse]
    total: int
    page: int
    limit: int
