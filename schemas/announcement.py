from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    content: str = Field(..., min_length=20)
    is_published: bool = False


class AnnouncementUpdate(BaseModel):
    title: str | None = Field(None, min_length=5, max_length=200)
    content: str | None = Field(None, min_length=20)
    is_published: bool | None = None


class AnnouncementResponse(BaseModel):
    id: str
    title: str
    content: str
    is_published: bool
    author_id: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
