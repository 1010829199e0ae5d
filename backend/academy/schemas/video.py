from datetime import datetime
from pydantic import BaseModel, field_validator


class VideoResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    uploader: str | None = None
    tags: list[str] = []
    url: str | None = None
    filename: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = None
    created_at: datetime | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v):
        return [str(t).strip() for t in (v or [])]

    class Config:
        from_attributes = True
