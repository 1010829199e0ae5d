from datetime import datetime
from pydantic import field_validator

from academy.schemas.common import CamelModel


class UserCreate(CamelModel):
    full_name: str
    role: str
    work_area: str
    authority: str
    username: str
    email: str
    password: str
    tags: list[str] | str = []
    school: str | None = None
    department: str | None = None


class UserUpdate(CamelModel):
    """Every field optional; only the ones sent are written."""

    full_name: str | None = None
    role: str | None = None
    work_area: str | None = None
    authority: str | None = None
    username: str | None = None
    email: str | None = None
    password: str | None = None
    tags: list[str] | str | None = None
    school: str | None = None
    department: str | None = None


class UserResponse(CamelModel):
    id: int
    full_name: str
    role: str
    work_area: str | None = None
    authority: str
    username: str
    email: str
    tags: list[str] = []
    school: str = ""
    department: str = ""

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v):
        return list(v or [])

    @field_validator("school", "department", mode="before")
    @classmethod
    def _blank(cls, v):
        return v or ""


class EducationUpdate(CamelModel):
    school: str = ""
    department: str = ""


class EducationResponse(CamelModel):
    school: str = ""
    department: str = ""


class EducationEntryIn(CamelModel):
    school: str | None = ""
    department: str | None = ""


class EducationListUpdate(CamelModel):
    entries: list[EducationEntryIn]


class EducationEntry(CamelModel):
    id: int
    school: str | None
    department: str | None
    created_at: datetime | None = None


class EducationListResponse(CamelModel):
    message: str | None = None
    entries: list[EducationEntry]


class WatchRequest(CamelModel):
    video_id: int


class WatchedResponse(CamelModel):
    message: str | None = None
    watched_videos: list[int]


class WatchedVideo(CamelModel):
    id: int
    title: str
    url: str | None = None
    description: str | None = None


class WatchedVideosResponse(CamelModel):
    watched_videos: list[WatchedVideo]


class Training(CamelModel):
    id: int
    title: str
    tags: list[str] = []
    score: float | None = None


class TrainingsResponse(CamelModel):
    trainings: list[Training]
