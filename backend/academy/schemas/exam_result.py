from datetime import datetime
from typing import Any
from pydantic import BaseModel, Field

from academy.schemas.common import CamelModel


class ExamResultCreate(CamelModel):
    video_id: Any = None
    score: Any = None
    exam_title: str | None = None
    user_name: str | None = None


class ExamResultOut(BaseModel):
    id: int
    user: str = Field(validation_alias="user_label")
    video_id: int | None
    exam_title: str | None
    score: float | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ExamResultCreated(BaseModel):
    message: str
    result: ExamResultOut


class BestScore(BaseModel):
    video_id: int | None
    score: float | None


class BestScoresResponse(BaseModel):
    results: list[BestScore]
