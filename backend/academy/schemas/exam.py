from typing import Any
from pydantic import BaseModel

from academy.schemas.common import CamelModel


class ExamCreate(CamelModel):
    # Loosely typed on purpose: coerced and validated by exam_service
    video_id: Any = None
    exam_title: str | None = None
    author: str | None = None
    tag: str | None = None
    department: str | None = None
    questions: Any = None


class ExamCreated(CamelModel):
    success: bool = True
    exam_id: int


class VideoExamCreated(CamelModel):
    message: str
    video_id: int
    exam_id: int
    url: str


class QuestionOut(BaseModel):
    q: str
    a: str | None = None
    image: str | None = None


class ExamResponse(CamelModel):
    exam_title: str
    author: str | None = None
    tag: str | None = None
    department: str | None = None
    questions: list[QuestionOut]
