"""Exam creation as one all-or-nothing unit.

Two entry points share the same insert sequence:

* ``create_exam``: exam + questions for an existing video (row-locked);
* ``create_video_with_exam``: video upload + exam + questions in one unit.

Payloads are validated before the unit opens. Inside it, any failure rolls
back every row written so far, including a video created by the same call.
"""
import json
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.repositories import exam_repo, video_repo
from academy.db.session import atomic
from academy.errors import Conflict, NotFound, ValidationError
from academy.models.exam import Exam
from academy.models.video import Video
from academy.services import video_service

logger = logging.getLogger(__name__)

EXAM_TAG = "SINAVLI"


@dataclass(frozen=True)
class ExamFields:
    exam_title: str
    author: str
    tag: str
    department: str


@dataclass(frozen=True)
class QuestionInput:
    question_text: str
    answer_text: str | None = None
    image_url: str | None = None


def _first_present(item: dict, *keys):
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def parse_questions(raw, require_any: bool = False) -> list[QuestionInput]:
    """Accept a list or its JSON encoding; items use ``q|question_text``, ``a|answer_text``, ``image|image_url``."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raw = []
    elif isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError("questions is not valid JSON")
    if not isinstance(raw, list):
        raise ValidationError("questions must be an array")
    if require_any and not raw:
        raise ValidationError("questions must not be empty")

    parsed = []
    for index, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            raise ValidationError(f"Question {index} must be an object")
        text = _first_present(item, "q", "question_text")
        text = str(text).strip() if text is not None else ""
        if not text:
            raise ValidationError(f"Question {index} has no text")
        answer = _first_present(item, "a", "answer_text")
        image = _first_present(item, "image", "image_url")
        parsed.append(
            QuestionInput(
                question_text=text,
                answer_text=str(answer) if answer is not None else None,
                image_url=str(image) if image else None,
            )
        )
    return parsed


def parse_exam_fields(exam_title, author, tag, department) -> ExamFields:
    values = [str(v).strip() if v is not None else "" for v in (exam_title, author, tag, department)]
    if not all(values):
        raise ValidationError("Missing exam fields (examTitle/author/tag/department)")
    return ExamFields(*values)


def parse_video_id(value) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("videoId must be an integer")


async def _insert_exam(
    session: AsyncSession, video: Video, fields: ExamFields, questions: list[QuestionInput]
) -> Exam:
    if await exam_repo.get_exam_by_video_id(session, video.id):
        raise Conflict("An exam already exists for this video")
    try:
        exam = await exam_repo.create_exam(
            session,
            video_id=video.id,
            exam_title=fields.exam_title,
            author=fields.author,
            tag=fields.tag,
            department=fields.department,
        )
    except IntegrityError:
        # exams.video_id unique index: a concurrent request won the race
        raise Conflict("An exam already exists for this video")
    for question in questions:
        await exam_repo.create_question(
            session,
            exam_id=exam.id,
            question_text=question.question_text,
            answer_text=question.answer_text,
            image_url=question.image_url,
        )
    await video_repo.add_tag(session, video, EXAM_TAG)
    return exam


async def create_exam(
    session: AsyncSession, video_id: int, fields: ExamFields, questions: list[QuestionInput]
) -> Exam:
    async with atomic(session):
        video = await video_repo.get_video_for_update(session, video_id)
        if not video:
            raise NotFound("Video not found")
        exam = await _insert_exam(session, video, fields, questions)
    logger.info("Created exam %s for video %s with %d questions", exam.id, video_id, len(questions))
    return exam


async def create_video_with_exam(
    session: AsyncSession,
    upload: "video_service.VideoUpload",
    fields: ExamFields,
    questions: list[QuestionInput],
    base_url: str,
) -> tuple[Video, Exam]:
    async with atomic(session):
        video = await video_service.store_video(session, upload, base_url)
        exam = await _insert_exam(session, video, fields, questions)
    logger.info("Created video %s with exam %s (%d questions)", video.id, exam.id, len(questions))
    return video, exam
