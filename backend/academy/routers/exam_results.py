import logging
import math
from urllib.parse import unquote

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.session import get_db
from academy.db.repositories import exam_result_repo, video_repo
from academy.errors import NotFound, ValidationError
from academy.schemas.exam_result import (
    BestScore, BestScoresResponse, ExamResultCreate, ExamResultCreated, ExamResultOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ExamResultCreated, status_code=status.HTTP_201_CREATED)
async def create_exam_result(body: ExamResultCreate, db: AsyncSession = Depends(get_db)):
    try:
        video_id = int(str(body.video_id).strip())
        score = float(body.score)
    except (TypeError, ValueError):
        raise ValidationError("Missing or invalid data")
    user_name = (body.user_name or "").strip()
    exam_title = (body.exam_title or "").strip()
    if not math.isfinite(score) or not exam_title or not user_name:
        raise ValidationError("Missing or invalid data")

    if not await video_repo.video_exists(db, video_id):
        raise NotFound("Video not found")
    try:
        result = await exam_result_repo.create_result(db, user_name, video_id, exam_title, score)
        await db.commit()
    except IntegrityError:
        # video deleted between the check and the insert
        await db.rollback()
        raise NotFound("Video not found")
    logger.info("Exam result %s stored for video %s", result.id, video_id)
    return ExamResultCreated(message="Exam result saved", result=ExamResultOut.model_validate(result))


@router.get("/user/{user_name}", response_model=BestScoresResponse)
async def best_scores(user_name: str, db: AsyncSession = Depends(get_db)):
    """Highest score per video for a participant name (case-insensitive)."""
    name = unquote(user_name or "").strip()
    if not name:
        raise ValidationError("userName is required")
    rows = await exam_result_repo.get_best_scores(db, name)
    return BestScoresResponse(results=[BestScore(video_id=v, score=s) for v, s in rows])
