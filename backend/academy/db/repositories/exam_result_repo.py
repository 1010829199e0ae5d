from decimal import Decimal
from sqlalchemy import select, func, cast, Float
from sqlalchemy.ext.asyncio import AsyncSession

from academy.models.exam_result import ExamResult


async def create_result(
    session: AsyncSession, user_label: str, video_id: int, exam_title: str, score: float
) -> ExamResult:
    result = ExamResult(user_label=user_label, video_id=video_id, exam_title=exam_title, score=Decimal(str(score)))
    session.add(result)
    await session.flush()
    await session.refresh(result, ["created_at"])
    return result


async def get_best_scores(session: AsyncSession, user_label: str) -> list[tuple[int, float]]:
    """Highest score per video for a participant name, matched case-insensitively."""
    result = await session.execute(
        select(ExamResult.video_id, cast(func.max(ExamResult.score), Float).label("score"))
        .where(func.lower(ExamResult.user_label) == user_label.lower())
        .group_by(ExamResult.video_id)
        .order_by(ExamResult.video_id)
    )
    return [(row.video_id, row.score) for row in result.all()]
