from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from academy.models.exam import Exam
from academy.models.question import Question


async def get_exam_by_video_id(session: AsyncSession, video_id: int) -> Exam | None:
    result = await session.execute(select(Exam).where(Exam.video_id == video_id).limit(1))
    return result.scalars().first()


async def get_exam_with_questions(session: AsyncSession, video_id: int) -> Exam | None:
    result = await session.execute(
        select(Exam)
        .where(Exam.video_id == video_id)
        .options(selectinload(Exam.questions))
        .order_by(Exam.id.desc())
        .limit(1)
    )
    return result.scalars().first()


async def create_exam(
    session: AsyncSession,
    video_id: int,
    exam_title: str,
    author: str,
    tag: str,
    department: str,
) -> Exam:
    exam = Exam(video_id=video_id, exam_title=exam_title, author=author, tag=tag, department=department)
    session.add(exam)
    await session.flush()
    await session.refresh(exam, ["created_at"])
    return exam


async def create_question(
    session: AsyncSession,
    exam_id: int,
    question_text: str,
    answer_text: str | None = None,
    image_url: str | None = None,
) -> Question:
    question = Question(exam_id=exam_id, question_text=question_text, answer_text=answer_text, image_url=image_url)
    session.add(question)
    await session.flush()
    return question
