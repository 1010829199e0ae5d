from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.session import get_db
from academy.db.repositories import exam_repo
from academy.errors import NotFound
from academy.schemas.exam import ExamCreate, ExamCreated, ExamResponse, QuestionOut
from academy.services import exam_service

router = APIRouter()


@router.api_route("", methods=["POST", "PUT"], response_model=ExamCreated, status_code=status.HTTP_201_CREATED)
async def create_exam(body: ExamCreate, db: AsyncSession = Depends(get_db)):
    """Attach an exam and its questions to an existing video (once per video)."""
    video_id = exam_service.parse_video_id(body.video_id)
    questions = exam_service.parse_questions(body.questions, require_any=True)
    fields = exam_service.parse_exam_fields(body.exam_title, body.author, body.tag, body.department)
    exam = await exam_service.create_exam(db, video_id, fields, questions)
    return ExamCreated(exam_id=exam.id)


@router.get("/{video_id}", response_model=ExamResponse)
async def get_exam(video_id: int, db: AsyncSession = Depends(get_db)):
    exam = await exam_repo.get_exam_with_questions(db, video_id)
    if not exam:
        raise NotFound("No exam for this video")
    return ExamResponse(
        exam_title=exam.exam_title,
        author=exam.author,
        tag=exam.tag,
        department=exam.department,
        questions=[QuestionOut(q=q.question_text, a=q.answer_text, image=q.image_url) for q in exam.questions],
    )
