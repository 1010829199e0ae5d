from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.session import get_db
from academy.dependencies import public_base_url
from academy.errors import ValidationError
from academy.schemas.exam import VideoExamCreated
from academy.services import exam_service, video_service

router = APIRouter()


@router.post("", response_model=VideoExamCreated, status_code=status.HTTP_201_CREATED)
async def create_video_exam(
    request: Request,
    file: UploadFile | None = File(None),
    title: str | None = Form(None),
    desc: str | None = Form(None),
    uploader: str | None = Form(None),
    tags: list[str] | None = Form(None),
    exam_title: str | None = Form(None, alias="examTitle"),
    author: str | None = Form(None),
    tag: str | None = Form(None),
    department: str | None = Form(None),
    questions: str | None = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Upload a video and create its exam and questions in one transaction."""
    if file is None:
        raise ValidationError("No video file uploaded")
    raw_tags = tags[0] if tags and len(tags) == 1 else tags
    upload = video_service.build_upload(
        content=await video_service.read_upload(file),
        filename=file.filename or "upload.bin",
        content_type=file.content_type,
        title=title,
        uploader=uploader,
        description=desc,
        tags=video_service.normalize_tags(raw_tags),
    )
    fields = exam_service.parse_exam_fields(exam_title, author, tag, department)
    parsed = exam_service.parse_questions(questions)

    video, exam = await exam_service.create_video_with_exam(
        db, upload, fields, parsed, public_base_url(request)
    )
    return VideoExamCreated(
        message="Video, exam and questions saved",
        video_id=video.id,
        exam_id=exam.id,
        url=video.url,
    )
