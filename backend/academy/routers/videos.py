from fastapi import APIRouter, Depends, File, Form, Header, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.session import get_db
from academy.db.repositories import video_repo
from academy.dependencies import public_base_url
from academy.schemas.video import VideoResponse
from academy.services import streaming_service, video_service

router = APIRouter()


@router.post("", response_model=list[VideoResponse], status_code=status.HTTP_201_CREATED)
async def upload_videos(
    request: Request,
    file: list[UploadFile] = File(...),
    title: str | None = Form(None),
    desc: str | None = Form(None),
    uploader: str | None = Form(None),
    tags: list[str] | None = Form(None),
    group: str | None = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Upload one or more video files sharing the same metadata."""
    # a single "a,b" field and repeated tags fields are both accepted
    raw_tags = tags[0] if tags and len(tags) == 1 else tags
    normalized = video_service.normalize_tags(raw_tags, group)
    uploads = [
        video_service.build_upload(
            content=await video_service.read_upload(f),
            filename=f.filename,
            content_type=f.content_type,
            title=title,
            uploader=uploader,
            description=desc,
            tags=normalized,
        )
        for f in file
    ]
    return await video_service.upload_videos(db, uploads, public_base_url(request))


@router.get("", response_model=list[VideoResponse])
async def list_videos(request: Request, db: AsyncSession = Depends(get_db)):
    videos = await video_repo.list_videos(db)
    base = public_base_url(request)
    return [
        VideoResponse.model_validate(v).model_copy(update={"url": v.url or video_repo.stream_url(base, v.id)})
        for v in videos
    ]


@router.get("/recommended/{user_id}", response_model=list[VideoResponse])
async def recommended_videos(user_id: int, db: AsyncSession = Depends(get_db)):
    """Videos whose tags match the user's tags or department."""
    return await video_service.recommended_for_user(db, user_id)


@router.get("/{video_id}/stream")
async def stream_video(
    video_id: int,
    range_header: str | None = Header(None, alias="Range"),
    db: AsyncSession = Depends(get_db),
):
    return await streaming_service.stream_video(db, video_id, range_header)


@router.delete("/{video_id}")
async def delete_video(video_id: int, db: AsyncSession = Depends(get_db)):
    await video_service.delete_video(db, video_id)
    return {"ok": True}
