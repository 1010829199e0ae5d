import logging
import mimetypes
import uuid
from dataclasses import dataclass, field

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from academy.config import settings
from academy.db.repositories import video_repo, user_repo
from academy.db.session import atomic
from academy.errors import NotFound, PayloadTooLarge, ValidationError
from academy.models.video import Video
from academy.services import membership_service

logger = logging.getLogger(__name__)


@dataclass
class VideoUpload:
    title: str
    content: bytes
    filename: str | None = None
    mime_type: str | None = None
    description: str | None = None
    uploader: str | None = None
    tags: list[str] = field(default_factory=list)


def normalize_tags(tags, group: str | None = None) -> list[str]:
    """Accept a list or a comma separated string; optionally prefix with ``group > ``."""
    if isinstance(tags, str):
        items = tags.split(",")
    elif isinstance(tags, (list, tuple)):
        items = tags
    else:
        items = []
    cleaned = [str(t).strip() for t in items]
    group = (group or "").strip()
    return [f"{group} > {t}" if group and ">" not in t else t for t in cleaned if t]


def department_tag(work_area: str | None) -> str | None:
    """``"depo alanı"`` -> ``"DEPARTMAN > Depo Alanı"``."""
    words = str(work_area or "").strip().lower().split()
    if not words:
        return None
    return "DEPARTMAN > " + " ".join(w[0].upper() + w[1:] for w in words)


def guess_mime_type(filename: str | None, declared: str | None) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or declared or video_repo.DEFAULT_MIME_TYPE


def build_upload(
    content: bytes,
    filename: str | None,
    content_type: str | None,
    title: str | None,
    uploader: str | None,
    description: str | None = None,
    tags: list[str] | None = None,
) -> VideoUpload:
    if not (title or "").strip() or not (uploader or "").strip():
        raise ValidationError("title and uploader are required")
    if len(content) > settings.max_upload_bytes:
        raise PayloadTooLarge(f"File exceeds {settings.max_upload_bytes} bytes")
    filename = filename or f"upload-{uuid.uuid4()}"
    return VideoUpload(
        title=title.strip(),
        content=content,
        filename=filename,
        mime_type=guess_mime_type(filename, content_type),
        description=description or None,
        uploader=uploader.strip(),
        tags=tags or [],
    )


async def store_video(session: AsyncSession, upload: VideoUpload, base_url: str) -> Video:
    video = await video_repo.create_video(
        session,
        title=upload.title,
        content=upload.content,
        base_url=base_url,
        description=upload.description,
        uploader=upload.uploader,
        tags=upload.tags,
        filename=upload.filename,
        mime_type=upload.mime_type,
    )
    logger.info("Stored video %s (%s, %d bytes)", video.id, upload.filename, len(upload.content))
    return video


async def upload_videos(session: AsyncSession, uploads: list[VideoUpload], base_url: str) -> list[Video]:
    """Store every file or none of them."""
    if not uploads:
        raise ValidationError("No file uploaded")
    async with atomic(session):
        return [await store_video(session, upload, base_url) for upload in uploads]


async def recommended_for_user(session: AsyncSession, user_id: int) -> list[Video]:
    user = await user_repo.get_user_by_id(session, user_id)
    if not user:
        raise NotFound("User not found")
    needles = list(dict.fromkeys([*(user.tags or []), department_tag(user.work_area)]))
    needles = [n for n in needles if n]
    if not needles:
        return []
    return await video_repo.get_recommended_videos(session, needles)


async def delete_video(session: AsyncSession, video_id: int) -> None:
    """Delete a video and keep every user's watched list in step with the view log."""
    async with atomic(session):
        cleared = await membership_service.remove_member_everywhere(
            session, membership_service.WATCHED_VIDEOS, video_id
        )
        if not await video_repo.delete_video(session, video_id):
            raise NotFound("Video not found")
    logger.info("Deleted video %s (removed from %d watched lists)", video_id, cleared)


async def read_upload(file: UploadFile) -> bytes:
    """Read an upload, refusing it as soon as it is known to exceed ``max_upload_bytes``."""
    limit = settings.max_upload_bytes
    if file.size is not None and file.size > limit:
        raise PayloadTooLarge(f"File exceeds {limit} bytes")
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise PayloadTooLarge(f"File exceeds {limit} bytes")
    return content
