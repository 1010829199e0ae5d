from dataclasses import dataclass
from sqlalchemy import select, delete, func, text, bindparam, LargeBinary, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.asyncio import AsyncSession

from academy.models.video import Video

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class ContentInfo:
    mime_type: str
    total: int


@dataclass(frozen=True)
class StoredContent:
    mime_type: str
    total: int
    content: bytes


def stream_url(base_url: str, video_id: int) -> str:
    return f"{base_url.rstrip('/')}/api/videos/{video_id}/stream"


async def create_video(
    session: AsyncSession,
    title: str,
    content: bytes,
    base_url: str,
    description: str | None = None,
    uploader: str | None = None,
    tags: list[str] | None = None,
    filename: str | None = None,
    mime_type: str | None = None,
) -> Video:
    video = Video(
        title=title,
        description=description,
        uploader=uploader,
        tags=tags or [],
        filename=filename,
        mime_type=mime_type or DEFAULT_MIME_TYPE,
        size_bytes=len(content),
        content=content,
    )
    session.add(video)
    await session.flush()
    # url embeds the generated id, so it is written in a second statement
    video.url = stream_url(base_url, video.id)
    await session.flush()
    await session.refresh(video, ["created_at"])
    return video


async def list_videos(session: AsyncSession) -> list[Video]:
    result = await session.execute(select(Video).order_by(Video.id.desc()))
    return list(result.scalars().all())


async def get_video_by_id(session: AsyncSession, video_id: int) -> Video | None:
    result = await session.execute(select(Video).where(Video.id == video_id))
    return result.scalars().one_or_none()


async def get_video_for_update(session: AsyncSession, video_id: int) -> Video | None:
    result = await session.execute(select(Video).where(Video.id == video_id).with_for_update())
    return result.scalars().one_or_none()


async def video_exists(session: AsyncSession, video_id: int) -> bool:
    result = await session.execute(select(Video.id).where(Video.id == video_id))
    return result.scalar_one_or_none() is not None


async def read_length(session: AsyncSession, video_id: int) -> ContentInfo | None:
    """Mime type and stored byte count, without transferring the content."""
    result = await session.execute(
        select(Video.mime_type, func.octet_length(Video.content).label("total")).where(Video.id == video_id)
    )
    row = result.first()
    if row is None:
        return None
    return ContentInfo(mime_type=row.mime_type or DEFAULT_MIME_TYPE, total=int(row.total or 0))


async def read_all(session: AsyncSession, video_id: int) -> StoredContent | None:
    result = await session.execute(
        select(
            Video.mime_type,
            func.octet_length(Video.content).label("total"),
            Video.content,
        ).where(Video.id == video_id)
    )
    row = result.first()
    if row is None:
        return None
    return StoredContent(
        mime_type=row.mime_type or DEFAULT_MIME_TYPE,
        total=int(row.total or 0),
        content=bytes(row.content or b""),
    )


async def read_window(session: AsyncSession, video_id: int, offset: int, length: int) -> bytes | None:
    """Return ``length`` bytes starting at the 1-indexed ``offset``."""
    chunk = func.substring(Video.content, offset, length, type_=LargeBinary).label("chunk")
    result = await session.execute(select(chunk).where(Video.id == video_id))
    value = result.scalar_one_or_none()
    return bytes(value) if value else None


async def add_tag(session: AsyncSession, video: Video, tag: str) -> Video:
    tags = list(video.tags or [])
    if tag not in tags:
        # ARRAY columns are not mutation-tracked; assign a new list
        video.tags = tags + [tag]
        await session.flush()
    return video


async def delete_video(session: AsyncSession, video_id: int) -> bool:
    result = await session.execute(delete(Video).where(Video.id == video_id).returning(Video.id))
    return result.scalar_one_or_none() is not None


_TAG_MATCH = text(
    "EXISTS (SELECT 1 FROM unnest(videos.tags) AS t "
    "WHERE lower(t) = ANY(:needles) OR lower(t) LIKE ANY(:patterns))"
)


async def get_recommended_videos(session: AsyncSession, needles: list[str]) -> list[Video]:
    """Videos with at least one tag equal to, or containing, one of ``needles`` (case-insensitive)."""
    lowered = [n.lower() for n in needles if n]
    if not lowered:
        return []
    clause = _TAG_MATCH.bindparams(
        bindparam("needles", value=lowered, type_=ARRAY(Text)),
        bindparam("patterns", value=[f"%{n}%" for n in lowered], type_=ARRAY(Text)),
    )
    result = await session.execute(select(Video).where(clause).order_by(Video.id.desc()))
    return list(result.scalars().all())
