import logging

from fastapi import Response
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.repositories import video_repo
from academy.errors import NotFound
from academy.services.range_service import parse_range_header, resolve_range

logger = logging.getLogger(__name__)


async def stream_video(session: AsyncSession, video_id: int, range_header: str | None) -> Response:
    """Serve stored video bytes, honouring a single ``Range`` request.

    A ranged request performs one length query and exactly one windowed read;
    only the whole-object branch transfers the full content. All bytes are
    read before the response is built, and the session's connection is handed
    back to the pool before the body goes out, so a client that drops the
    connection mid-transfer never pins a database connection.
    """
    if range_header is None:
        stored = await video_repo.read_all(session, video_id)
        await session.commit()
        if stored is None:
            raise NotFound("Video not found")
        window = resolve_range(None, stored.total)
        headers = {"Accept-Ranges": "bytes", "Content-Length": str(stored.total)}
        if stored.total:
            headers["Content-Range"] = window.content_range
        return Response(content=stored.content, status_code=200, media_type=stored.mime_type, headers=headers)

    # malformed headers are rejected before touching the database
    parse_range_header(range_header)
    info = await video_repo.read_length(session, video_id)
    if info is None:
        await session.commit()
        raise NotFound("Video not found")
    window = resolve_range(range_header, info.total)
    chunk = await video_repo.read_window(session, video_id, window.storage_offset, window.length)
    await session.commit()
    if not chunk or len(chunk) != window.length:
        logger.warning(
            "Video %s: window %s returned %d bytes", video_id, window.content_range, len(chunk or b"")
        )
        raise NotFound("Requested range could not be read")

    return Response(
        content=chunk,
        status_code=window.status_code,
        media_type=info.mime_type,
        headers={
            "Accept-Ranges": "bytes",
            "Content-Range": window.content_range,
            "Content-Length": str(window.length),
        },
    )
