from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.repositories import video_repo
from academy.db.session import atomic
from academy.errors import NotFound
from academy.services import membership_service


async def record_watch(session: AsyncSession, user_id: int, video_id: int) -> list[int]:
    """Mark ``video_id`` watched by ``user_id``; safe to repeat."""
    async with atomic(session):
        if not await video_repo.video_exists(session, video_id):
            raise NotFound("Video not found")
        watched = await membership_service.ensure_member(
            session, membership_service.WATCHED_VIDEOS, user_id, video_id
        )
    return watched
