from sqlalchemy import select, delete, func, or_, and_, cast, Float
from sqlalchemy.ext.asyncio import AsyncSession

from academy.models.user import User
from academy.models.video import Video
from academy.models.exam_result import ExamResult
from academy.models.user_video_view import UserVideoView
from academy.models.user_education import UserEducation


async def get_user_by_id(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalars().one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(
        select(User).where(func.lower(User.email) == email.strip().lower()).limit(1)
    )
    return result.scalars().first()


async def exists_username_or_email(
    session: AsyncSession,
    username: str | None,
    email: str | None,
    exclude_id: int | None = None,
) -> bool:
    conditions = []
    if username:
        conditions.append(User.username == username)
    if email:
        conditions.append(func.lower(User.email) == email.strip().lower())
    if not conditions:
        return False
    q = select(User.id).where(or_(*conditions))
    if exclude_id is not None:
        q = q.where(User.id != exclude_id)
    result = await session.execute(q.limit(1))
    return result.scalars().first() is not None


async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User).order_by(User.id.asc()))
    return list(result.scalars().all())


async def create_user(session: AsyncSession, **fields) -> User:
    user = User(**fields)
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


async def update_user(session: AsyncSession, user: User, fields: dict) -> User:
    """Apply only the supplied fields."""
    for key, value in fields.items():
        setattr(user, key, value)
    await session.flush()
    await session.refresh(user)
    return user


async def delete_user(session: AsyncSession, id_or_username: str) -> bool:
    if id_or_username.isdigit():
        condition = User.id == int(id_or_username)
    else:
        condition = User.username == id_or_username
    result = await session.execute(delete(User).where(condition).returning(User.id))
    return result.scalar_one_or_none() is not None


async def get_watched_videos(session: AsyncSession, user_id: int) -> list[Video]:
    result = await session.execute(
        select(Video)
        .join(UserVideoView, UserVideoView.video_id == Video.id)
        .where(UserVideoView.user_id == user_id)
        .order_by(UserVideoView.watched_at.desc())
    )
    return list(result.scalars().all())


async def get_trainings(session: AsyncSession, user_id: int):
    """Watched videos with the user's best exam score.

    Results are matched on ``exam_results."user" = users.full_name``: renaming a
    user or two users sharing a name changes which scores are picked up.
    """
    result = await session.execute(
        select(
            Video.id,
            Video.title,
            Video.tags,
            cast(func.max(ExamResult.score), Float).label("score"),
        )
        .select_from(UserVideoView)
        .join(Video, Video.id == UserVideoView.video_id)
        .join(User, User.id == UserVideoView.user_id)
        .outerjoin(
            ExamResult,
            and_(ExamResult.video_id == Video.id, ExamResult.user_label == User.full_name),
        )
        .where(UserVideoView.user_id == user_id)
        .group_by(Video.id, Video.title, Video.tags)
        .order_by(func.max(UserVideoView.watched_at).desc())
    )
    return list(result.all())


async def list_education(session: AsyncSession, user_id: int) -> list[UserEducation]:
    result = await session.execute(
        select(UserEducation)
        .where(UserEducation.user_id == user_id)
        .order_by(UserEducation.created_at.desc(), UserEducation.id.desc())
    )
    return list(result.scalars().all())


async def replace_education(session: AsyncSession, user_id: int, entries: list[tuple[str, str]]) -> None:
    await session.execute(delete(UserEducation).where(UserEducation.user_id == user_id))
    for school, department in entries:
        session.add(UserEducation(user_id=user_id, school=school, department=department))
    await session.flush()
