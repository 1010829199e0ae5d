import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.session import get_db, atomic
from academy.db.repositories import user_repo
from academy.dependencies import require_admin, require_owner
from academy.errors import Conflict, NotFound, ValidationError
from academy.models.user import Authority, User
from academy.schemas.user import (
    EducationListResponse, EducationListUpdate, EducationResponse, EducationUpdate,
    Training, TrainingsResponse, UserCreate, UserResponse, UserUpdate,
    WatchRequest, WatchedResponse, WatchedVideo, WatchedVideosResponse,
)
from academy.services import watch_service
from academy.services.video_service import normalize_tags

logger = logging.getLogger(__name__)

router = APIRouter()

# request field -> users column
_COLUMNS = {
    "full_name": "full_name",
    "role": "role",
    "work_area": "work_area",
    "authority": "authority",
    "username": "username",
    "email": "email",
    "tags": "tags",
    "school": "school",
    "department": "department",
    "password": "password_plain",
}


def build_user_patch(body: UserUpdate) -> dict:
    """Column values for the fields actually sent; an empty password is ignored."""
    sent = body.model_dump(exclude_unset=True)
    patch = {}
    for name, value in sent.items():
        if name == "password" and not value:
            continue
        if name == "tags":
            if value is None:
                continue
            value = normalize_tags(value)
        elif name == "authority":
            value = Authority.normalize(value).value
        patch[_COLUMNS[name]] = value
    return patch


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    required = [body.full_name, body.role, body.work_area, body.authority, body.username, body.email, body.password]
    if not all(str(v).strip() for v in required):
        raise ValidationError("Missing fields")
    if await user_repo.exists_username_or_email(db, body.username, body.email):
        raise Conflict("Username or email already registered")
    try:
        user = await user_repo.create_user(
            db,
            full_name=body.full_name,
            role=body.role,
            work_area=body.work_area,
            authority=Authority.normalize(body.authority).value,
            username=body.username,
            email=body.email,
            password_plain=body.password,
            tags=normalize_tags(body.tags),
            school=body.school,
            department=body.department,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Username or email already registered")
    logger.info("Created user %s (%s)", user.id, user.username)
    return user


@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db), _: User = Depends(require_admin)):
    return await user_repo.list_users(db)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(require_admin),
):
    patch = build_user_patch(body)
    if not patch:
        raise ValidationError("No fields to update")
    if ("username" in patch or "email" in patch) and await user_repo.exists_username_or_email(
        db, patch.get("username"), patch.get("email"), exclude_id=user_id
    ):
        raise Conflict("Username or email belongs to another user")
    user = await user_repo.get_user_by_id(db, user_id)
    if not user:
        raise NotFound("User not found")
    try:
        user = await user_repo.update_user(db, user, patch)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Username or email belongs to another user")
    return user


@router.delete("/{id_or_username}")
async def delete_user(id_or_username: str, db: AsyncSession = Depends(get_db), _: User = Depends(require_admin)):
    if not await user_repo.delete_user(db, id_or_username):
        raise NotFound("User not found")
    await db.commit()
    return {"message": "User deleted"}


# Education (single school/department on the user row)
@router.get("/{user_id}/education", response_model=EducationResponse)
async def get_education(user: User = Depends(require_owner)):
    return EducationResponse(school=user.school or "", department=user.department or "")


@router.patch("/{user_id}/education")
async def update_education(
    body: EducationUpdate,
    user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    user = await user_repo.update_user(db, user, {"school": body.school, "department": body.department})
    await db.commit()
    return {"message": "Education updated", "user": {"id": user.id, "school": user.school, "department": user.department}}


# Education list (replace-all)
@router.get("/{user_id}/education-list", response_model=EducationListResponse)
async def get_education_list(user: User = Depends(require_owner), db: AsyncSession = Depends(get_db)):
    return EducationListResponse(entries=await user_repo.list_education(db, user.id))


@router.put("/{user_id}/education-list", response_model=EducationListResponse)
async def replace_education_list(
    body: EducationListUpdate,
    user: User = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    clean = [((e.school or "").strip(), (e.department or "").strip()) for e in body.entries]
    clean = [(s, d) for s, d in clean if s and d]
    async with atomic(db):
        await user_repo.replace_education(db, user.id, clean)
    return EducationListResponse(message="Education entries saved", entries=await user_repo.list_education(db, user.id))


# Watched videos
@router.post("/{user_id}/watched", response_model=WatchedResponse, status_code=status.HTTP_201_CREATED)
async def record_watch(body: WatchRequest, user: User = Depends(require_owner), db: AsyncSession = Depends(get_db)):
    """Idempotent: repeating the call leaves one entry and one view row."""
    watched = await watch_service.record_watch(db, user.id, body.video_id)
    return WatchedResponse(message="Watch recorded", watched_videos=watched)


@router.patch("/{user_id}/watched", response_model=WatchedResponse)
async def add_watched(body: WatchRequest, user: User = Depends(require_owner), db: AsyncSession = Depends(get_db)):
    watched = await watch_service.record_watch(db, user.id, body.video_id)
    return WatchedResponse(watched_videos=watched)


@router.get("/{user_id}/watched", response_model=WatchedResponse)
async def get_watched(user: User = Depends(require_owner)):
    return WatchedResponse(watched_videos=list(user.watched_videos or []))


@router.get("/{user_id}/watched-videos", response_model=WatchedVideosResponse)
async def get_watched_videos(user: User = Depends(require_owner), db: AsyncSession = Depends(get_db)):
    videos = await user_repo.get_watched_videos(db, user.id)
    return WatchedVideosResponse(watched_videos=[WatchedVideo.model_validate(v) for v in videos])


@router.get("/{user_id}/work-area")
async def get_work_area(user: User = Depends(require_owner)):
    return {"workArea": user.work_area}


@router.get("/{user_id}/trainings", response_model=TrainingsResponse)
async def get_trainings(user: User = Depends(require_owner), db: AsyncSession = Depends(get_db)):
    rows = await user_repo.get_trainings(db, user.id)
    return TrainingsResponse(
        trainings=[
            Training(id=r.id, title=r.title, tags=[str(t) for t in (r.tags or [])], score=r.score)
            for r in rows
        ]
    )
