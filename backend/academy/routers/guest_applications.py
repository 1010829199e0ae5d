from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.session import get_db
from academy.db.repositories import guest_repo
from academy.errors import Conflict
from academy.schemas.guest import GuestApplicationCreate, GuestApplicationCreated, GuestApplicationResponse

router = APIRouter()


@router.get("", response_model=list[GuestApplicationResponse])
async def list_applications(db: AsyncSession = Depends(get_db)):
    return await guest_repo.list_applications(db)


@router.post("", response_model=GuestApplicationCreated, status_code=status.HTTP_201_CREATED)
async def create_application(body: GuestApplicationCreate, db: AsyncSession = Depends(get_db)):
    if await guest_repo.email_exists(db, body.email):
        raise Conflict("An application with this email already exists")
    try:
        application = await guest_repo.create_application(db, **body.model_dump())
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("An application with this email already exists")
    return GuestApplicationCreated(
        message="Application received",
        data=GuestApplicationResponse.model_validate(application),
    )
