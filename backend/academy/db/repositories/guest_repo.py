from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.models.guest_application import GuestApplication


async def list_applications(session: AsyncSession) -> list[GuestApplication]:
    result = await session.execute(select(GuestApplication).order_by(GuestApplication.created_at.desc()))
    return list(result.scalars().all())


async def email_exists(session: AsyncSession, email: str) -> bool:
    result = await session.execute(select(GuestApplication.id).where(GuestApplication.email == email).limit(1))
    return result.scalars().first() is not None


async def create_application(session: AsyncSession, **fields) -> GuestApplication:
    application = GuestApplication(**fields)
    session.add(application)
    await session.flush()
    await session.refresh(application)
    return application
