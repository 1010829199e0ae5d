import enum
from datetime import date, datetime
from sqlalchemy import Integer, String, Text, Date, DateTime, Boolean, Enum, func
from sqlalchemy.orm import Mapped, mapped_column

from academy.db.base import Base


class Gender(str, enum.Enum):
    male = "ERKEK"
    female = "KADIN"
    other = "DİĞER"


class GuestApplication(Base):
    """Internship application submitted from the public site."""

    __tablename__ = "guest_applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    birth_place: Mapped[str | None] = mapped_column(String(255), nullable=True)
    internship_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    internship_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    nationality: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gender: Mapped[Gender | None] = mapped_column(
        Enum(Gender, name="guest_gender", values_callable=lambda e: [m.value for m in e]), nullable=True
    )
    military_status: Mapped[str | None] = mapped_column(String(64), nullable=True)  # YAPILDI / TECİLLİ / MUAF
    education_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    language_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    computer_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    internship_department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    semester_grade: Mapped[str | None] = mapped_column(String(64), nullable=True)
    accept_email: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accept_kvkk: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
