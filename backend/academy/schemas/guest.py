from datetime import date, datetime
from pydantic import EmailStr

from academy.models.guest_application import Gender
from academy.schemas.common import CamelModel


class GuestApplicationCreate(CamelModel):
    first_name: str
    last_name: str
    birth_date: date | None = None
    birth_place: str | None = None
    internship_start_date: date | None = None
    internship_end_date: date | None = None
    address: str | None = None
    phone: str | None = None
    email: EmailStr
    nationality: str | None = None
    gender: Gender | None = None
    military_status: str | None = None
    education_info: str | None = None
    language_info: str | None = None
    computer_info: str | None = None
    message: str | None = None
    internship_department: str | None = None
    semester_grade: str | None = None
    accept_email: bool = False
    accept_kvkk: bool = False


class GuestApplicationResponse(GuestApplicationCreate):
    id: int
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GuestApplicationCreated(CamelModel):
    message: str
    data: GuestApplicationResponse
