from pydantic import BaseModel

from academy.schemas.common import CamelModel


class LoginRequest(BaseModel):
    email: str
    password: str
    role: str | None = None  # "admin" for the admin panel, "user" for the user panel


class LoginUser(CamelModel):
    id: int
    full_name: str
    email: str
    authority: str
    role: str
    work_area: str | None = None


class TokenResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: LoginUser
