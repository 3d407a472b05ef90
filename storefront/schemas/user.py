# storefront/schemas/user.py
from pydantic import EmailStr, Field

from storefront.models.user import RoleEnum
from storefront.schemas.base import CamelModel


class UserRegister(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None


class UserOut(CamelModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    role: RoleEnum


class UserBrief(CamelModel):
    id: int
    email: str
