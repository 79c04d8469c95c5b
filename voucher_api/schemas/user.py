from datetime import datetime

from pydantic import EmailStr, Field

from voucher_api.db.models.user import UserRole
from voucher_api.schemas.common import CamelModel


class UserCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)
    role: UserRole = UserRole.ADMIN


class UserOut(CamelModel):
    id: str
    agency_id: str | None
    name: str
    email: str
    role: UserRole
    created_at: datetime
