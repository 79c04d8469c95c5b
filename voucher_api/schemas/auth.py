# voucher_api/schemas/auth.py
from pydantic import Field

from voucher_api.schemas.common import CamelModel
from voucher_api.schemas.user import UserOut


class LoginIn(CamelModel):
    # plain str: unknown/malformed emails must fail exactly like a wrong password
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginOut(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserOut


class ChangePasswordIn(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)
