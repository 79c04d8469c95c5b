from datetime import datetime

from pydantic import Field, StrictBool

from voucher_api.schemas.common import CamelModel
from voucher_api.schemas.user import UserOut


# Input when a superadmin creates a tenant
class AgencyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=120)
    phone: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)


class AgencyStatusUpdate(CamelModel):
    is_active: StrictBool


# Omitted field = unchanged, explicit null = cleared (see model_fields_set)
class AgencyBrandingUpdate(CamelModel):
    logo_url: str | None = Field(default=None, max_length=1024)
    primary_color: str | None = Field(default=None, max_length=32)


class LogoUploadIn(CamelModel):
    file_name: str | None = None
    content_type: str
    base64: str = Field(min_length=1)


# Full row for superadmin screens
class AgencyOut(CamelModel):
    id: str
    name: str
    slug: str
    phone: str | None
    email: str | None
    is_active: bool
    logo_url: str | None
    primary_color: str | None
    created_at: datetime


# What a traveler may see about the issuing agency
class AgencyPublicOut(CamelModel):
    id: str
    name: str
    slug: str
    phone: str | None
    email: str | None
    logo_url: str | None
    primary_color: str | None


class MeOut(CamelModel):
    user: UserOut
    agency: AgencyOut | None
