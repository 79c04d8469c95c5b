import logging
import re
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from voucher_api.core.deps import AuthIdentity, get_current_identity, get_db, require_roles
from voucher_api.core.errors import is_unique_violation
from voucher_api.core.security import hash_password
from voucher_api.db.models.agency import Agency
from voucher_api.db.models.user import User, UserRole
from voucher_api.schemas.agency import (
    AgencyBrandingUpdate,
    AgencyCreate,
    AgencyOut,
    AgencyStatusUpdate,
    LogoUploadIn,
    MeOut,
)
from voucher_api.schemas.user import UserCreate, UserOut
from voucher_api.services.logo_upload import save_agency_logo

logger = logging.getLogger(__name__)

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

router = APIRouter(prefix="/admin", tags=["admin"])

# every /admin/agencies* route is superadmin-only
agencies_router = APIRouter(
    prefix="/agencies",
    dependencies=[Depends(require_roles(UserRole.SUPERADMIN))],
)


def _agency_or_404(db: Session, agency_id: str) -> Agency:
    agency = db.get(Agency, agency_id.strip())
    if not agency:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Agency not found")
    return agency


@router.get("/me", response_model=MeOut)
def me(identity: AuthIdentity = Depends(get_current_identity), db: Session = Depends(get_db)):
    user = db.get(User, identity.user_id)
    if not user:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "User not found")
    agency = db.get(Agency, user.agency_id) if user.agency_id else None
    return MeOut(
        user=UserOut.model_validate(user),
        agency=AgencyOut.model_validate(agency) if agency else None,
    )


@agencies_router.get("", response_model=List[AgencyOut])
def list_agencies(db: Session = Depends(get_db)):
    return db.query(Agency).order_by(Agency.created_at.desc()).all()


@agencies_router.post("", response_model=AgencyOut, status_code=status.HTTP_201_CREATED)
def create_agency(payload: AgencyCreate, db: Session = Depends(get_db)):
    """
    Create a tenant. The slug is caller-chosen (trimmed, lower-cased) and must be
    unique; a taken slug is a 409, never silently suffixed.
    """
    name = payload.name.strip()
    slug = payload.slug.strip().lower()
    if not name:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "name is required")
    if not slug:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "slug is required")
    if not SLUG_RE.match(slug):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "slug may only contain lowercase letters, digits and single hyphens",
        )

    agency = Agency(
        name=name,
        slug=slug,
        phone=(payload.phone or "").strip() or None,
        email=(payload.email or "").strip() or None,
    )
    db.add(agency)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        if is_unique_violation(err):
            raise HTTPException(status.HTTP_409_CONFLICT, "Slug already exists")
        raise
    db.refresh(agency)
    logger.info("Agency %s created (slug=%s)", agency.id, agency.slug)
    return agency


@agencies_router.patch("/{agency_id}/status", response_model=AgencyOut)
def update_agency_status(agency_id: str, payload: AgencyStatusUpdate, db: Session = Depends(get_db)):
    agency = _agency_or_404(db, agency_id)
    agency.is_active = payload.is_active
    db.commit()
    db.refresh(agency)
    logger.info("Agency %s is_active=%s", agency.id, agency.is_active)
    return agency


@agencies_router.patch("/{agency_id}/branding", response_model=AgencyOut)
def update_agency_branding(agency_id: str, payload: AgencyBrandingUpdate, db: Session = Depends(get_db)):
    agency = _agency_or_404(db, agency_id)

    # only touch what the client sent; explicit null clears
    if "logo_url" in payload.model_fields_set:
        agency.logo_url = payload.logo_url
    if "primary_color" in payload.model_fields_set:
        agency.primary_color = payload.primary_color

    db.commit()
    db.refresh(agency)
    return agency


@agencies_router.post("/{agency_id}/logo", response_model=AgencyOut)
def upload_agency_logo(agency_id: str, payload: LogoUploadIn, db: Session = Depends(get_db)):
    agency = _agency_or_404(db, agency_id)
    return save_agency_logo(
        db,
        agency,
        file_name=payload.file_name,
        content_type=payload.content_type,
        data_base64=payload.base64,
    )


@agencies_router.post("/{agency_id}/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_agency_user(agency_id: str, payload: UserCreate, db: Session = Depends(get_db)):
    agency = _agency_or_404(db, agency_id)

    name = payload.name.strip()
    if not name:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "name is required")
    email = payload.email.strip().lower()

    # uniqueness check
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status.HTTP_409_CONFLICT, "Email already exists")

    user = User(
        agency_id=agency.id,
        name=name,
        email=email,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        if is_unique_violation(err):
            raise HTTPException(status.HTTP_409_CONFLICT, "Email already exists")
        raise
    db.refresh(user)
    logger.info("User %s (%s) created for agency %s", user.id, user.role.value, agency.id)
    return user


router.include_router(agencies_router)
