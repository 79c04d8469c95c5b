from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from voucher_api.core.deps import AuthIdentity, get_db, require_agency_id, require_roles
from voucher_api.db.models.user import UserRole
from voucher_api.schemas.voucher import VoucherCreate, VoucherOut, VoucherSummaryOut
from voucher_api.services import voucher_pipeline

router = APIRouter(prefix="/admin/vouchers", tags=["vouchers"])

staff_only = require_roles(UserRole.ADMIN, UserRole.SUPERADMIN)


@router.post("", response_model=VoucherOut, status_code=status.HTTP_201_CREATED)
def create_voucher(
    payload: VoucherCreate,
    identity: AuthIdentity = Depends(staff_only),
    db: Session = Depends(get_db),
):
    """
    Create a voucher for the caller's agency.
    - agencyId always comes from the token, never from the body
    - flights must include OUTBOUND and RETURN; connections are expanded into segments
    """
    voucher = voucher_pipeline.create_voucher(db, identity.agency_id, payload)
    return voucher_pipeline.serialize_voucher(voucher)


@router.get("", response_model=List[VoucherSummaryOut])
def list_vouchers(identity: AuthIdentity = Depends(staff_only), db: Session = Depends(get_db)):
    agency_id = require_agency_id(identity)
    return voucher_pipeline.list_agency_vouchers(db, agency_id)


@router.get("/{voucher_id}", response_model=VoucherOut)
def get_voucher(
    voucher_id: str,
    identity: AuthIdentity = Depends(staff_only),
    db: Session = Depends(get_db),
):
    agency_id = require_agency_id(identity)
    voucher = voucher_pipeline.get_agency_voucher(db, agency_id, voucher_id.strip())
    return voucher_pipeline.serialize_voucher(voucher)
