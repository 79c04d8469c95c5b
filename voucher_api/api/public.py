from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from voucher_api.core.config import settings
from voucher_api.core.deps import get_db
from voucher_api.core.rate_limit import RateLimitByIP
from voucher_api.schemas.voucher import VoucherPublicOut
from voucher_api.services import voucher_pipeline

router = APIRouter(prefix="/public", tags=["public"])

public_rate_limit = RateLimitByIP(
    "public",
    limit=lambda: settings.PUBLIC_RATE_LIMIT,
    window_seconds=lambda: settings.PUBLIC_RATE_WINDOW_SECONDS,
)


@router.get(
    "/vouchers/{reservation_code}",
    response_model=VoucherPublicOut,
    dependencies=[Depends(public_rate_limit)],
)
def get_public_voucher(reservation_code: str, db: Session = Depends(get_db)):
    """Traveler lookup by reservation code (case-insensitive)."""
    voucher = voucher_pipeline.find_public_voucher(db, reservation_code)
    return voucher_pipeline.serialize_voucher(voucher, VoucherPublicOut)
