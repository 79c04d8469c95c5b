import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from voucher_api.core.config import settings
from voucher_api.core.deps import AuthIdentity, get_current_identity, get_db
from voucher_api.core.rate_limit import RateLimiter, client_ip, enforce, get_rate_limiter
from voucher_api.core.security import create_access_token, hash_password, verify_password
from voucher_api.db.models.agency import Agency
from voucher_api.db.models.user import User, UserRole
from voucher_api.schemas.auth import ChangePasswordIn, LoginIn, LoginOut
from voucher_api.schemas.common import MessageOut
from voucher_api.schemas.user import UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@router.post("/login", response_model=LoginOut)
def login(
    data: LoginIn,
    request: Request,
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    email = normalize_email(data.email)

    # per IP and per targeted account
    for key in (f"login:ip:{client_ip(request)}", f"login:email:{email}"):
        enforce(
            limiter,
            key,
            limit=settings.LOGIN_RATE_LIMIT,
            window_seconds=settings.LOGIN_RATE_WINDOW_SECONDS,
        )

    # same answer for unknown email and wrong password
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, INVALID_CREDENTIALS)

    if user.role != UserRole.SUPERADMIN:
        agency = db.get(Agency, user.agency_id) if user.agency_id else None
        if not agency or not agency.is_active:
            logger.info("Login blocked for user %s: agency missing or inactive", user.id)
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Agency inactive")

    token = create_access_token(user.id, user.agency_id, user.role.value)
    logger.info("User %s logged in (role=%s)", user.id, user.role.value)
    return LoginOut(token=token, user=UserOut.model_validate(user))


@router.post("/change-password", response_model=MessageOut)
def change_password(
    data: ChangePasswordIn,
    identity: AuthIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user = db.get(User, identity.user_id)
    if not user:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "User not found")

    if not verify_password(data.current_password, user.password_hash):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Current password is incorrect")

    user.password_hash = hash_password(data.new_password)
    db.commit()
    logger.info("Password changed for user %s", user.id)
    return MessageOut(message="Password updated successfully")
