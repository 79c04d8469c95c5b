# voucher_api/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from voucher_api.core.config import settings

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(plain_password, password_hash)

# JWT helpers
# - "type" claim is kept so access tokens can't be confused with any other signed payload
def create_access_token(
    user_id: str,
    agency_id: Optional[str],
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "agencyId": agency_id,
        "role": role,
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_token(token: str, token_type: Optional[str] = "access") -> dict:
    """
    Decode and validate a JWT. If token_type is provided, also checks the 'type' claim.
    Raises ValueError on any validation problem.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise ValueError("Invalid token") from e

    if token_type is not None:
        if payload.get("type") != token_type:
            raise ValueError("Wrong token type")

    if not payload.get("sub") or not payload.get("role"):
        raise ValueError("Invalid token payload (missing 'sub' or 'role')")

    return payload
