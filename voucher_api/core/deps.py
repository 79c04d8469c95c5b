# voucher_api/core/deps.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from voucher_api.core.security import decode_token
from voucher_api.db.models.user import UserRole
from voucher_api.db.session import SessionLocal

# auto_error=False so a missing/foreign scheme gets our own 401 instead of FastAPI's default
bearer_scheme = HTTPBearer(auto_error=False)


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@dataclass(frozen=True)
class AuthIdentity:
    user_id: str
    agency_id: Optional[str]
    role: str


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthIdentity:
    """
    Dependency used by protected routes:
    - reads Authorization: Bearer <access_token>
    - verifies signature & expiry
    - returns the identity carried by the token (no DB round-trip)
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            "Missing token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(credentials.credentials.strip())
    except ValueError:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            "Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthIdentity(
        user_id=str(payload["sub"]),
        agency_id=payload.get("agencyId") or None,
        role=str(payload["role"]),
    )


def require_roles(*allowed: UserRole):
    """Build a dependency that lets through only the given roles (exact match)."""
    allowed_values = {r.value for r in allowed}

    def _checker(identity: AuthIdentity = Depends(get_current_identity)) -> AuthIdentity:
        if identity.role not in allowed_values:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Permission denied")
        return identity

    return _checker


def require_agency_id(identity: AuthIdentity) -> str:
    if not identity.agency_id:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Your user is not linked to an agency. Contact support.",
        )
    return identity.agency_id
