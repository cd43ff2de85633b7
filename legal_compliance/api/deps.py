"""FastAPI dependencies: storage, services and the calling user"""

from typing import Optional

from fastapi import Depends, Header, Request

from legal_compliance.db import DatabaseInterface, get_database
from legal_compliance.errors import AuthenticationError
from legal_compliance.models.user import Caller, User
from legal_compliance.services.attestation import AttestationService
from legal_compliance.services.consent import ConsentService


def get_db() -> DatabaseInterface:
    return get_database()


def get_attestation_service(db: DatabaseInterface = Depends(get_db)) -> AttestationService:
    return AttestationService(db)


def get_consent_service(db: DatabaseInterface = Depends(get_db)) -> ConsentService:
    return ConsentService(db)


def client_ip(request: Request) -> Optional[str]:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else None


def get_caller(
    request: Request,
    x_user_id: Optional[str] = Header(None),
    db: DatabaseInterface = Depends(get_db),
) -> Caller:
    """Resolve the caller from the X-User-Id header set by the session proxy.

    The role always comes from the stored user, never from the request.
    """
    if not x_user_id:
        raise AuthenticationError("Not authenticated")
    row = db.get_user(x_user_id)
    if row is None:
        raise AuthenticationError("User not found")
    user = User(**row)
    return Caller(
        user_id=user.id,
        role=user.role,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
