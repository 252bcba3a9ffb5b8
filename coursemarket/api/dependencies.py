from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from coursemarket.core import security
from coursemarket.core.exceptions import Forbidden, InvalidToken, Unauthenticated
from coursemarket.database import get_db
from coursemarket.models.user import UserRole
from coursemarket.schemas.user import Identity
from coursemarket.storage import DatabaseStorage, Storage

# auto_error=False so a missing header goes through our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return DatabaseStorage(db)


def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Verify the bearer token and bind the caller's identity to the request"""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("No token provided")

    try:
        identity = security.verify_token(credentials.credentials)
    except InvalidToken as exc:
        raise Unauthenticated("Invalid token") from exc

    request.state.identity = identity
    return identity


def require_role(role: UserRole):
    """Only callers whose role is exactly ``role`` get through"""
    def role_checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not identity.role.has_role(role):
            raise Forbidden("Insufficient permissions")
        return identity

    return role_checker


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.role.can_manage_users:
        raise Forbidden("Access denied. Admin privileges required.")
    return identity
