from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.errors import AuthError
from app.models.admin import Admin
from app.auth.security import verify_token

security = HTTPBearer(auto_error=False)


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Admin:
    """Dependency resolving the bearer token to exactly one admin"""
    if credentials is None:
        raise AuthError("Authentication required")

    payload = verify_token(credentials.credentials, expected_type="access")
    if payload is None:
        raise AuthError("Invalid or expired token")

    admin_id = payload.get("sub")
    if admin_id is None:
        raise AuthError("Invalid token payload")

    try:
        admin_id = int(admin_id)
    except (TypeError, ValueError):
        raise AuthError("Invalid token payload")

    admin = db.query(Admin).filter(Admin.id == admin_id).first()
    if admin is None:
        raise AuthError("Invalid token")

    return admin
