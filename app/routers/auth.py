import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.admin import Admin
from app.schemas.auth import AdminLogin, AdminProfile, LoginResponse
from app.schemas.envelope import ApiResponse
from app.auth.security import verify_password, create_access_token
from app.auth.dependencies import get_current_admin
from app.auth.rate_limiter import rate_limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(credentials: AdminLogin, db: Session = Depends(get_db)):
    """Authenticate an admin and return a signed access token"""
    # Check rate limiting
    if rate_limiter.is_blocked(credentials.username):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many failed attempts. Please try again in {rate_limiter.window_minutes} minutes."
        )

    admin = db.query(Admin).filter(Admin.username == credentials.username).first()

    if admin is None or not verify_password(credentials.password, admin.password_hash):
        attempts = rate_limiter.record_failed_attempt(credentials.username)
        remaining = rate_limiter.max_attempts - attempts
        logger.warning("Failed admin login for %r (%d attempts)", credentials.username, attempts)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"X-Remaining-Attempts": str(max(0, remaining))}
        )

    rate_limiter.reset(credentials.username)

    admin.last_login = datetime.now(timezone.utc)
    db.commit()

    token = create_access_token({"sub": str(admin.id)})
    logger.info("Admin %s logged in", admin.username)

    return ApiResponse(
        message="Login successful",
        data=LoginResponse(token=token, username=admin.username, email=admin.email),
    )


@router.get("/validate", response_model=ApiResponse[AdminProfile])
async def validate(admin: Admin = Depends(get_current_admin)):
    """Confirm the bearer token still maps to an admin"""
    return ApiResponse(data=AdminProfile(username=admin.username, email=admin.email))
