"""Auth API router — login, logout, me."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from staff_directory.db.session import get_db
from staff_directory.schemas.schemas import LoginRequest, LoginResponse, MessageResponse
from staff_directory.services.auth_service import auth_service
from staff_directory.core.config import settings
from staff_directory.core.middleware import client_address
from staff_directory.core.rate_limiter import limiter
from staff_directory.core.security import Caller, get_optional_caller, require_authenticated

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    """Authenticate and set the session cookie."""
    result = auth_service.authenticate(
        db, body.username, body.password, ip_address=client_address(request),
    )
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=result["access_token"],
        max_age=settings.JWT_EXPIRY_MINUTES * 60,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    return result


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """Clear the session cookie."""
    auth_service.logout(db, caller, ip_address=client_address(request))
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me")
async def get_me(caller: Caller = Depends(require_authenticated)):
    """Get the current administrator."""
    return {"admin": caller.to_dict()}
