"""JWT session tokens, password hashing, and caller-resolution dependencies."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from staff_directory.core.config import settings
from staff_directory.core.exceptions import AuthenticationError, AuthorizationError
from staff_directory.db.session import get_db
from staff_directory.models.admin import Admin, AdminRole

logger = logging.getLogger("staff_directory")

# JWT bearer scheme; the session cookie is checked first
security_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """The authenticated administrator a request acts on behalf of."""
    id: int
    username: str
    role: str
    full_name: str = ""

    @property
    def is_owner(self) -> bool:
        return self.role == AdminRole.owner.value

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "role": self.role,
        }


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(pwd_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    pwd_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(pwd_bytes, hashed_bytes)


def create_access_token(admin: Admin, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed session token for an administrator."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRY_MINUTES)
    )
    to_encode = {
        "sub": str(admin.id),
        "username": admin.username,
        "full_name": admin.full_name or "",
        "role": admin.role or AdminRole.admin.value,
        "iat": datetime.now(timezone.utc),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate a session token; ``None`` when invalid or expired."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def resolve_caller(db: Session, token: Optional[str]) -> Optional[Caller]:
    """Map a session token to the administrator it was issued for.

    The account is re-read so that deleted administrators lose access and
    role changes apply immediately.
    """
    if not token:
        return None
    payload = decode_token(token)
    if payload is None:
        return None
    try:
        admin_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    admin = db.query(Admin).filter(Admin.id == admin_id).first()
    if admin is None:
        logger.info("Session token for missing admin %s rejected", admin_id)
        return None
    return Caller(
        id=admin.id,
        username=admin.username,
        role=admin.role or AdminRole.admin.value,
        full_name=admin.full_name or "",
    )


def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


async def get_optional_caller(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: Session = Depends(get_db),
) -> Optional[Caller]:
    """Resolve the caller if a valid session is present, else ``None``."""
    return resolve_caller(db, extract_token(request, credentials))


async def require_authenticated(
    caller: Optional[Caller] = Depends(get_optional_caller),
) -> Caller:
    """Require any authenticated administrator."""
    if caller is None:
        raise AuthenticationError()
    return caller


async def require_owner(
    caller: Optional[Caller] = Depends(get_optional_caller),
) -> Caller:
    """Require an authenticated administrator with the owner role."""
    if caller is None:
        raise AuthenticationError()
    if not caller.is_owner:
        raise AuthorizationError()
    return caller
