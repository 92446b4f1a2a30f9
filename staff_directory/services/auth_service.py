"""Auth service — administrator login and logout."""

import logging
from typing import Optional, Dict, Any

from sqlalchemy.orm import Session

from staff_directory.core.exceptions import AuthenticationError, ValidationError
from staff_directory.core.security import Caller, verify_password, create_access_token
from staff_directory.models.admin import Admin, AdminRole
from staff_directory.models.audit_log import AuditAction
from staff_directory.services.audit_service import audit_service

logger = logging.getLogger("staff_directory")


class AuthService:
    """Issues session tokens and records login/logout events."""

    @staticmethod
    def authenticate(
        db: Session,
        username: str,
        password: str,
        ip_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Verify credentials and return a session token.

        Raises:
            ValidationError: Username or password missing.
            AuthenticationError: Credentials are invalid.
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        admin = db.query(Admin).filter(Admin.username == username).first()
        if not admin or not verify_password(password, admin.password_hash):
            logger.warning("Failed login for '%s' from %s", username, ip_address)
            raise AuthenticationError("Invalid username or password")

        role = admin.role or AdminRole.admin.value
        token = create_access_token(admin)

        audit_service.log(
            db,
            admin_username=admin.username,
            action_type=AuditAction.login,
            description=f"Logged in (role: {role})",
            ip_address=ip_address,
        )
        db.commit()

        return {
            "access_token": token,
            "token_type": "bearer",
            "admin": {
                "id": admin.id,
                "username": admin.username,
                "full_name": admin.full_name,
                "role": role,
            },
        }

    @staticmethod
    def logout(db: Session, caller: Optional[Caller], ip_address: Optional[str] = None) -> None:
        """Record a logout; anonymous logouts leave no trace."""
        if caller is None:
            return
        audit_service.log(
            db,
            admin_username=caller.username,
            action_type=AuditAction.logout,
            description="Logged out",
            ip_address=ip_address,
        )
        db.commit()


auth_service = AuthService()
