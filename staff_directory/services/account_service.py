"""Account service — administrator management for owners."""

import logging
from typing import Optional, List

from sqlalchemy import case
from sqlalchemy.orm import Session

from staff_directory.core.exceptions import (
    ValidationError, ResourceConflictError, ResourceNotFoundError,
    NoOpError, SelfModificationError, OwnerProtectedError,
)
from staff_directory.core.security import Caller, hash_password
from staff_directory.models.admin import Admin, AdminRole
from staff_directory.models.audit_log import AuditAction
from staff_directory.services.audit_service import audit_service

logger = logging.getLogger("staff_directory")

VALID_ROLES = {role.value for role in AdminRole}


class AccountService:
    """CRUD over administrator accounts. Callers must already be owners."""

    @staticmethod
    def list_accounts(db: Session) -> List[Admin]:
        """Owners first, then by creation time."""
        role_rank = case((Admin.role == AdminRole.owner.value, 0), else_=1)
        return db.query(Admin).order_by(role_rank, Admin.created_at, Admin.id).all()

    @staticmethod
    def get_account(db: Session, account_id: int) -> Admin:
        admin = db.query(Admin).filter(Admin.id == account_id).first()
        if not admin:
            raise ResourceNotFoundError(f"Administrator {account_id} not found")
        return admin

    @staticmethod
    def create_account(
        db: Session,
        caller: Caller,
        username: str,
        password: str,
        full_name: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Admin:
        """Create an administrator. Unknown roles fall back to ``admin``."""
        if not username or not password:
            raise ValidationError("Username and password are required")

        admin_role = role if role in VALID_ROLES else AdminRole.admin.value

        existing = db.query(Admin).filter(Admin.username == username).first()
        if existing:
            raise ResourceConflictError(f"Administrator '{username}' already exists")

        admin = Admin(
            username=username,
            password_hash=hash_password(password),
            full_name=full_name or "",
            role=admin_role,
        )
        try:
            db.add(admin)
            db.flush()
            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.create,
                table_name=Admin.__tablename__,
                record_id=admin.id,
                new_values=admin.snapshot(),
                description=f"Created administrator: {username} (role: {admin_role})",
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(admin)

        logger.info("Administrator '%s' (%s) created by %s", username, admin_role, caller.username)
        return admin

    @staticmethod
    def update_account(
        db: Session,
        caller: Caller,
        account_id: int,
        username: Optional[str] = None,
        full_name: Optional[str] = None,
        role: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Admin:
        """Update another administrator's details."""
        admin = AccountService.get_account(db, account_id)
        if admin.id == caller.id:
            raise SelfModificationError("You cannot edit your own account")

        old_values = admin.snapshot()
        changed = False

        if username is not None and username != admin.username:
            if not username:
                raise ValidationError("Username cannot be empty")
            clash = (
                db.query(Admin)
                .filter(Admin.username == username, Admin.id != account_id)
                .first()
            )
            if clash:
                raise ResourceConflictError(f"Administrator '{username}' already exists")
            admin.username = username
            changed = True

        if full_name is not None and full_name != admin.full_name:
            admin.full_name = full_name
            changed = True

        if role is not None:
            if role not in VALID_ROLES:
                raise ValidationError(f"Invalid role '{role}'")
            if role != admin.role:
                admin.role = role
                changed = True

        if password is not None and password.strip():
            admin.password_hash = hash_password(password)
            changed = True

        if not changed:
            db.rollback()
            raise NoOpError("No fields to update")

        try:
            db.flush()
            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.update,
                table_name=Admin.__tablename__,
                record_id=admin.id,
                old_values=old_values,
                new_values=admin.snapshot(),
                description=f"Updated administrator: {admin.username}",
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(admin)
        return admin

    @staticmethod
    def delete_account(db: Session, caller: Caller, account_id: int) -> None:
        """Delete an administrator. Own and owner accounts are protected."""
        admin = AccountService.get_account(db, account_id)
        if admin.id == caller.id:
            raise SelfModificationError("You cannot delete your own account")
        if admin.role == AdminRole.owner.value:
            raise OwnerProtectedError("Owner accounts cannot be deleted")

        old_values = admin.snapshot()
        try:
            db.delete(admin)
            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.delete,
                table_name=Admin.__tablename__,
                record_id=account_id,
                old_values=old_values,
                description=f"Deleted administrator: {old_values['username']}",
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Administrator '%s' deleted by %s", old_values["username"], caller.username)


account_service = AccountService()
