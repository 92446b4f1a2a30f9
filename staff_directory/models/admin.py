"""Administrator account model."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, func
from staff_directory.db.base import Base


class AdminRole(str, enum.Enum):
    admin = "admin"
    owner = "owner"


class Admin(Base):
    """Administrator identity. Owners additionally manage other administrators."""
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False, default="")
    role = Column(String(20), nullable=False, default=AdminRole.admin.value)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    def snapshot(self) -> dict:
        """Audit-safe view of the account; the password hash is never included."""
        return {
            "username": self.username,
            "full_name": self.full_name,
            "role": self.role,
        }
