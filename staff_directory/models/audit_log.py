"""Audit log model — append-only."""

import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, func
from staff_directory.db.base import Base


class AuditAction(str, enum.Enum):
    create = "create"
    update = "update"
    delete = "delete"
    login = "login"
    logout = "logout"
    filter_change = "filter_change"
    column_change = "column_change"


class AuditLog(Base):
    """One administrator action with before/after snapshots.

    Rows are only ever inserted, in the same transaction as the change
    they describe. Nothing in the service layer updates or deletes them.
    """
    __tablename__ = "admin_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_username = Column(String(100), nullable=False, index=True)
    action_type = Column(String(30), nullable=False, index=True)
    table_name = Column(String(63), nullable=True)
    record_id = Column(Integer, nullable=True)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    description = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)
