"""Employee record table.

Only the protected columns are declared here. Every other column is added
and dropped at runtime by the schema service and read through reflection,
so this model is used for table creation, not for querying.
"""

from sqlalchemy import Column, Integer, String, DateTime, func
from staff_directory.db.base import Base

RECORD_TABLE = "employees"

# Always present, never added, altered, or dropped through the column API.
PROTECTED_COLUMNS = ("id", "full_name", "created_at", "updated_at")

# System-assigned; silently dropped from create/update payloads.
SYSTEM_COLUMNS = ("id", "created_at", "updated_at")


class Employee(Base):
    """One person in the staff directory."""
    __tablename__ = RECORD_TABLE

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)
