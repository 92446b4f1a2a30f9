"""Models package — import all models so ``Base.metadata`` knows every table."""

from staff_directory.models.admin import Admin, AdminRole
from staff_directory.models.audit_log import AuditLog, AuditAction
from staff_directory.models.column_metadata import ColumnMetadata, ColumnDataType
from staff_directory.models.employee import (
    Employee, RECORD_TABLE, PROTECTED_COLUMNS, SYSTEM_COLUMNS,
)

__all__ = [
    "Admin", "AdminRole", "AuditLog", "AuditAction",
    "ColumnMetadata", "ColumnDataType",
    "Employee", "RECORD_TABLE", "PROTECTED_COLUMNS", "SYSTEM_COLUMNS",
]
