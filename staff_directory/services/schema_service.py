"""Schema service — adds and drops employee columns in lockstep with the registry.

A column exists in ``columns_metadata`` exactly when it exists on the
``employees`` table. Both sides are changed inside one session transaction
together with the audit entry, and everything is rolled back if any step
fails.
"""

import logging
import re
from typing import Optional

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Column, func
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from staff_directory.core.exceptions import (
    ValidationError, ReservedNameError, ProtectedColumnError,
    ResourceConflictError, ResourceNotFoundError, SchemaAlterationError,
)
from staff_directory.core.security import Caller
from staff_directory.models.audit_log import AuditAction
from staff_directory.models.column_metadata import ColumnMetadata, ColumnDataType
from staff_directory.models.employee import RECORD_TABLE, PROTECTED_COLUMNS
from staff_directory.services.audit_service import audit_service
from staff_directory.services.column_service import ColumnDefinition, column_service, physical_columns

logger = logging.getLogger("staff_directory")

COLUMN_NAME_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*$")

# PostgreSQL truncates identifiers beyond this length.
MAX_COLUMN_NAME_LENGTH = 63


def _operations(db: Session) -> Operations:
    """Alembic operations bound to the session's connection and transaction."""
    return Operations(MigrationContext.configure(connection=db.connection()))


def _storage_message(exc: DBAPIError) -> str:
    return str(exc.orig) if exc.orig is not None else str(exc)


class SchemaService:
    """Manages the physical column set of the employees table."""

    @staticmethod
    def validate_new_column(column_name: str, display_name: str, data_type: str) -> ColumnDataType:
        """Check a column request in order; the first failing rule wins."""
        if not column_name or not display_name or not data_type:
            raise ValidationError("Column name, display name and data type are required")
        if not COLUMN_NAME_PATTERN.match(column_name) or len(column_name) > MAX_COLUMN_NAME_LENGTH:
            raise ValidationError(
                "Column name must contain only lowercase latin letters, digits and "
                "underscores, and start with a letter or underscore"
            )
        if column_name in PROTECTED_COLUMNS:
            raise ReservedNameError(f"Column name '{column_name}' is reserved")

        parsed = ColumnDataType.parse(data_type)
        if parsed is None:
            allowed = ", ".join(member.value for member in ColumnDataType)
            raise ValidationError(f"Unsupported data type '{data_type}'. Allowed: {allowed}")
        return parsed

    @staticmethod
    def add_column(
        db: Session,
        caller: Caller,
        column_name: str,
        display_name: str,
        data_type: str,
        is_nullable: bool = True,
        admin_only: bool = False,
        ip_address: Optional[str] = None,
    ) -> ColumnDefinition:
        """Add a physical column and its registry row as one unit.

        Raises:
            ValidationError: Missing fields, bad identifier or unknown type.
            ReservedNameError: The name belongs to a protected column.
            ResourceConflictError: The column already exists.
            SchemaAlterationError: The database rejected the ALTER TABLE.
        """
        column_type = SchemaService.validate_new_column(column_name, display_name, data_type)

        try:
            existing = {column["name"] for column in physical_columns(db)}
            if column_name in existing:
                raise ResourceConflictError(f"Column '{column_name}' already exists")

            server_default = None if is_nullable else column_type.empty_default()
            try:
                _operations(db).add_column(
                    RECORD_TABLE,
                    Column(
                        column_name,
                        column_type.sql_type(),
                        nullable=is_nullable,
                        server_default=server_default,
                    ),
                )
            except DBAPIError as e:
                # A concurrent request may have added the column since the check above.
                db.rollback()
                if column_name in {column["name"] for column in physical_columns(db)}:
                    raise ResourceConflictError(f"Column '{column_name}' already exists") from e
                raise SchemaAlterationError(_storage_message(e)) from e

            max_order = db.query(func.coalesce(func.max(ColumnMetadata.sort_order), 0)).scalar()
            db.add(ColumnMetadata(
                column_name=column_name,
                display_name=display_name,
                is_visible=True,
                sort_order=(max_order or 0) + 1,
                admin_only=bool(admin_only),
            ))
            db.flush()

            suffix = " [admin only]" if admin_only else ""
            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.column_change,
                table_name=RECORD_TABLE,
                new_values={
                    "column_name": column_name,
                    "display_name": display_name,
                    "data_type": column_type.value,
                    "is_nullable": is_nullable,
                    "admin_only": bool(admin_only),
                },
                description=(
                    f"Added column: {display_name} ({column_name}, {column_type.value}, "
                    f"{'nullable' if is_nullable else 'not null'}){suffix}"
                ),
                ip_address=ip_address,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Column '%s' (%s) added by %s", column_name, column_type.value, caller.username)
        return column_service.get_column(db, column_name)

    @staticmethod
    def drop_column(
        db: Session,
        caller: Caller,
        column_name: str,
        ip_address: Optional[str] = None,
    ) -> None:
        """Drop a physical column and its registry row. The data is lost.

        Raises:
            ProtectedColumnError: The column is one of the protected columns.
            ResourceNotFoundError: No such physical column.
        """
        if not column_name:
            raise ValidationError("Column name is required")
        if column_name in PROTECTED_COLUMNS:
            raise ProtectedColumnError(f"Column '{column_name}' cannot be deleted")

        try:
            existing = {column["name"] for column in physical_columns(db)}
            if column_name not in existing:
                raise ResourceNotFoundError(f"Column '{column_name}' not found")

            meta = db.query(ColumnMetadata).filter(ColumnMetadata.column_name == column_name).first()
            old_metadata = meta.to_dict() if meta else None

            try:
                _operations(db).drop_column(RECORD_TABLE, column_name)
            except DBAPIError as e:
                raise SchemaAlterationError(_storage_message(e)) from e

            if meta is not None:
                db.delete(meta)
                db.flush()

            label = old_metadata["display_name"] if old_metadata else column_name
            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.column_change,
                table_name=RECORD_TABLE,
                old_values={"column_name": column_name, "metadata": old_metadata},
                description=f"Deleted column: {label} ({column_name})",
                ip_address=ip_address,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.warning("Column '%s' dropped by %s", column_name, caller.username)


schema_service = SchemaService()
