"""Column registry — display metadata for the dynamic employee columns."""

import logging
from dataclasses import dataclass, asdict
from typing import Optional, List, Dict, Any, Set

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from staff_directory.core.exceptions import NoOpError, ResourceNotFoundError
from staff_directory.core.security import Caller
from staff_directory.models.audit_log import AuditAction
from staff_directory.models.column_metadata import ColumnMetadata, ColumnDataType
from staff_directory.models.employee import RECORD_TABLE, PROTECTED_COLUMNS
from staff_directory.services.audit_service import audit_service

logger = logging.getLogger("staff_directory")

DEFAULT_SORT_ORDER = 999


@dataclass
class ColumnDefinition:
    """A physical employee column merged with its registry metadata."""
    column_name: str
    display_name: str
    data_type: str
    is_nullable: bool
    is_visible: bool
    sort_order: int
    admin_only: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def physical_columns(db: Session) -> List[Dict[str, Any]]:
    """Reflect the employee table's columns in creation order."""
    return inspect(db.connection()).get_columns(RECORD_TABLE)


class ColumnService:
    """Reads and updates the column registry."""

    @staticmethod
    def list_columns(db: Session, include_admin_only: bool = False) -> List[ColumnDefinition]:
        """List dynamic columns in display order.

        Physical columns without a registry row get default metadata.
        Protected columns are never listed.
        """
        metadata = {m.column_name: m for m in db.query(ColumnMetadata).all()}

        merged = []
        for position, column in enumerate(physical_columns(db)):
            name = column["name"]
            if name in PROTECTED_COLUMNS:
                continue
            meta = metadata.get(name)
            definition = ColumnDefinition(
                column_name=name,
                display_name=meta.display_name if meta else name,
                data_type=ColumnDataType.from_sql_type(column["type"]),
                is_nullable=bool(column.get("nullable", True)),
                is_visible=meta.is_visible if meta else True,
                sort_order=meta.sort_order if meta else DEFAULT_SORT_ORDER,
                admin_only=meta.admin_only if meta else False,
            )
            if definition.admin_only and not include_admin_only:
                continue
            merged.append((definition.sort_order, position, definition))

        merged.sort(key=lambda item: (item[0], item[1]))
        return [definition for _, _, definition in merged]

    @staticmethod
    def get_column(db: Session, column_name: str) -> ColumnDefinition:
        for definition in ColumnService.list_columns(db, include_admin_only=True):
            if definition.column_name == column_name:
                return definition
        raise ResourceNotFoundError(f"Column '{column_name}' not found")

    @staticmethod
    def admin_only_columns(db: Session) -> Set[str]:
        """Names of columns hidden from anonymous callers."""
        rows = db.query(ColumnMetadata.column_name).filter(ColumnMetadata.admin_only == True).all()  # noqa: E712
        return {name for (name,) in rows}

    @staticmethod
    def update_metadata(
        db: Session,
        caller: Caller,
        column_name: str,
        display_name: Optional[str] = None,
        admin_only: Optional[bool] = None,
        is_visible: Optional[bool] = None,
        sort_order: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> ColumnDefinition:
        """Partially update a column's display settings."""
        meta = db.query(ColumnMetadata).filter(ColumnMetadata.column_name == column_name).first()
        if not meta:
            raise ResourceNotFoundError(f"Column '{column_name}' not found")

        changes = {
            "display_name": display_name,
            "admin_only": admin_only,
            "is_visible": is_visible,
            "sort_order": sort_order,
        }
        changes = {key: value for key, value in changes.items() if value is not None}
        if not changes:
            raise NoOpError("No fields to update")

        old_values = meta.to_dict()
        try:
            for key, value in changes.items():
                setattr(meta, key, value)
            db.flush()
            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.column_change,
                table_name=RECORD_TABLE,
                old_values=old_values,
                new_values=meta.to_dict(),
                description=f"Updated column settings: {meta.display_name} ({column_name})",
                ip_address=ip_address,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Column '%s' metadata updated by %s: %s", column_name, caller.username, changes)
        return ColumnService.get_column(db, column_name)

    @staticmethod
    def reorder(
        db: Session,
        caller: Caller,
        order: List[str],
        ip_address: Optional[str] = None,
    ) -> List[ColumnDefinition]:
        """Rewrite sort_order so columns display in the given sequence."""
        metadata = {m.column_name: m for m in db.query(ColumnMetadata).all()}
        missing = [name for name in order if name not in metadata]
        if missing:
            raise ResourceNotFoundError(f"Columns not found: {', '.join(missing)}")
        if not order:
            raise NoOpError("No columns to reorder")

        old_order = {name: meta.sort_order for name, meta in metadata.items()}
        try:
            for index, name in enumerate(order, start=1):
                metadata[name].sort_order = index
            db.flush()
            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.column_change,
                table_name=RECORD_TABLE,
                old_values=old_order,
                new_values={name: metadata[name].sort_order for name in metadata},
                description="Changed column order",
                ip_address=ip_address,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        return ColumnService.list_columns(db, include_admin_only=True)


column_service = ColumnService()
