"""Record service — CRUD over the dynamic-width employees table.

The table is reflected on every call, so the set of legal field names is
always the set of columns that physically exist right now. Request fields
are checked against that set before any statement is built.
"""

import logging
import math
from typing import Optional, Dict, Any, List, Set

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy import MetaData, Table, Column, select, insert, update, delete, func, or_, case, types
from sqlalchemy.orm import Session

from staff_directory.core.exceptions import ValidationError, ResourceNotFoundError, NoOpError
from staff_directory.core.security import Caller
from staff_directory.models.audit_log import AuditAction
from staff_directory.models.employee import RECORD_TABLE, SYSTEM_COLUMNS
from staff_directory.services.audit_service import audit_service
from staff_directory.services.column_service import column_service

logger = logging.getLogger("staff_directory")

Record = Dict[str, Any]

SEARCH_COLUMNS = ("full_name", "email", "mobile_phone", "position")

# Query parameter -> column compared by equality.
EQUALITY_FILTERS = {
    "department": "department",
    "office": "office_number",
    "position": "position",
}

ORDER_COLUMN = "number"


def reflect_table(db: Session) -> Table:
    return Table(RECORD_TABLE, MetaData(), autoload_with=db.connection())


def coerce_value(column: Column, value: Any) -> Any:
    """Convert a JSON value to the Python type the column stores."""
    if value is None:
        return None
    if isinstance(column.type, types.String):
        return value if isinstance(value, str) else str(value)
    if isinstance(value, str) and value.strip() == "":
        return None
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    try:
        return TypeAdapter(python_type).validate_python(value)
    except PydanticValidationError as e:
        reason = e.errors()[0]["msg"] if e.errors() else str(e)
        raise ValidationError(f"Invalid value for '{column.name}': {reason}") from e


def clean_fields(table: Table, fields: Dict[str, Any]) -> Record:
    """Keep only writable, existing columns and coerce their values."""
    cleaned: Record = {}
    for name, value in fields.items():
        if name in SYSTEM_COLUMNS:
            continue
        if name not in table.c:
            logger.debug("Ignoring unknown employee field '%s'", name)
            continue
        column = table.c[name]
        coerced = coerce_value(column, value)
        if coerced is None and not column.nullable:
            raise ValidationError(f"'{name}' cannot be empty")
        cleaned[name] = coerced
    return cleaned


def hide_columns(record: Record, hidden: Set[str]) -> Record:
    return {key: value for key, value in record.items() if key not in hidden}


class RecordService:
    """Employee directory records."""

    @staticmethod
    def hidden_columns(db: Session, caller: Optional[Caller]) -> Set[str]:
        """Columns to strip from output; admin-only columns for anonymous callers."""
        if caller is not None:
            return set()
        return column_service.admin_only_columns(db)

    @staticmethod
    def list_records(
        db: Session,
        caller: Optional[Caller],
        search: Optional[str] = None,
        department: Optional[str] = None,
        office: Optional[str] = None,
        position: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Dict[str, Any]:
        """List employees ordered by number (nulls last) with optional filters."""
        table = reflect_table(db)
        hidden = RecordService.hidden_columns(db, caller)
        conditions = []

        if search:
            pattern = f"%{search}%"
            searchable = [
                table.c[name] for name in SEARCH_COLUMNS
                if name in table.c and name not in hidden
            ]
            conditions.append(or_(*[col.ilike(pattern) for col in searchable]))

        requested = {"department": department, "office": office, "position": position}
        for param, value in requested.items():
            if not value:
                continue
            column_name = EQUALITY_FILTERS[param]
            if column_name not in table.c or column_name in hidden:
                logger.debug("Filter '%s' ignored: column '%s' is not available", param, column_name)
                continue
            conditions.append(table.c[column_name] == value)

        total = db.execute(
            select(func.count()).select_from(table).where(*conditions)
        ).scalar_one()

        order_by = []
        if ORDER_COLUMN in table.c:
            number = table.c[ORDER_COLUMN]
            order_by = [case((number.is_(None), 1), else_=0), number.asc()]
        order_by.append(table.c.id.asc())

        rows = db.execute(
            select(table)
            .where(*conditions)
            .order_by(*order_by)
            .offset((page - 1) * limit)
            .limit(limit)
        ).mappings().all()

        include_admin_only = caller is not None
        return {
            "employees": [hide_columns(dict(row), hidden) for row in rows],
            "columns": [c.to_dict() for c in column_service.list_columns(db, include_admin_only)],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }

    @staticmethod
    def _fetch(db: Session, table: Table, record_id: int) -> Record:
        row = db.execute(select(table).where(table.c.id == record_id)).mappings().first()
        if row is None:
            raise ResourceNotFoundError(f"Employee {record_id} not found")
        return dict(row)

    @staticmethod
    def get_record(db: Session, caller: Optional[Caller], record_id: int) -> Record:
        """Get one employee."""
        record = RecordService._fetch(db, reflect_table(db), record_id)
        return hide_columns(record, RecordService.hidden_columns(db, caller))

    @staticmethod
    def create_record(
        db: Session,
        caller: Caller,
        fields: Dict[str, Any],
        ip_address: Optional[str] = None,
    ) -> Record:
        """Insert an employee; ``full_name`` is required."""
        full_name = fields.get("full_name")
        if not isinstance(full_name, str) or not full_name.strip():
            raise ValidationError("Full name is required")

        try:
            table = reflect_table(db)
            values = clean_fields(table, fields)
            result = db.execute(insert(table).values(**values))
            record_id = result.inserted_primary_key[0]
            record = RecordService._fetch(db, table, record_id)

            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.create,
                table_name=RECORD_TABLE,
                record_id=record_id,
                new_values=record,
                description=f"Added employee: {record['full_name']}",
                ip_address=ip_address,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Employee %s created by %s", record_id, caller.username)
        return record

    @staticmethod
    def update_record(
        db: Session,
        caller: Caller,
        record_id: int,
        fields: Dict[str, Any],
        ip_address: Optional[str] = None,
    ) -> Record:
        """Update the supplied fields of an employee and refresh ``updated_at``."""
        try:
            table = reflect_table(db)
            old_record = RecordService._fetch(db, table, record_id)

            values = clean_fields(table, fields)
            if not values:
                raise NoOpError("No fields to update")
            if "full_name" in values and not (values["full_name"] or "").strip():
                raise ValidationError("Full name cannot be empty")

            db.execute(
                update(table)
                .where(table.c.id == record_id)
                .values(**values, updated_at=func.now())
            )
            record = RecordService._fetch(db, table, record_id)

            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.update,
                table_name=RECORD_TABLE,
                record_id=record_id,
                old_values=old_record,
                new_values=record,
                description=f"Updated employee: {record['full_name']}",
                ip_address=ip_address,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        return record

    @staticmethod
    def delete_record(
        db: Session,
        caller: Caller,
        record_id: int,
        ip_address: Optional[str] = None,
    ) -> None:
        """Delete an employee."""
        try:
            table = reflect_table(db)
            record = RecordService._fetch(db, table, record_id)
            db.execute(delete(table).where(table.c.id == record_id))

            audit_service.log(
                db,
                admin_username=caller.username,
                action_type=AuditAction.delete,
                table_name=RECORD_TABLE,
                record_id=record_id,
                old_values=record,
                description=f"Deleted employee: {record['full_name']}",
                ip_address=ip_address,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Employee %s deleted by %s", record_id, caller.username)

    @staticmethod
    def filter_options(db: Session, caller: Optional[Caller] = None) -> Dict[str, List[Any]]:
        """Distinct values for the department, office and position filters.

        Columns hidden from the caller yield no values.
        """
        table = reflect_table(db)
        hidden = RecordService.hidden_columns(db, caller)
        options = {}
        for key, column_name in (
            ("departments", "department"),
            ("offices", "office_number"),
            ("positions", "position"),
        ):
            if column_name not in table.c or column_name in hidden:
                options[key] = []
                continue
            column = table.c[column_name]
            options[key] = list(
                db.execute(
                    select(column).distinct().where(column.is_not(None)).order_by(column)
                ).scalars()
            )
        return options


record_service = RecordService()
