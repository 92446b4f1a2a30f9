"""Seed the default directory columns through the schema service."""

from sqlalchemy.orm import Session

from staff_directory.core.security import Caller
from staff_directory.models.admin import AdminRole
from staff_directory.services.column_service import physical_columns
from staff_directory.services.schema_service import schema_service

# (column_name, display_name, data_type)
DEFAULT_COLUMNS = [
    ("number", "№", "INTEGER"),
    ("position", "Должность", "VARCHAR(255)"),
    ("department", "Отдел", "VARCHAR(255)"),
    ("office_number", "Кабинет", "VARCHAR(255)"),
    ("internal_phone", "Внутренний телефон", "VARCHAR(255)"),
    ("email", "Email", "VARCHAR(255)"),
    ("mobile_phone", "Мобильный телефон", "VARCHAR(255)"),
    ("birthday", "День рождения", "DATE"),
]

SYSTEM_CALLER = Caller(id=0, username="system", role=AdminRole.owner.value)


def seed_columns(db: Session) -> int:
    """Add any missing default column. Returns the number added."""
    existing = {column["name"] for column in physical_columns(db)}
    db.rollback()

    added = 0
    for column_name, display_name, data_type in DEFAULT_COLUMNS:
        if column_name in existing:
            continue
        schema_service.add_column(
            db, SYSTEM_CALLER,
            column_name=column_name,
            display_name=display_name,
            data_type=data_type,
            is_nullable=True,
        )
        added += 1

    print(f"✅ Seeded {added} directory columns")
    return added
