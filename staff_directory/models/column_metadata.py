"""Column registry model and the supported column data types."""

import enum
from typing import Optional, Union

from sqlalchemy import Column, Integer, String, Boolean, DateTime, func, text, types
from sqlalchemy.sql.elements import TextClause
from staff_directory.db.base import Base


class ColumnDataType(str, enum.Enum):
    """Data types an administrator may choose for a new column."""
    short_text = "VARCHAR(255)"
    long_text = "TEXT"
    integer = "INTEGER"
    decimal = "DECIMAL(10,2)"
    date = "DATE"
    timestamp = "TIMESTAMP"
    boolean = "BOOLEAN"

    @classmethod
    def parse(cls, value: str) -> Optional["ColumnDataType"]:
        """Resolve a SQL spelling (``varchar(255)``) or a name (``short_text``)."""
        normalized = value.strip().upper().replace(" ", "")
        for member in cls:
            if normalized in (member.value, member.name.upper()):
                return member
        if normalized in ("DECIMAL", "NUMERIC"):
            return cls.decimal
        return None

    @classmethod
    def from_sql_type(cls, sql_type: types.TypeEngine) -> str:
        """Classify a reflected column type; unknown types keep their SQL name."""
        # Order matters: Text subclasses String, Float subclasses Numeric.
        checks = (
            (types.Boolean, cls.boolean),
            (types.DateTime, cls.timestamp),
            (types.Date, cls.date),
            (types.Integer, cls.integer),
            (types.Numeric, cls.decimal),
            (types.Text, cls.long_text),
            (types.String, cls.short_text),
        )
        for type_class, member in checks:
            if isinstance(sql_type, type_class):
                return member.value
        return str(sql_type)

    def sql_type(self) -> types.TypeEngine:
        return {
            ColumnDataType.short_text: types.String(255),
            ColumnDataType.long_text: types.Text(),
            ColumnDataType.integer: types.Integer(),
            ColumnDataType.decimal: types.Numeric(10, 2),
            ColumnDataType.date: types.Date(),
            ColumnDataType.timestamp: types.DateTime(),
            ColumnDataType.boolean: types.Boolean(),
        }[self]

    def empty_default(self) -> Union[str, TextClause]:
        """Server default that keeps existing rows valid for NOT NULL columns.

        Strings are rendered quoted, ``text()`` clauses as bare SQL.
        """
        return {
            ColumnDataType.short_text: "",
            ColumnDataType.long_text: "",
            ColumnDataType.integer: text("0"),
            ColumnDataType.decimal: text("0"),
            ColumnDataType.date: "1970-01-01",
            ColumnDataType.timestamp: "1970-01-01 00:00:00",
            ColumnDataType.boolean: text("false"),
        }[self]


class ColumnMetadata(Base):
    """Display settings for one dynamic column of the employees table."""
    __tablename__ = "columns_metadata"

    id = Column(Integer, primary_key=True, autoincrement=True)
    column_name = Column(String(63), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=False)
    is_visible = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=999, nullable=False)
    admin_only = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    def to_dict(self) -> dict:
        return {
            "column_name": self.column_name,
            "display_name": self.display_name,
            "is_visible": self.is_visible,
            "sort_order": self.sort_order,
            "admin_only": self.admin_only,
        }
