import pytest
from sqlalchemy import text

from staff_directory.core.exceptions import NoOpError, ResourceNotFoundError
from staff_directory.models import AuditLog
from staff_directory.services.column_service import column_service
from staff_directory.services.schema_service import schema_service


def _names(columns):
    return [c.column_name for c in columns]


def test_protected_columns_never_listed(db_session):
    assert column_service.list_columns(db_session, include_admin_only=True) == []


def test_unregistered_physical_column_gets_defaults(db_session, admin_caller):
    schema_service.add_column(db_session, admin_caller, "email", "Email", "VARCHAR(255)")
    db_session.execute(text("ALTER TABLE employees ADD COLUMN legacy_code TEXT"))
    db_session.commit()

    columns = column_service.list_columns(db_session, include_admin_only=False)

    assert _names(columns) == ["email", "legacy_code"]
    legacy = columns[1]
    assert legacy.display_name == "legacy_code"
    assert legacy.sort_order == 999
    assert legacy.is_visible is True
    assert legacy.admin_only is False
    assert legacy.data_type == "TEXT"


def test_admin_only_columns_hidden_unless_requested(db_session, admin_caller):
    schema_service.add_column(db_session, admin_caller, "email", "Email", "VARCHAR(255)")
    schema_service.add_column(db_session, admin_caller, "salary", "Salary", "DECIMAL(10,2)", admin_only=True)

    assert _names(column_service.list_columns(db_session, include_admin_only=False)) == ["email"]
    assert _names(column_service.list_columns(db_session, include_admin_only=True)) == ["email", "salary"]
    assert column_service.admin_only_columns(db_session) == {"salary"}


def test_ties_in_sort_order_follow_physical_position(db_session, admin_caller):
    for name in ("alpha", "beta", "gamma"):
        schema_service.add_column(db_session, admin_caller, name, name.title(), "TEXT")
    for name in ("alpha", "beta", "gamma"):
        column_service.update_metadata(db_session, admin_caller, name, sort_order=5)
    column_service.update_metadata(db_session, admin_caller, "gamma", sort_order=1)

    assert _names(column_service.list_columns(db_session, True)) == ["gamma", "alpha", "beta"]


def test_update_metadata_is_partial(db_session, admin_caller):
    schema_service.add_column(db_session, admin_caller, "email", "Email", "VARCHAR(255)")

    updated = column_service.update_metadata(db_session, admin_caller, "email", admin_only=True)

    assert updated.admin_only is True
    assert updated.display_name == "Email"
    assert updated.is_visible is True

    entry = (
        db_session.query(AuditLog)
        .filter(AuditLog.action_type == "column_change")
        .order_by(AuditLog.id.desc())
        .first()
    )
    assert entry.old_values["admin_only"] is False
    assert entry.new_values["admin_only"] is True


def test_update_metadata_without_fields_is_noop(db_session, admin_caller):
    schema_service.add_column(db_session, admin_caller, "email", "Email", "VARCHAR(255)")

    with pytest.raises(NoOpError):
        column_service.update_metadata(db_session, admin_caller, "email")


@pytest.mark.parametrize("name", ["missing", "full_name", "id"])
def test_update_metadata_unknown_column(db_session, admin_caller, name):
    with pytest.raises(ResourceNotFoundError):
        column_service.update_metadata(db_session, admin_caller, name, display_name="X")


def test_reorder_rewrites_sort_order(db_session, admin_caller):
    for name in ("alpha", "beta", "gamma"):
        schema_service.add_column(db_session, admin_caller, name, name.title(), "TEXT")

    columns = column_service.reorder(db_session, admin_caller, ["gamma", "alpha", "beta"])

    assert _names(columns) == ["gamma", "alpha", "beta"]
    assert [c.sort_order for c in columns] == [1, 2, 3]


def test_reorder_rejects_unknown_names(db_session, admin_caller):
    schema_service.add_column(db_session, admin_caller, "alpha", "Alpha", "TEXT")

    with pytest.raises(ResourceNotFoundError):
        column_service.reorder(db_session, admin_caller, ["alpha", "ghost"])
