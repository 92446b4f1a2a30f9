from datetime import date
from decimal import Decimal

import pytest

from staff_directory.core.exceptions import NoOpError, ResourceNotFoundError, ValidationError
from staff_directory.db.seeds.seed_columns import seed_columns
from staff_directory.models import AuditLog
from staff_directory.services.column_service import column_service
from staff_directory.services.record_service import record_service
from staff_directory.services.schema_service import schema_service


@pytest.fixture
def directory(db_session):
    seed_columns(db_session)
    return db_session


def _create(db_session, caller, **fields):
    return record_service.create_record(db_session, caller, fields)


def test_create_then_read_round_trip(directory, admin_caller):
    created = _create(
        directory, admin_caller,
        full_name="Anna Ivanova", number=3, position="Engineer",
        email="anna@example.com", birthday="1990-05-17",
    )

    stored = record_service.get_record(directory, admin_caller, created["id"])

    assert stored["full_name"] == "Anna Ivanova"
    assert stored["number"] == 3
    assert stored["position"] == "Engineer"
    assert stored["email"] == "anna@example.com"
    assert stored["birthday"] == date(1990, 5, 17)
    assert stored["created_at"] is not None
    assert stored["updated_at"] is not None


def test_create_ignores_system_and_unknown_fields(directory, admin_caller):
    created = _create(
        directory, admin_caller,
        id=999, created_at="2001-01-01", full_name="Boris", nickname="bob",
    )

    assert created["id"] != 999
    assert "nickname" not in created


def test_create_requires_full_name(directory, admin_caller):
    with pytest.raises(ValidationError):
        _create(directory, admin_caller, position="Engineer")
    with pytest.raises(ValidationError):
        _create(directory, admin_caller, full_name="   ")


def test_create_rejects_values_of_wrong_type(directory, admin_caller):
    with pytest.raises(ValidationError, match="number"):
        _create(directory, admin_caller, full_name="Boris", number="first")


def test_create_is_not_idempotent(directory, admin_caller):
    first = _create(directory, admin_caller, full_name="Twin")
    second = _create(directory, admin_caller, full_name="Twin")
    assert first["id"] != second["id"]


def test_create_writes_audit_entry(directory, admin_caller):
    created = _create(directory, admin_caller, full_name="Anna")

    entry = directory.query(AuditLog).filter(AuditLog.action_type == "create").one()
    assert entry.record_id == created["id"]
    assert entry.table_name == "employees"
    assert entry.new_values["full_name"] == "Anna"


def test_update_record(directory, admin_caller):
    created = _create(directory, admin_caller, full_name="Anna", position="Engineer")

    updated = record_service.update_record(
        directory, admin_caller, created["id"], {"position": "Lead", "id": 42},
    )

    assert updated["id"] == created["id"]
    assert updated["position"] == "Lead"
    entry = directory.query(AuditLog).filter(AuditLog.action_type == "update").one()
    assert entry.old_values["position"] == "Engineer"
    assert entry.new_values["position"] == "Lead"


def test_update_with_identical_values_still_audited(directory, admin_caller):
    created = _create(directory, admin_caller, full_name="Anna", position="Engineer")

    first = record_service.update_record(directory, admin_caller, created["id"], {"position": "Engineer"})
    second = record_service.update_record(directory, admin_caller, created["id"], {"position": "Engineer"})

    assert first["position"] == second["position"] == "Engineer"
    assert directory.query(AuditLog).filter(AuditLog.action_type == "update").count() == 2


def test_update_missing_record(directory, admin_caller):
    with pytest.raises(ResourceNotFoundError):
        record_service.update_record(directory, admin_caller, 404, {"position": "Lead"})


def test_update_with_only_system_fields_is_noop(directory, admin_caller):
    created = _create(directory, admin_caller, full_name="Anna")

    with pytest.raises(NoOpError):
        record_service.update_record(
            directory, admin_caller, created["id"], {"id": 5, "updated_at": "2020-01-01"},
        )


def test_update_cannot_blank_full_name(directory, admin_caller):
    created = _create(directory, admin_caller, full_name="Anna")

    with pytest.raises(ValidationError):
        record_service.update_record(directory, admin_caller, created["id"], {"full_name": ""})


def test_delete_record(directory, admin_caller):
    created = _create(directory, admin_caller, full_name="Anna")

    record_service.delete_record(directory, admin_caller, created["id"])

    with pytest.raises(ResourceNotFoundError):
        record_service.get_record(directory, admin_caller, created["id"])
    entry = directory.query(AuditLog).filter(AuditLog.action_type == "delete").one()
    assert entry.old_values["full_name"] == "Anna"


def test_delete_missing_record(directory, admin_caller):
    with pytest.raises(ResourceNotFoundError):
        record_service.delete_record(directory, admin_caller, 404)


def test_list_orders_by_number_with_nulls_last(directory, admin_caller):
    _create(directory, admin_caller, full_name="No number")
    _create(directory, admin_caller, full_name="Second", number=2)
    _create(directory, admin_caller, full_name="First", number=1)

    result = record_service.list_records(directory, admin_caller)

    assert [e["full_name"] for e in result["employees"]] == ["First", "Second", "No number"]
    assert result["pagination"] == {"page": 1, "limit": 50, "total": 3, "pages": 1}


def test_list_search_and_filters(directory, admin_caller):
    _create(directory, admin_caller, full_name="Anna Ivanova", department="IT", position="Engineer",
            email="anna@corp.example", office_number="101")
    _create(directory, admin_caller, full_name="Boris Petrov", department="IT", position="Manager",
            mobile_phone="+7 900 111")
    _create(directory, admin_caller, full_name="Clara Smirnova", department="HR", position="Engineer")

    def names(**filters):
        result = record_service.list_records(directory, admin_caller, **filters)
        return sorted(e["full_name"] for e in result["employees"])

    assert names(search="ivanova") == ["Anna Ivanova"]
    assert names(search="CORP.EXAMPLE") == ["Anna Ivanova"]
    assert names(search="900") == ["Boris Petrov"]
    assert names(search="engineer") == ["Anna Ivanova", "Clara Smirnova"]
    assert names(department="IT") == ["Anna Ivanova", "Boris Petrov"]
    assert names(department="IT", position="Engineer") == ["Anna Ivanova"]
    assert names(office="101") == ["Anna Ivanova"]
    assert names(department="it") == []


def test_list_pagination(directory, admin_caller):
    for n in range(1, 6):
        _create(directory, admin_caller, full_name=f"Person {n}", number=n)

    result = record_service.list_records(directory, admin_caller, page=2, limit=2)

    assert [e["number"] for e in result["employees"]] == [3, 4]
    assert result["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}


def test_anonymous_reads_never_include_admin_only_fields(directory, admin_caller):
    schema_service.add_column(directory, admin_caller, "salary", "Salary", "DECIMAL(10,2)", admin_only=True)
    created = _create(directory, admin_caller, full_name="Anna", salary="1500.50")

    public = record_service.list_records(directory, None)
    private = record_service.list_records(directory, admin_caller)

    assert "salary" not in public["employees"][0]
    assert "salary" not in [c["column_name"] for c in public["columns"]]
    assert Decimal(str(private["employees"][0]["salary"])) == Decimal("1500.50")
    assert "salary" in [c["column_name"] for c in private["columns"]]
    assert "salary" not in record_service.get_record(directory, None, created["id"])


def test_filters_ignore_dropped_columns(directory, admin_caller):
    _create(directory, admin_caller, full_name="Anna", department="IT")
    schema_service.drop_column(directory, admin_caller, "department")

    result = record_service.list_records(directory, None, department="IT")

    assert [e["full_name"] for e in result["employees"]] == ["Anna"]
    assert record_service.filter_options(directory)["departments"] == []


def test_filter_options(directory, admin_caller):
    _create(directory, admin_caller, full_name="A", department="IT", office_number="101", position="Dev")
    _create(directory, admin_caller, full_name="B", department="HR", office_number="101")
    _create(directory, admin_caller, full_name="C", department="IT")

    options = record_service.filter_options(directory)

    assert options == {"departments": ["HR", "IT"], "offices": ["101"], "positions": ["Dev"]}


def test_anonymous_filters_ignore_admin_only_columns(directory, admin_caller):
    _create(directory, admin_caller, full_name="Anna", department="Secret Ops")
    _create(directory, admin_caller, full_name="Boris", department="IT")
    column_service.update_metadata(directory, admin_caller, "department", admin_only=True)

    public = record_service.list_records(directory, None, department="Secret Ops")
    private = record_service.list_records(directory, admin_caller, department="Secret Ops")

    assert public["pagination"]["total"] == 2
    assert private["pagination"]["total"] == 1


def test_anonymous_search_skips_admin_only_columns(directory, admin_caller):
    _create(directory, admin_caller, full_name="Anna", email="anna@hidden.example")
    column_service.update_metadata(directory, admin_caller, "email", admin_only=True)

    assert record_service.list_records(directory, None, search="hidden.example")["employees"] == []
    assert record_service.list_records(directory, None, search="Anna")["pagination"]["total"] == 1
    assert record_service.list_records(directory, admin_caller, search="hidden.example")["pagination"]["total"] == 1


def test_filter_options_hide_admin_only_values(directory, admin_caller):
    _create(directory, admin_caller, full_name="Anna", department="Secret Ops", position="Dev")
    column_service.update_metadata(directory, admin_caller, "department", admin_only=True)

    assert record_service.filter_options(directory) == {
        "departments": [], "offices": [], "positions": ["Dev"],
    }
    assert record_service.filter_options(directory, admin_caller)["departments"] == ["Secret Ops"]


@pytest.mark.parametrize("value", ["", None])
def test_empty_value_for_required_column_is_rejected(directory, admin_caller, value):
    schema_service.add_column(directory, admin_caller, "floor", "Floor", "INTEGER", is_nullable=False)

    with pytest.raises(ValidationError, match="'floor' cannot be empty"):
        _create(directory, admin_caller, full_name="Anna", floor=value)

    created = _create(directory, admin_caller, full_name="Anna", floor=3)
    with pytest.raises(ValidationError, match="'floor' cannot be empty"):
        record_service.update_record(directory, admin_caller, created["id"], {"floor": value})
    assert record_service.get_record(directory, admin_caller, created["id"])["floor"] == 3
