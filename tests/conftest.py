"""Test configuration."""
import os
from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

# --- Config env before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./staff_directory_test.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from staff_directory.main import app  # noqa: E402
from staff_directory import models  # noqa: E402,F401
from staff_directory.core.security import Caller, create_access_token, hash_password  # noqa: E402
from staff_directory.db.base import Base  # noqa: E402
from staff_directory.db.session import build_engine, get_db  # noqa: E402
from staff_directory.models import Admin, AdminRole  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    # One database file per test: column changes alter the schema itself.
    engine = build_engine(f"sqlite:///{tmp_path / 'directory.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Iterator[Session]:
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_admin(db_session: Session) -> Callable[..., Admin]:
    def _factory(
        username: str,
        role: str = AdminRole.admin.value,
        password: str = "secret123",
        full_name: str = "",
    ) -> Admin:
        admin = Admin(
            username=username,
            password_hash=hash_password(password),
            full_name=full_name,
            role=role,
        )
        db_session.add(admin)
        db_session.commit()
        db_session.refresh(admin)
        return admin

    return _factory


@pytest.fixture
def owner(make_admin) -> Admin:
    return make_admin("owner", role=AdminRole.owner.value, full_name="Owner")


@pytest.fixture
def admin(make_admin) -> Admin:
    return make_admin("editor", role=AdminRole.admin.value, full_name="Editor")


def caller_for(account: Admin) -> Caller:
    return Caller(id=account.id, username=account.username, role=account.role)


@pytest.fixture
def owner_caller(owner) -> Caller:
    return caller_for(owner)


@pytest.fixture
def admin_caller(admin) -> Caller:
    return caller_for(admin)


@pytest.fixture
def owner_headers(owner) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(owner)}"}


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(admin)}"}
