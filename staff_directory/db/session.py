"""Database engine, session factory, and dependency injection."""

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from staff_directory.core.config import settings


def enable_sqlite_transactional_ddl(engine: Engine) -> None:
    """Let pysqlite run ALTER TABLE inside the surrounding transaction.

    pysqlite only opens a transaction before DML, so schema changes would
    otherwise autocommit ahead of the metadata insert that follows them.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine for ``url`` with per-dialect defaults."""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=kwargs.pop("echo", False),
            **kwargs,
        )
        enable_sqlite_transactional_ddl(engine)
        return engine

    return create_engine(
        url,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True,
        **kwargs,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that provides a DB session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
