import re
import sqlite3

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from ..config import settings

logger = structlog.get_logger(__name__)

_SSLMODE_ALIASES = re.compile(r"sslmode=(prefer|require|verify-ca)", re.IGNORECASE)


def normalize_database_url(url: str) -> str:
    """Make hosted PostgreSQL URLs acceptable to SQLAlchemy/libpq.

    ``postgres://`` is rewritten to ``postgresql://`` and, for anything that is
    not a local database, weaker sslmode aliases are upgraded to verify-full.
    """
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if "localhost" in url or "127.0.0.1" in url:
        return url
    return _SSLMODE_ALIASES.sub("sslmode=verify-full", url)


def build_engine(url: str | None) -> Engine:
    if not url:
        logger.error("database_url_missing", hint="set DATABASE_URL in the environment or .env")
        raise SystemExit(1)
    url = normalize_database_url(url)
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False}, echo=False)
    connect_args = {}
    if url.startswith("postgresql"):
        connect_args = {"client_encoding": "utf8"}
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_recycle=3600,
        connect_args=connect_args,
        echo=False,
    )


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # ON DELETE CASCADE is ignored by SQLite unless enabled per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase): pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
