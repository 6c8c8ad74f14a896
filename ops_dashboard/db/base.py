"""Database configuration and base setup for the Ops Dashboard."""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterator, Optional

import structlog
from alembic import command
from alembic.config import Config
from sqlalchemy import Engine, create_engine
from sqlalchemy.engine.url import URL, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_settings
from ..errors import PersistenceError

logger = structlog.get_logger()


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


DEFAULT_DATABASE_URL = "sqlite:///./ops_dashboard.db"

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _ensure_sync_driver(url: URL) -> URL:
    """Force a synchronous driver for Alembic and the ORM engine."""

    if url.drivername.startswith("postgresql+"):
        # Normalize any async driver variants to psycopg (sync)
        if any(token in url.drivername for token in ("async", "aiopg")):
            url = url.set(drivername="postgresql+psycopg")
    elif url.drivername == "postgresql":
        url = url.set(drivername="postgresql+psycopg")
    elif url.drivername.startswith("sqlite+"):
        if "aiosqlite" in url.drivername:
            url = url.set(drivername="sqlite")

    return url


def get_database_url(raw_url: Optional[str] = None) -> str:
    """Return a database URL with a guaranteed synchronous driver."""

    url = make_url(raw_url or get_settings().database_url or DEFAULT_DATABASE_URL)
    # str(url) would mask the password with ***
    return _ensure_sync_driver(url).render_as_string(hide_password=False)


_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """
    Create and cache the database engine.

    Lazy so that settings are read at runtime rather than at import time.
    """
    global _engine
    if _engine is not None:
        return _engine

    database_url = get_database_url()

    if database_url.startswith("sqlite"):
        _engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        _engine = create_engine(
            database_url,
            pool_size=20,
            max_overflow=30,
            pool_pre_ping=True,
            pool_recycle=3600,
        )

    return _engine


def get_session_local() -> sessionmaker:
    """Get a sessionmaker bound to the current engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    """Dependency to get database session."""
    session_local = get_session_local()
    db = session_local()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def persistence_guard(db: Session, action: str) -> Iterator[None]:
    """Translate SQLAlchemy failures into ``PersistenceError``.

    The session is rolled back so it stays usable for the caller.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("database_error", action=action, error=str(exc))
        raise PersistenceError(f"Failed to {action}") from exc


def get_alembic_config(database_url: Optional[str] = None) -> Config:
    """Build an Alembic config pointing at the bundled migration scripts."""
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    # ConfigParser interpolation treats '%' specially (URL-encoded passwords)
    config.set_main_option(
        "sqlalchemy.url", get_database_url(database_url).replace("%", "%%")
    )
    return config


def _is_memory_sqlite(database_url: str) -> bool:
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def run_migrations(revision: str = "head", database_url: Optional[str] = None) -> None:
    """Apply Alembic migrations up to ``revision``.

    An in-memory SQLite database only exists on the application engine's
    single StaticPool connection, so for the configured database that
    connection is handed to Alembic instead of opening a new one.
    """
    config = get_alembic_config(database_url)
    logger.info("migrations_start", revision=revision)
    if database_url is None and _is_memory_sqlite(get_database_url()):
        with get_engine().begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, revision)
    else:
        command.upgrade(config, revision)
    logger.info("migrations_complete", revision=revision)


async def init_database() -> None:
    """Bring the schema up to date and optionally seed demo rows.

    Runs once from the application lifespan, before any request is served.
    """
    settings = get_settings()

    if settings.run_migrations_on_startup:
        run_migrations()

    if settings.seed_sample_data:
        from .seed import seed_sample_data

        db = get_session_local()()
        try:
            seed_sample_data(db)
        finally:
            db.close()
