"""
Database session management with SQLAlchemy.
"""
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from grc.core.config import Settings, get_settings
from grc.core.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=1800,
    )


engine = build_engine(get_settings().DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Context manager for database session."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(settings: Settings):
    """
    Verify the schema and run startup tasks.

    Schema is owned by Alembic (`alembic upgrade head`). With DEBUG on, or on
    SQLite, missing tables are created directly so a fresh checkout runs.
    """
    from grc.db import models  # noqa - register models on Base.metadata

    existing_tables = inspect(engine).get_table_names()
    missing = [t for t in ("users", "evidence", "third_parties") if t not in existing_tables]
    if missing:
        if settings.DEBUG or engine.dialect.name == "sqlite":
            logger.warning(f"Creating missing tables: {missing}")
            Base.metadata.create_all(bind=engine)
        else:
            logger.error(f"Missing required tables {missing}; run `alembic upgrade head`")
            return

    with get_db_context() as db:
        bootstrap_admin(db, settings)


def bootstrap_admin(db: Session, settings: Settings) -> bool:
    """
    Create the first admin from ADMIN_BOOTSTRAP_* when the users table is empty.

    Returns True when an admin was created.
    """
    from grc.core.policy import Role
    from grc.core.security import get_password_hash
    from grc.db.models import User

    email = settings.ADMIN_BOOTSTRAP_EMAIL
    password = settings.ADMIN_BOOTSTRAP_PASSWORD

    if not email or not password:
        logger.info("Admin bootstrap: ADMIN_BOOTSTRAP_EMAIL/PASSWORD not set. Skipping.")
        return False

    if len(password) < 8:
        logger.warning("ADMIN_BOOTSTRAP_PASSWORD must be at least 8 characters. Skipping bootstrap.")
        return False

    if db.query(User).first() is not None:
        logger.info("Admin bootstrap: users already exist. Skipping.")
        return False

    db.add(User(
        email=email.strip().lower(),
        hashed_password=get_password_hash(password, settings),
        role=Role.ADMIN.value,
    ))
    db.flush()
    logger.info(f"Bootstrap admin created: {email}")
    return True
