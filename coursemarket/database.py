"""
Database engine, session factory and declarative base.
"""

import logging
from typing import Generator

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from coursemarket.config import settings

logger = logging.getLogger(__name__)

# Predictable constraint names across SQLite and PostgreSQL
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True, echo=settings.DEBUG)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores foreign keys unless asked per connection
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base(metadata=metadata)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(db: Session) -> None:
    """
    Create the first admin account if one is configured and missing.
    """
    from coursemarket.core.security import get_password_hash
    from coursemarket.models.user import UserRole
    from coursemarket.storage.database import DatabaseStorage

    if not settings.FIRST_ADMIN_PASSWORD:
        logger.info("FIRST_ADMIN_PASSWORD not set, skipping admin seeding")
        return

    storage = DatabaseStorage(db)
    if storage.get_user_by_email(settings.FIRST_ADMIN_EMAIL):
        logger.info(f"Admin user already exists: {settings.FIRST_ADMIN_EMAIL}")
        return

    storage.create_user(
        email=settings.FIRST_ADMIN_EMAIL,
        hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
        role=UserRole.ADMIN,
    )
    logger.info(f"Admin user created: {settings.FIRST_ADMIN_EMAIL}")
