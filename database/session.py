"""Database session management"""
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import settings
from database.base import Base


def build_engine(database_url: str, echo: bool = False):
    """Create an engine with dialect-appropriate pooling"""
    if database_url.startswith("sqlite"):
        if ":memory:" in database_url or database_url == "sqlite://":
            # One shared connection, otherwise every session sees an empty database
            return create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=echo,
            )
        return create_engine(database_url, connect_args={"check_same_thread": False}, echo=echo)

    # PostgreSQL settings for production
    return create_engine(
        database_url,
        pool_size=settings.database_pool_size,
        max_overflow=20,
        pool_pre_ping=True,
        echo=echo,
    )


engine = build_engine(settings.database_url, echo=settings.database_echo)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(bind=None) -> None:
    """Create all tables for registered models"""
    # Model modules register their tables on import
    import database.models  # noqa: F401
    import storefront.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    """Session for synchronous code outside a request (CLI, scripts)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
