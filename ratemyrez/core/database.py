"""Database configuration."""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from ratemyrez.core.config import settings


def build_engine(database_url: str) -> Engine:
    """Create a SQLAlchemy engine for the given URL."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}  # Needed for SQLite
    return create_engine(database_url, connect_args=connect_args)


# Create SQLAlchemy engine
engine = build_engine(settings.DATABASE_URL)


def build_session_factory(bind: Engine) -> sessionmaker:
    """Create a session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


# Base class for models
class Base(DeclarativeBase):
    """Base class for all database models."""

    pass
