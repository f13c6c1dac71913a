"""SQLAlchemy declarative base and metadata."""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Deterministic constraint names so Alembic revisions match the models
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base for all engine ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
