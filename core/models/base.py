"""Base model and mixins for all SQLAlchemy models.

Provides:
- Base: Declarative base class for all models
- TextIdMixin: Adds a text UUID primary key assigned by the repository

The id column is plain text so that the same schema works on SQLite and
PostgreSQL and stays readable in dumps.
"""

from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all models."""
    pass


class TextIdMixin:
    """Mixin providing a 36-char text primary key.

    The key is never generated by the database; repositories assign a
    UUID-v4 string before insert.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
