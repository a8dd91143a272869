"""SQLAlchemy model for the ``tasks`` table.

Optional entity fields map to nullable columns. ``due_date`` keeps the
ISO-8601 text exactly as validated and ``tags`` holds a JSON-encoded array.
"""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from core.models.base import Base, TextIdMixin


class TaskRow(TextIdMixin, Base):
    """A persisted task."""

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default="pending", server_default="pending"
    )
    priority: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"TaskRow(id={self.id!r}, title={self.title!r}, status={self.status!r})"
