from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from pastebox.db import Base


FORMAT_TEXT = "text"
FORMAT_MARKDOWN = "markdown"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Paste(Base):
    """
    Paste entity persisted via SQLAlchemy.

    ``format`` is a free-form tag; only ``"markdown"`` changes how the paste
    is rendered, any other value is served as plain text.
    """

    __tablename__ = "pastes"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    format: Mapped[str | None] = mapped_column(
        String,
        default=FORMAT_TEXT,
        server_default=FORMAT_TEXT,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.current_timestamp(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.current_timestamp(),
    )

    def __repr__(self) -> str:
        return f"<Paste id={self.id!r} format={self.format!r}>"
