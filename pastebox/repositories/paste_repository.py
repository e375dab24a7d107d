from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Delete, Select, Update, delete, select, update
from sqlalchemy.orm import Session

from pastebox.domain.models import FORMAT_TEXT, Paste, utcnow


class PasteRepository:
    """
    Repository for Paste rows.

    All database interaction for Paste should go through this class. Every
    statement is built with SQLAlchemy constructs, so values are always sent
    as bound parameters.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_summaries(self) -> list[dict[str, Any]]:
        """Return every paste without its content, most recently updated first."""

        stmt: Select[Any] = select(
            Paste.id,
            Paste.format,
            Paste.created_at,
            Paste.updated_at,
        ).order_by(Paste.updated_at.desc(), Paste.created_at.desc())
        return [dict(row._mapping) for row in self._session.execute(stmt)]

    def get_full(self, paste_id: str) -> Optional[Paste]:
        """Return a Paste by its id, or ``None`` if not found."""

        stmt: Select[tuple[Paste]] = select(Paste).where(Paste.id == paste_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_public(self, paste_id: str) -> Optional[dict[str, Any]]:
        """Return only ``content`` and ``format`` of a paste, or ``None``."""

        stmt: Select[Any] = select(Paste.content, Paste.format).where(
            Paste.id == paste_id
        )
        row = self._session.execute(stmt).one_or_none()
        if row is None:
            return None
        return {"content": row.content, "format": row.format}

    def insert(self, paste_id: str, content: str, format: str = FORMAT_TEXT) -> Paste:
        """
        Create and persist a new Paste.

        Raises ``sqlalchemy.exc.IntegrityError`` on flush when ``paste_id`` is
        already taken.
        """

        now = utcnow()
        paste = Paste(
            id=paste_id,
            content=content,
            format=format,
            created_at=now,
            updated_at=now,
        )
        self._session.add(paste)
        self._session.flush()
        return paste

    def update(self, paste_id: str, content: str, format: str) -> int:
        """Replace content and format and bump ``updated_at``; return rows affected."""

        stmt: Update = (
            update(Paste)
            .where(Paste.id == paste_id)
            .values(content=content, format=format, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)

    def delete(self, paste_id: str) -> int:
        """Delete a paste; return rows affected."""

        stmt: Delete = (
            delete(Paste)
            .where(Paste.id == paste_id)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)
