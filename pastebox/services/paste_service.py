from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pastebox.domain.ids import generate_paste_id
from pastebox.domain.models import FORMAT_TEXT, Paste
from pastebox.observability import get_correlation_id
from pastebox.repositories.paste_repository import PasteRepository


logger = logging.getLogger(__name__)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="microseconds") if value is not None else None


def _paste_to_dto(paste: Paste) -> dict[str, Any]:
    """Convert a Paste ORM entity to a plain dict DTO."""
    return {
        "id": paste.id,
        "content": paste.content,
        "format": paste.format,
        "created_at": _isoformat(paste.created_at),
        "updated_at": _isoformat(paste.updated_at),
    }


def _summary_to_dto(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": row["id"],
        "format": row["format"],
        "created_at": _isoformat(row["created_at"]),
        "updated_at": _isoformat(row["updated_at"]),
    }


class PasteError(Exception):
    """Base class for paste-related errors."""


class InvalidPasteParameters(PasteError):
    """Raised when creating or updating a paste with invalid parameters."""


class PasteNotFoundError(PasteError):
    """Raised when a paste cannot be found."""


class PasteStorageError(PasteError):
    """Raised when the database rejects or fails a paste operation."""


@dataclass
class PasteService:
    """
    Application service coordinating paste-related use cases.

    Owns session lifecycle: creates a session per use case, commits on success,
    rolls back on exception, and closes the session in a finally block.
    Returns plain dict DTOs; no ORM entities escape this layer.
    """

    session_factory: Callable[[], Session]
    id_factory: Callable[[], str] = generate_paste_id
    id_attempts: int = 3

    def _storage_error(self, exc: SQLAlchemyError, *, paste_id: str | None = None) -> PasteStorageError:
        logger.error(
            "Paste storage operation failed",
            extra={
                "event": "paste_storage_error",
                "paste_id": paste_id,
                "error_type": type(exc).__name__,
                "correlation_id": get_correlation_id(),
            },
        )
        return PasteStorageError(str(exc.orig) if getattr(exc, "orig", None) else str(exc))

    @staticmethod
    def _require_content(content: Optional[str]) -> str:
        if not content:
            logger.warning(
                "Missing content for paste",
                extra={
                    "event": "paste_invalid_parameters",
                    "correlation_id": get_correlation_id(),
                },
            )
            raise InvalidPasteParameters("Content is required")
        return content

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def list_pastes(self) -> list[dict[str, Any]]:
        session = self.session_factory()
        try:
            rows = PasteRepository(session=session).list_summaries()
            return [_summary_to_dto(row) for row in rows]
        except SQLAlchemyError as exc:
            raise self._storage_error(exc) from exc
        finally:
            session.close()

    def get_paste(self, paste_id: str) -> dict[str, Any]:
        session = self.session_factory()
        try:
            paste = PasteRepository(session=session).get_full(paste_id)
            if paste is None:
                raise PasteNotFoundError("Paste not found")
            return _paste_to_dto(paste)
        except SQLAlchemyError as exc:
            raise self._storage_error(exc, paste_id=paste_id) from exc
        finally:
            session.close()

    def get_public_paste(self, paste_id: str) -> dict[str, Any]:
        """Return ``{"content", "format"}`` for the public read paths."""
        session = self.session_factory()
        try:
            row = PasteRepository(session=session).get_public(paste_id)
            if row is None:
                raise PasteNotFoundError("Paste not found")
            return row
        except SQLAlchemyError as exc:
            raise self._storage_error(exc, paste_id=paste_id) from exc
        finally:
            session.close()

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------
    def create_paste(self, *, content: Optional[str], format: Optional[str] = None) -> dict[str, Any]:
        """
        Create a new paste under a freshly generated id.

        Ids are not checked against the table up front; a primary-key
        conflict triggers a new id, up to ``id_attempts`` tries.
        """
        content = self._require_content(content)
        format = FORMAT_TEXT if format is None else format

        attempts = max(self.id_attempts, 1)
        attempt = 0
        while True:
            attempt += 1
            paste_id = self.id_factory()
            session = self.session_factory()
            try:
                paste = PasteRepository(session=session).insert(paste_id, content, format)
                session.commit()
                logger.info(
                    "Paste created",
                    extra={
                        "event": "paste_created",
                        "paste_id": paste.id,
                        "paste_format": paste.format,
                        "correlation_id": get_correlation_id(),
                    },
                )
                return _paste_to_dto(paste)
            except IntegrityError as exc:
                session.rollback()
                if attempt >= attempts:
                    raise self._storage_error(exc, paste_id=paste_id) from exc
                logger.warning(
                    "Paste id collision",
                    extra={
                        "event": "paste_id_collision",
                        "paste_id": paste_id,
                        "correlation_id": get_correlation_id(),
                    },
                )
            except SQLAlchemyError as exc:
                session.rollback()
                raise self._storage_error(exc, paste_id=paste_id) from exc
            finally:
                session.close()

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------
    def update_paste(
        self,
        paste_id: str,
        *,
        content: Optional[str],
        format: Optional[str] = None,
    ) -> None:
        content = self._require_content(content)
        format = FORMAT_TEXT if format is None else format

        session = self.session_factory()
        try:
            affected = PasteRepository(session=session).update(paste_id, content, format)
            if affected == 0:
                session.rollback()
                raise PasteNotFoundError("Paste not found")
            session.commit()
            logger.info(
                "Paste updated",
                extra={
                    "event": "paste_updated",
                    "paste_id": paste_id,
                    "paste_format": format,
                    "correlation_id": get_correlation_id(),
                },
            )
        except SQLAlchemyError as exc:
            session.rollback()
            raise self._storage_error(exc, paste_id=paste_id) from exc
        finally:
            session.close()

    def delete_paste(self, paste_id: str) -> None:
        session = self.session_factory()
        try:
            affected = PasteRepository(session=session).delete(paste_id)
            if affected == 0:
                session.rollback()
                raise PasteNotFoundError("Paste not found")
            session.commit()
            logger.info(
                "Paste deleted",
                extra={
                    "event": "paste_deleted",
                    "paste_id": paste_id,
                    "correlation_id": get_correlation_id(),
                },
            )
        except SQLAlchemyError as exc:
            session.rollback()
            raise self._storage_error(exc, paste_id=paste_id) from exc
        finally:
            session.close()
