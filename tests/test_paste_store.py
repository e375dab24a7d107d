from __future__ import annotations

import time
from typing import Generator, Iterator

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from pastebox.db import Base
from pastebox.domain.models import Paste
from pastebox.repositories.paste_repository import PasteRepository
from pastebox.services.paste_service import (
    InvalidPasteParameters,
    PasteNotFoundError,
    PasteService,
    PasteStorageError,
)


# ---------------------------------------------------------------------------
# Test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="function")
def engine() -> Generator:
    """
    Create a fresh in-memory SQLite engine for each test function.
    """

    engine = create_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def session(engine) -> Generator[Session, None, None]:
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    with SessionLocal() as session:
        yield session
        session.rollback()


@pytest.fixture
def paste_repo(session: Session) -> PasteRepository:
    return PasteRepository(session=session)


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def paste_service(session_factory) -> PasteService:
    return PasteService(session_factory=session_factory)


def _ids(*values: str):
    it: Iterator[str] = iter(values)
    return lambda: next(it)


def _row_count(session: Session) -> int:
    return session.execute(select(func.count()).select_from(Paste)).scalar_one()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


def test_insert_then_get_full_round_trip(paste_repo: PasteRepository) -> None:
    paste_repo.insert("abcdefghij", "hello", "markdown")

    paste = paste_repo.get_full("abcdefghij")
    assert paste is not None
    assert paste.content == "hello"
    assert paste.format == "markdown"
    assert paste.created_at == paste.updated_at


def test_insert_duplicate_id_is_rejected(session: Session, paste_repo: PasteRepository) -> None:
    paste_repo.insert("abcdefghij", "first", "text")
    session.commit()
    session.expunge_all()

    with pytest.raises(IntegrityError):
        paste_repo.insert("abcdefghij", "second", "text")


def test_update_replaces_content_and_advances_updated_at(
    session: Session,
    paste_repo: PasteRepository,
) -> None:
    paste_repo.insert("abcdefghij", "v1", "text")
    session.commit()
    before = paste_repo.get_full("abcdefghij")
    created_at, updated_at = before.created_at, before.updated_at

    time.sleep(0.01)
    assert paste_repo.update("abcdefghij", "v2", "markdown") == 1
    session.commit()
    session.expire_all()

    after = paste_repo.get_full("abcdefghij")
    assert after.content == "v2"
    assert after.format == "markdown"
    assert after.created_at == created_at
    assert after.updated_at > updated_at


def test_update_and_delete_missing_paste_affect_no_rows(
    session: Session,
    paste_repo: PasteRepository,
) -> None:
    paste_repo.insert("abcdefghij", "keep me", "text")

    assert paste_repo.update("missing000", "x", "text") == 0
    assert paste_repo.delete("missing000") == 0
    assert _row_count(session) == 1


def test_delete_removes_row(paste_repo: PasteRepository) -> None:
    paste_repo.insert("abcdefghij", "bye", "text")

    assert paste_repo.delete("abcdefghij") == 1
    assert paste_repo.get_full("abcdefghij") is None


def test_get_public_projects_content_and_format(paste_repo: PasteRepository) -> None:
    paste_repo.insert("abcdefghij", "# hi", "markdown")

    assert paste_repo.get_public("abcdefghij") == {"content": "# hi", "format": "markdown"}
    assert paste_repo.get_public("missing000") is None


def test_unknown_format_is_stored_verbatim(paste_repo: PasteRepository) -> None:
    paste_repo.insert("abcdefghij", "x = 1", "python")

    assert paste_repo.get_public("abcdefghij")["format"] == "python"


def test_list_summaries_sorted_by_updated_at_desc(
    session: Session,
    paste_repo: PasteRepository,
) -> None:
    for paste_id in ("aaaaaaaaaa", "bbbbbbbbbb", "cccccccccc"):
        paste_repo.insert(paste_id, paste_id, "text")
        session.commit()
        time.sleep(0.002)
    paste_repo.update("aaaaaaaaaa", "touched", "text")
    session.commit()

    rows = paste_repo.list_summaries()

    assert [r["id"] for r in rows] == ["aaaaaaaaaa", "cccccccccc", "bbbbbbbbbb"]
    assert all("content" not in r for r in rows)
    stamps = [r["updated_at"] for r in rows]
    assert stamps == sorted(stamps, reverse=True)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("content", [None, ""])
def test_create_without_content_never_reaches_store(
    paste_service: PasteService,
    session_factory,
    content,
) -> None:
    with pytest.raises(InvalidPasteParameters):
        paste_service.create_paste(content=content, format="text")

    with session_factory() as s:
        assert _row_count(s) == 0


def test_create_defaults_format_to_text(paste_service: PasteService) -> None:
    dto = paste_service.create_paste(content="hello")

    assert len(dto["id"]) == 10
    assert dto["format"] == "text"
    assert dto["created_at"] == dto["updated_at"]


def test_create_retries_after_id_collision(session_factory) -> None:
    service = PasteService(
        session_factory=session_factory,
        id_factory=_ids("dupdupdup1", "dupdupdup1", "freshid002"),
    )
    service.create_paste(content="first")

    second = service.create_paste(content="second")

    assert second["id"] == "freshid002"
    assert service.get_paste("dupdupdup1")["content"] == "first"


def test_create_gives_up_after_repeated_collisions(session_factory) -> None:
    service = PasteService(
        session_factory=session_factory,
        id_factory=_ids("dupdupdup1", "dupdupdup1", "dupdupdup1"),
        id_attempts=2,
    )
    service.create_paste(content="first")

    with pytest.raises(PasteStorageError):
        service.create_paste(content="second")


def test_update_and_delete_unknown_paste_raise_not_found(paste_service: PasteService) -> None:
    with pytest.raises(PasteNotFoundError):
        paste_service.update_paste("missing000", content="x", format="text")
    with pytest.raises(PasteNotFoundError):
        paste_service.delete_paste("missing000")
    with pytest.raises(PasteNotFoundError):
        paste_service.get_paste("missing000")


def test_update_requires_content(paste_service: PasteService) -> None:
    dto = paste_service.create_paste(content="hello")

    with pytest.raises(InvalidPasteParameters):
        paste_service.update_paste(dto["id"], content="", format="text")
    assert paste_service.get_paste(dto["id"])["content"] == "hello"


def test_missing_table_surfaces_as_storage_error() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:")
    service = PasteService(session_factory=sessionmaker(bind=engine))
    try:
        with pytest.raises(PasteStorageError, match="no such table"):
            service.list_pastes()
    finally:
        engine.dispose()


@pytest.mark.parametrize("stored_format", ["", "python"])
def test_explicit_format_is_stored_verbatim(paste_service: PasteService, stored_format) -> None:
    dto = paste_service.create_paste(content="x", format=stored_format)
    assert paste_service.get_paste(dto["id"])["format"] == stored_format

    paste_service.update_paste(dto["id"], content="y", format=stored_format)
    assert paste_service.get_paste(dto["id"])["format"] == stored_format
