from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, redirect, request, url_for

from pastebox.db import SessionLocal
from pastebox.rendering import (
    TEXT_CONTENT_TYPE,
    RenderedPaste,
    accepts_html,
    render_paste,
    render_raw,
)
from pastebox.services.paste_service import (
    PasteNotFoundError,
    PasteService,
    PasteStorageError,
)

public_bp = Blueprint("public", __name__)


def _text(body: str, status: int) -> Response:
    return Response(body, status=status, content_type=TEXT_CONTENT_TYPE)


def _send(rendered: RenderedPaste) -> Response:
    return Response(rendered.body, status=HTTPStatus.OK, content_type=rendered.content_type)


@public_bp.route("/", methods=["GET"])
def index():
    return redirect(url_for("admin.dashboard"))


@public_bp.route("/<paste_id>", methods=["GET"])
def view_paste(paste_id: str) -> Response:
    """
    Serve a paste to anonymous readers.

    Storage failures are reported without details on this path.
    """
    try:
        row = PasteService(session_factory=SessionLocal).get_public_paste(paste_id)
    except PasteNotFoundError:
        return _text("Not found", HTTPStatus.NOT_FOUND)
    except PasteStorageError:
        return _text("Server error", HTTPStatus.INTERNAL_SERVER_ERROR)

    rendered = render_paste(
        paste_id,
        row["content"],
        row["format"],
        wants_html=accepts_html(request.headers.get("Accept")),
        format_override="format" in request.args,
    )
    return _send(rendered)


@public_bp.route("/<paste_id>/raw", methods=["GET"])
def view_raw_paste(paste_id: str) -> Response:
    try:
        row = PasteService(session_factory=SessionLocal).get_public_paste(paste_id)
    except PasteNotFoundError:
        return _text("Not found", HTTPStatus.NOT_FOUND)
    except PasteStorageError:
        return _text("Server error", HTTPStatus.INTERNAL_SERVER_ERROR)

    return _send(render_raw(row["content"]))
