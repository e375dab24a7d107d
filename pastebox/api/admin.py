from __future__ import annotations

from http import HTTPStatus
from pathlib import Path
from typing import Any

from flask import Blueprint, current_app, request, send_from_directory
from pydantic import ValidationError

from pastebox.api.schemas import (
    PasteCreatedResponse,
    PasteCreateRequest,
    PasteUpdateRequest,
    SuccessResponse,
)
from pastebox.auth import require_admin
from pastebox.db import SessionLocal
from pastebox.services.paste_service import (
    InvalidPasteParameters,
    PasteNotFoundError,
    PasteService,
    PasteStorageError,
)

PACKAGE_DIR = Path(__file__).resolve().parent.parent
STATIC_DIR = PACKAGE_DIR / "static"
TEMPLATES_DIR = PACKAGE_DIR / "templates"

api_bp = Blueprint("api", __name__, url_prefix="/api")
admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _paste_service() -> PasteService:
    return PasteService(
        session_factory=SessionLocal,
        id_attempts=current_app.config.get("PASTE_ID_ATTEMPTS", 3),
    )


def _request_payload() -> dict[str, Any]:
    """Accept JSON bodies as well as plain HTML form posts."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _public_url(paste_id: str) -> str:
    return f"{request.scheme}://{request.host}/{paste_id}"


# ---------------------------------------------------------------------------
# Admin API
# ---------------------------------------------------------------------------


@api_bp.route("/pastes", methods=["GET"])
@require_admin
def list_pastes() -> tuple[Any, int]:
    try:
        pastes = _paste_service().list_pastes()
    except PasteStorageError as exc:
        return {"error": str(exc)}, HTTPStatus.INTERNAL_SERVER_ERROR
    return pastes, HTTPStatus.OK


@api_bp.route("/pastes/<paste_id>", methods=["GET"])
@require_admin
def get_paste(paste_id: str) -> tuple[dict, int]:
    try:
        dto = _paste_service().get_paste(paste_id)
    except PasteNotFoundError as exc:
        return {"error": str(exc)}, HTTPStatus.NOT_FOUND
    except PasteStorageError as exc:
        return {"error": str(exc)}, HTTPStatus.INTERNAL_SERVER_ERROR
    return dto, HTTPStatus.OK


@api_bp.route("/pastes", methods=["POST"])
@require_admin
def create_paste() -> tuple[dict, int]:
    """
    Create a new paste and return its id with the public URL.

    Validation is handled by Pydantic; the non-empty rule by the service layer.
    """
    try:
        payload = PasteCreateRequest.model_validate(_request_payload())
    except ValidationError as exc:
        return {"error": "Invalid request body", "details": str(exc)}, HTTPStatus.BAD_REQUEST

    try:
        dto = _paste_service().create_paste(content=payload.content, format=payload.format)
    except InvalidPasteParameters as exc:
        return {"error": str(exc)}, HTTPStatus.BAD_REQUEST
    except PasteStorageError as exc:
        return {"error": str(exc)}, HTTPStatus.INTERNAL_SERVER_ERROR

    body = PasteCreatedResponse(id=dto["id"], url=_public_url(dto["id"]))
    return body.model_dump(), HTTPStatus.OK


@api_bp.route("/pastes/<paste_id>", methods=["PUT"])
@require_admin
def update_paste(paste_id: str) -> tuple[dict, int]:
    try:
        payload = PasteUpdateRequest.model_validate(_request_payload())
    except ValidationError as exc:
        return {"error": "Invalid request body", "details": str(exc)}, HTTPStatus.BAD_REQUEST

    try:
        _paste_service().update_paste(
            paste_id,
            content=payload.content,
            format=payload.format,
        )
    except InvalidPasteParameters as exc:
        return {"error": str(exc)}, HTTPStatus.BAD_REQUEST
    except PasteNotFoundError as exc:
        return {"error": str(exc)}, HTTPStatus.NOT_FOUND
    except PasteStorageError as exc:
        return {"error": str(exc)}, HTTPStatus.INTERNAL_SERVER_ERROR

    return SuccessResponse().model_dump(), HTTPStatus.OK


@api_bp.route("/pastes/<paste_id>", methods=["DELETE"])
@require_admin
def delete_paste(paste_id: str) -> tuple[dict, int]:
    try:
        _paste_service().delete_paste(paste_id)
    except PasteNotFoundError as exc:
        return {"error": str(exc)}, HTTPStatus.NOT_FOUND
    except PasteStorageError as exc:
        return {"error": str(exc)}, HTTPStatus.INTERNAL_SERVER_ERROR

    return SuccessResponse().model_dump(), HTTPStatus.OK


# ---------------------------------------------------------------------------
# Admin dashboard
# ---------------------------------------------------------------------------


@admin_bp.route("", methods=["GET"])
@require_admin
def dashboard():
    return send_from_directory(TEMPLATES_DIR, "admin.html")


@admin_bp.route("/static/<path:filename>", methods=["GET"])
@require_admin
def dashboard_static(filename: str):
    return send_from_directory(STATIC_DIR, filename)
