from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PasteCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: Optional[str] = Field(default=None, description="Paste content")
    format: Optional[str] = Field(
        default=None,
        description="Rendering tag; 'markdown' or 'text' (default)",
    )


class PasteUpdateRequest(PasteCreateRequest):
    pass


class PasteCreatedResponse(BaseModel):
    id: str
    url: str


class SuccessResponse(BaseModel):
    success: bool = True
