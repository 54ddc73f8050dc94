"""
schemas/imports.py — AI import callback payload and result shapes.

The processing webhook posts camelCase keys; they are kept as-is on the
wire. Items in `data` stay loosely typed because the extraction service
returns varying field names (normalized in services/competition_import.py).

Called by: routers/imports.py
Depends on: pydantic
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

ENTITY_TYPES = ("athletes", "locations", "competitions", "weight_classes")


class ImportCallbackRequest(BaseModel):
    organizationId: int | None = None
    entityType: str | None = None
    data: Any = None
    filePath: str | None = None
    jobId: int | None = None


class TextImportResult(BaseModel):
    message: str
    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)
    chunksProcessed: int = 0
    totalChunks: int = 0


class DirectImportResult(BaseModel):
    message: str
    total: int = 0
    inserted: int = 0
    skipped: int = 0
    locationsCreated: int = 0
    errors: list[str] = Field(default_factory=list)


class CallbackImportResult(BaseModel):
    message: str
    insertedCount: int = 0
    eventsCreated: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)
