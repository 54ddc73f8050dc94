"""
schemas/responses.py — Shared response models for OpenAPI documentation

Provides the small wrappers list endpoints return. Used as response_model=
on router decorators where the shape is stable.

Called by: routers/*.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class OkResponse(BaseModel):
    ok: bool = True


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = ""


class OrganizationListResponse(BaseModel, extra="allow"):
    organizations: list[dict] = Field(default_factory=list)
    count: int = 0


class TeamListResponse(BaseModel, extra="allow"):
    teams: list[dict] = Field(default_factory=list)
    count: int = 0


class EventListResponse(BaseModel, extra="allow"):
    events: list[dict] = Field(default_factory=list)
    count: int = 0


class RsvpSummaryResponse(BaseModel, extra="allow"):
    rsvps: list[dict] = Field(default_factory=list)
    counts: dict[str, int] = Field(default_factory=dict)
    total: int = 0
