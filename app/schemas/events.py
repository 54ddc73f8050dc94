"""
schemas/events.py — Event, RSVP, and roster payloads.

Business Rules:
- RSVP response must be yes, no, or maybe
- Event creation takes a full start timestamp; it is split into
  event_date + start_time on the row
- guests_count is never negative

Called by: routers/events.py, routers/rosters.py
Depends on: pydantic
"""

from __future__ import annotations

from datetime import date, datetime, time

from pydantic import BaseModel, Field, field_validator

RSVP_RESPONSES = ("yes", "no", "maybe")

EVENT_UPDATE_FIELDS = (
    "name",
    "description",
    "event_type_id",
    "event_date",
    "start_time",
    "end_time",
    "arrival_time",
    "location_id",
    "status",
    "weigh_in_time",
    "check_in_time",
    "registration_deadline",
    "is_public",
    "show_results_public",
    "competition_id",
)


class EventCreate(BaseModel):
    team_id: int | None = None
    title: str | None = None
    event_type_id: int | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    description: str | None = None
    location_id: int | None = None
    all_day: bool = False
    is_mandatory: bool = False
    max_attendees: int | None = Field(default=None, ge=1)
    rsvp_deadline: datetime | None = None
    competition_id: int | None = None
    opponent_team_id: int | None = None


class EventUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    event_type_id: int | None = None
    event_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    arrival_time: time | None = None
    location_id: int | None = None
    status: str | None = None
    weigh_in_time: time | None = None
    check_in_time: time | None = None
    registration_deadline: datetime | None = None
    is_public: bool | None = None
    show_results_public: bool | None = None
    competition_id: int | None = None


class RsvpRequest(BaseModel):
    response: str | None = None
    guests_count: int = Field(default=0, ge=0)
    notes: str | None = None

    @field_validator("response")
    @classmethod
    def normalize_response(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v


# ── Rosters ──────────────────────────────────────────────────────────

ROSTER_UPDATE_FIELDS = ("name", "roster_type", "max_athletes", "max_per_weight_class")


class RosterCreate(BaseModel):
    event_id: int | None = None
    name: str | None = None
    roster_type: str = "varsity"
    max_athletes: int | None = Field(default=None, ge=1)
    max_per_weight_class: int | None = Field(default=None, ge=1)


class RosterUpdate(BaseModel):
    name: str | None = None
    roster_type: str | None = None
    max_athletes: int | None = Field(default=None, ge=1)
    max_per_weight_class: int | None = Field(default=None, ge=1)


class RosterMemberCreate(BaseModel):
    athlete_profile_id: int | None = None
    weight_class: str | None = None
    seed: int | None = None
    made_weight: bool | None = None
    actual_weight: float | None = None
    status: str = "active"


class RosterMemberUpdate(BaseModel):
    weight_class: str | None = None
    seed: int | None = None
    made_weight: bool | None = None
    actual_weight: float | None = None
    status: str | None = None
    reason: str | None = None
