"""
schemas/teams.py — Team, membership, and athlete payloads.

Called by: routers/teams.py, routers/athletes.py
Depends on: pydantic
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, field_validator

TEAM_UPDATE_FIELDS = (
    "name",
    "description",
    "logo_url",
    "banner_url",
    "primary_color",
    "secondary_color",
    "address",
    "city",
    "state",
    "zip",
    "phone_number",
    "email",
    "website_url",
    "is_active",
)

ATHLETE_PROFILE_FIELDS = (
    "team_id",
    "current_weight_class",
    "preferred_weight_class",
    "wrestling_style",
    "grade_level",
    "years_experience",
    "medical_clearance_date",
    "medical_clearance_expires",
    "notes",
    "is_active",
)

ATHLETE_USER_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "date_of_birth",
    "address",
    "city",
    "state",
    "zip",
)


class TeamCreate(BaseModel):
    name: str | None = None
    slug: str | None = None
    organization_id: int | None = None
    sport_id: int | None = None
    team_type: str = "team"
    description: str | None = None
    logo_url: str | None = None
    banner_url: str | None = None
    primary_color: str = "#3B82F6"
    secondary_color: str = "#1E40AF"
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    phone_number: str | None = None
    email: str | None = None
    website_url: str | None = None

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v


class TeamUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    logo_url: str | None = None
    banner_url: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    phone_number: str | None = None
    email: str | None = None
    website_url: str | None = None
    is_active: bool | None = None


class TeamMemberCreate(BaseModel):
    user_id: int | None = None
    role: str | None = None
    jersey_number: str | None = None
    position: str | None = None


class AthleteCreate(BaseModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    team_id: int | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    current_weight_class: str | None = None
    preferred_weight_class: str | None = None
    wrestling_style: str | None = None
    grade_level: str | None = None
    years_experience: int | None = None
    medical_clearance_date: date | None = None
    medical_clearance_expires: date | None = None
    notes: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v


class AthleteUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    team_id: int | None = None
    current_weight_class: str | None = None
    preferred_weight_class: str | None = None
    wrestling_style: str | None = None
    grade_level: str | None = None
    years_experience: int | None = None
    medical_clearance_date: date | None = None
    medical_clearance_expires: date | None = None
    notes: str | None = None
    is_active: bool | None = None
