"""
schemas/competitions.py — Competition, location, and weight class payloads.

Called by: routers/competitions.py, routers/locations.py, routers/weight_classes.py
Depends on: pydantic
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

COMPETITION_FIELDS = (
    "name",
    "description",
    "competition_type",
    "default_location_id",
    "is_recurring",
    "recurrence_rule",
    "start_date",
    "end_date",
    "registration_url",
    "contact_first_name",
    "contact_last_name",
    "contact_phone",
    "contact_email",
    "notes",
)

LOCATION_FIELDS = (
    "name",
    "address",
    "city",
    "state",
    "zip",
    "country",
    "venue_type",
    "capacity",
    "facilities",
    "phone",
    "website_url",
    "latitude",
    "longitude",
    "notes",
    "organization_id",
)

WEIGHT_CLASS_FIELDS = (
    "name",
    "weight",
    "age_group",
    "state",
    "city",
    "expiration_date",
    "notes",
    "is_active",
    "organization_id",
)


class CompetitionCreate(BaseModel):
    organization_id: int | None = None
    sport_id: int | None = None
    name: str | None = None
    description: str | None = None
    competition_type: str = "tournament"
    default_location_id: int | None = None
    is_recurring: bool = False
    recurrence_rule: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    registration_url: str | None = None
    contact_first_name: str | None = None
    contact_last_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    notes: str | None = None


class CompetitionUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    competition_type: str | None = None
    default_location_id: int | None = None
    is_recurring: bool | None = None
    recurrence_rule: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    registration_url: str | None = None
    contact_first_name: str | None = None
    contact_last_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    notes: str | None = None


class LocationCreate(BaseModel):
    name: str | None = None
    organization_id: int | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str = "USA"
    venue_type: str | None = None
    capacity: int | None = Field(default=None, ge=0)
    facilities: str | None = None
    phone: str | None = None
    website_url: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    notes: str | None = None


class LocationUpdate(BaseModel):
    name: str | None = None
    organization_id: int | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None
    venue_type: str | None = None
    capacity: int | None = Field(default=None, ge=0)
    facilities: str | None = None
    phone: str | None = None
    website_url: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    notes: str | None = None


class WeightClassCreate(BaseModel):
    sport_id: int | None = None
    name: str | None = None
    weight: float | None = Field(default=None, gt=0)
    organization_id: int | None = None
    age_group: str | None = None
    state: str | None = None
    city: str | None = None
    expiration_date: date | None = None
    notes: str | None = None
    is_active: bool = True


class WeightClassUpdate(BaseModel):
    name: str | None = None
    weight: float | None = Field(default=None, gt=0)
    organization_id: int | None = None
    age_group: str | None = None
    state: str | None = None
    city: str | None = None
    expiration_date: date | None = None
    notes: str | None = None
    is_active: bool | None = None


class WeightClassCopy(BaseModel):
    name: str | None = None
    expiration_date: date | None = None
    age_group: str | None = None
    state: str | None = None
    city: str | None = None
