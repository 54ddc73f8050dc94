"""
schemas/organizations.py — Organization and credential payloads.

Business Rules:
- Slugs are lowercased and trimmed
- sport_ids on update replaces the organization's full sport set
- OpenAI keys must start with "sk-" (checked by the router for a 400)

Called by: routers/organizations.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator

ORG_UPDATE_FIELDS = (
    "name",
    "slug",
    "description",
    "address",
    "city",
    "state",
    "zip",
    "phone_number",
    "email",
    "website_url",
    "logo_url",
)


class OrganizationCreate(BaseModel):
    name: str | None = None
    slug: str | None = None
    description: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    phone_number: str | None = None
    email: str | None = None
    website_url: str | None = None
    logo_url: str | None = None
    sport_ids: list[int] | None = None

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v


class OrganizationUpdate(OrganizationCreate):
    pass


class OpenAIKeyRequest(BaseModel):
    api_key: str | None = None


class GhlCredentialsRequest(BaseModel):
    client_id: str | None = None
    client_secret: str | None = None
    api_key: str | None = None
