"""
schemas/auth.py — Login, signup, and admin role grant payloads.

Business Rules:
- Emails are trimmed and lowercased
- Required fields are checked by the router so clients get a 400 with
  the list of missing names rather than a 422

Called by: routers/auth.py, routers/admin.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v


class SignupRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    full_name: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return v.strip() if v else v


class RoleGrantRequest(BaseModel):
    user_id: int
    role_type: str
    organization_id: int | None = None
    team_id: int | None = None
