"""
credential_service.py — Per-organization third-party credentials.

Credentials live on the organization row in EncryptedText columns (Fernet,
key derived from SECRET_KEY via PBKDF2). Each credential has a sibling
`<column>_updated_at` timestamp.

Business Rules:
- Organization value takes priority over the platform env var fallback
- Plaintext is never returned by the API, only has/updated_at/masked preview
- OpenAI keys must start with "sk-"
- Only platform admins and the organization's org admins can read or write

Called by: routers/organizations.py, routers/imports.py
Depends on: models (Organization), utils/encrypted_type.py
"""

import logging
import os
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from ..models import Organization

log = logging.getLogger(__name__)

# credential type → (organization column, env var fallback)
CREDENTIAL_FIELDS = {
    "openai_api_key": ("openai_api_key", "OPENAI_API_KEY"),
    "ghl_client_id": ("ghl_client_id", "GHL_CLIENT_ID"),
    "ghl_client_secret": ("ghl_client_secret", "GHL_CLIENT_SECRET"),
    "ghl_api_key": ("ghl_api_key", "GHL_API_KEY"),
}

GHL_TYPES = ("client_id", "client_secret", "api_key")


def mask_value(plaintext: str | None) -> str:
    """Mask a credential value for display: show last 4 chars only."""
    if not plaintext:
        return ""
    if len(plaintext) <= 4:
        return "****"
    return "●" * min(8, len(plaintext) - 4) + plaintext[-4:]


def _column(cred_type: str) -> str:
    if cred_type not in CREDENTIAL_FIELDS:
        raise ValueError(f"Unknown credential type: {cred_type}")
    return CREDENTIAL_FIELDS[cred_type][0]


def get_org_credential(
    db: Session, organization_id: int, cred_type: str, *, env_fallback: bool = False
) -> str | None:
    """Decrypted credential for an organization; optionally fall back to the env var."""
    column = _column(cred_type)
    org = db.get(Organization, organization_id)
    value = getattr(org, column, None) if org else None
    if value:
        return value
    if env_fallback:
        return os.getenv(CREDENTIAL_FIELDS[cred_type][1]) or None
    return None


def set_org_credential(db: Session, org: Organization, cred_type: str, value: str) -> None:
    column = _column(cred_type)
    setattr(org, column, value)
    setattr(org, f"{column}_updated_at", datetime.now(timezone.utc))
    log.info(f"Credential {cred_type} set for organization {org.id}")


def clear_org_credential(db: Session, org: Organization, cred_type: str) -> None:
    column = _column(cred_type)
    setattr(org, column, None)
    setattr(org, f"{column}_updated_at", datetime.now(timezone.utc))
    log.info(f"Credential {cred_type} cleared for organization {org.id}")


def org_credential_status(org: Organization, cred_type: str) -> dict:
    column = _column(cred_type)
    value = getattr(org, column, None)
    updated = getattr(org, f"{column}_updated_at", None)
    return {
        "is_set": bool(value),
        "updated_at": updated.isoformat() if updated else None,
        "preview": mask_value(value),
    }


def openai_key_status(org: Organization) -> dict:
    status = org_credential_status(org, "openai_api_key")
    return {
        "has_key": status["is_set"],
        "updated_at": status["updated_at"],
        "preview": status["preview"],
    }


def ghl_status(org: Organization) -> dict:
    result = {}
    for short in GHL_TYPES:
        status = org_credential_status(org, f"ghl_{short}")
        result[f"has_{short}"] = status["is_set"]
        result[f"{short}_updated_at"] = status["updated_at"]
    return result
