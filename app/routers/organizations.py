"""
routers/organizations.py — Organization CRUD, sports, and per-org credentials.

Business Rules:
- Platform admins see every organization; everyone else sees the orgs
  their active org-scoped roles point at
- Create and delete are platform-admin only; read/update also allow the
  organization's org admins
- Delete is refused while the organization still has active teams
- Credentials are write-only: responses carry has/updated_at/preview, never plaintext
- OpenAI keys must start with "sk-"

Called by: main.py (router mount)
Depends on: services/organization_service.py, services/credential_service.py
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import (
    active_roles,
    can_manage_org,
    is_platform_admin,
    require_platform_admin,
    require_user,
)
from ..models import Organization, User
from ..schemas.common import missing_fields
from ..schemas.organizations import (
    GhlCredentialsRequest,
    OpenAIKeyRequest,
    OrganizationCreate,
    OrganizationUpdate,
)
from ..schemas.responses import OrganizationListResponse
from ..services.credential_service import (
    GHL_TYPES,
    clear_org_credential,
    ghl_status,
    openai_key_status,
    set_org_credential,
)
from ..services.organization_service import (
    create_organization,
    delete_organization,
    list_organizations,
    org_sports,
    serialize_org,
    update_organization,
)

log = logging.getLogger(__name__)

router = APIRouter(tags=["organizations"])


def _get_managed_org(db: Session, user: User, org_id: int) -> Organization:
    org = db.get(Organization, org_id)
    if not org:
        raise HTTPException(404, "Organization not found")
    if not can_manage_org(db, user, org.id):
        raise HTTPException(403, "Insufficient permissions for this organization")
    return org


# ── Organizations ────────────────────────────────────────────────────


@router.get("/api/organizations", response_model=OrganizationListResponse)
def api_list_organizations(user: User = Depends(require_user), db: Session = Depends(get_db)):
    if is_platform_admin(db, user):
        return list_organizations(db, None)
    org_ids = {r.organization_id for r in active_roles(db, user) if r.organization_id}
    return list_organizations(db, org_ids)


@router.post("/api/organizations", status_code=201)
def api_create_organization(
    body: OrganizationCreate,
    user: User = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    missing = missing_fields(body, "name", "slug")
    if missing:
        raise HTTPException(400, f"Missing required fields: {', '.join(missing)}")
    result = create_organization(db, body.model_dump(), user)
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result


@router.get("/api/organizations/{org_id}")
def api_get_organization(
    org_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    org = _get_managed_org(db, user, org_id)
    return serialize_org(db, org, with_teams=True)


@router.put("/api/organizations/{org_id}")
def api_update_organization(
    org_id: int,
    body: OrganizationUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    org = _get_managed_org(db, user, org_id)
    result = update_organization(db, org, body.model_dump(exclude_unset=True), user)
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result


@router.delete("/api/organizations/{org_id}")
def api_delete_organization(
    org_id: int,
    user: User = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    org = db.get(Organization, org_id)
    if not org:
        raise HTTPException(404, "Organization not found")
    result = delete_organization(db, org, user)
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result


@router.get("/api/organizations/{org_id}/sports")
def api_organization_sports(
    org_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    if not db.get(Organization, org_id):
        raise HTTPException(404, "Organization not found")
    return {"sports": org_sports(db, org_id)}


# ── OpenAI key ───────────────────────────────────────────────────────


@router.get("/api/organizations/{org_id}/openai-key")
def api_get_openai_key(
    org_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    org = _get_managed_org(db, user, org_id)
    return openai_key_status(org)


@router.post("/api/organizations/{org_id}/openai-key")
def api_set_openai_key(
    org_id: int,
    body: OpenAIKeyRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    org = _get_managed_org(db, user, org_id)
    key = (body.api_key or "").strip()
    if not key:
        raise HTTPException(400, "API key is required")
    if not key.startswith("sk-"):
        raise HTTPException(400, "Invalid OpenAI API key format. Keys start with 'sk-'")
    set_org_credential(db, org, "openai_api_key", key)
    db.commit()
    db.refresh(org)
    return openai_key_status(org)


@router.delete("/api/organizations/{org_id}/openai-key")
def api_delete_openai_key(
    org_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    org = _get_managed_org(db, user, org_id)
    clear_org_credential(db, org, "openai_api_key")
    db.commit()
    db.refresh(org)
    return openai_key_status(org)


# ── GoHighLevel credentials ──────────────────────────────────────────


@router.get("/api/organizations/{org_id}/ghl-credentials")
def api_get_ghl_credentials(
    org_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    org = _get_managed_org(db, user, org_id)
    return ghl_status(org)


@router.post("/api/organizations/{org_id}/ghl-credentials")
def api_set_ghl_credentials(
    org_id: int,
    body: GhlCredentialsRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    org = _get_managed_org(db, user, org_id)
    provided = {k: v.strip() for k, v in body.model_dump().items() if v and v.strip()}
    if not provided:
        raise HTTPException(
            400, "At least one credential (client_id, client_secret, api_key) is required"
        )
    for short, value in provided.items():
        set_org_credential(db, org, f"ghl_{short}", value)
    db.commit()
    db.refresh(org)
    return ghl_status(org)


@router.delete("/api/organizations/{org_id}/ghl-credentials")
def api_delete_ghl_credentials(
    org_id: int,
    type: str = Query(",".join(GHL_TYPES)),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    org = _get_managed_org(db, user, org_id)
    requested = [t.strip() for t in type.split(",") if t.strip()]
    unknown = [t for t in requested if t not in GHL_TYPES]
    if unknown or not requested:
        raise HTTPException(400, f"Invalid credential type. Must be one of: {', '.join(GHL_TYPES)}")
    for short in requested:
        clear_org_credential(db, org, f"ghl_{short}")
    db.commit()
    db.refresh(org)
    return ghl_status(org)
