"""Admin API — Role grants, user listing, activity feed, database setup."""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import (
    ADMIN_ROLE_TYPES,
    is_platform_admin,
    org_admin_org_ids,
    require_platform_admin,
    require_user,
)
from ..models import AdminRole, Organization, Team, User
from ..schemas.auth import RoleGrantRequest
from ..services.activity_service import list_activity, log_activity
from ..startup import setup_database
from ..utils.serialization import row_to_dict, user_summary

router = APIRouter(tags=["admin"])
log = logging.getLogger(__name__)


def _serialize_role(r: AdminRole) -> dict:
    data = row_to_dict(r)
    data["user"] = {"email": r.user.email, "full_name": r.user.full_name} if r.user else None
    data["organization"] = {"name": r.organization.name} if r.organization else None
    data["team"] = {"name": r.team.name} if r.team else None
    return data


# ── Roles (platform admin only) ──────────────────────────────────────


@router.get("/api/admin/roles")
def api_list_roles(user: User = Depends(require_platform_admin), db: Session = Depends(get_db)):
    roles = db.query(AdminRole).order_by(AdminRole.created_at.desc(), AdminRole.id.desc()).all()
    return {"roles": [_serialize_role(r) for r in roles], "count": len(roles)}


@router.post("/api/admin/roles", status_code=201)
def api_grant_role(
    body: RoleGrantRequest,
    user: User = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    if body.role_type not in ADMIN_ROLE_TYPES:
        raise HTTPException(400, f"role_type must be one of: {', '.join(ADMIN_ROLE_TYPES)}")
    if not db.get(User, body.user_id):
        raise HTTPException(404, "User not found")
    if body.role_type == "org_admin":
        if not body.organization_id:
            raise HTTPException(400, "org_admin requires organization_id")
        if not db.get(Organization, body.organization_id):
            raise HTTPException(404, "Organization not found")
    if body.role_type == "team_admin":
        if not body.team_id:
            raise HTTPException(400, "team_admin requires team_id")
        if not db.get(Team, body.team_id):
            raise HTTPException(404, "Team not found")

    role = AdminRole(
        user_id=body.user_id,
        role_type=body.role_type,
        organization_id=body.organization_id if body.role_type == "org_admin" else None,
        team_id=body.team_id if body.role_type == "team_admin" else None,
        is_active=True,
    )
    db.add(role)
    db.commit()
    db.refresh(role)
    log.info(f"Role {role.role_type} granted to user {role.user_id} by {user.email}")
    log_activity(
        db, user.id, "admin_role.granted", "admin_role", role.id,
        organization_id=role.organization_id, team_id=role.team_id,
        new_values={"user_id": role.user_id, "role_type": role.role_type},
    )
    return _serialize_role(role)


@router.delete("/api/admin/roles/{role_id}")
def api_revoke_role(
    role_id: int,
    user: User = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    role = db.get(AdminRole, role_id)
    if not role:
        raise HTTPException(404, "Role not found")
    role.is_active = False
    db.commit()
    log_activity(
        db, user.id, "admin_role.revoked", "admin_role", role_id,
        organization_id=role.organization_id, team_id=role.team_id,
    )
    return {"status": "deactivated", "id": role_id}


# ── Users ────────────────────────────────────────────────────────────


@router.get("/api/admin/users")
def api_list_users(user: User = Depends(require_platform_admin), db: Session = Depends(get_db)):
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    items = []
    for u in users:
        item = user_summary(u)
        item["is_active"] = u.is_active
        item["created_at"] = u.created_at.isoformat() if u.created_at else None
        items.append(item)
    return {"users": items, "count": len(items)}


# ── Activity ─────────────────────────────────────────────────────────


@router.get("/api/activity")
def api_activity(
    organization_id: int | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    if is_platform_admin(db, user):
        scope = {organization_id} if organization_id is not None else None
    else:
        org_ids = org_admin_org_ids(db, user)
        if not org_ids:
            raise HTTPException(403, "Insufficient permissions. Must be org admin or platform admin.")
        if organization_id is not None:
            if organization_id not in org_ids:
                raise HTTPException(403, "Insufficient permissions for this organization")
            org_ids = {organization_id}
        scope = org_ids
    items = list_activity(db, scope, limit)
    return {"activity": items, "count": len(items)}


# ── Database setup ───────────────────────────────────────────────────


@router.post("/api/admin/setup-database")
def api_setup_database(authorization: str | None = Body(None, embed=True)):
    if not settings.admin_setup_key or authorization != settings.admin_setup_key:
        raise HTTPException(401, "Unauthorized")
    results = setup_database()
    log.info("Database setup completed via admin endpoint")
    return {"message": "Database setup completed", "results": results}
