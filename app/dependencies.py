"""
dependencies.py — Shared FastAPI Dependencies

Reusable dependency functions for authentication, authorization,
and the role lookups every router needs. All routers import from here
instead of defining their own auth logic.

Business Rules:
- get_user returns None if the bearer token is missing/invalid (non-throwing)
- require_user raises 401 if not authenticated, 403 if the account is deactivated
- Only active admin_roles rows grant anything
- platform_admin and super_admin are both "platform admin"
- org_admin manages every team in its organization
- team_admin manages only its own team
- require_import_admin allows platform admins and any org admin
- An event without a team is managed by its organization's admins

Called by: all routers
Depends on: models, database, services/auth_service.py
"""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .database import get_db
from .models import AdminRole, Event, Team, TeamMember, User
from .services.auth_service import decode_token, extract_bearer_token

log = logging.getLogger(__name__)

PLATFORM_ROLES = ("platform_admin", "super_admin")
ADMIN_ROLE_TYPES = ("platform_admin", "super_admin", "org_admin", "team_admin")


# ── Authentication ────────────────────────────────────────────────────


def get_user(request: Request, db: Session) -> User | None:
    """Return the user named by the bearer token, or None."""
    token = extract_bearer_token(request.headers.get("authorization"))
    if not token:
        return None
    payload = decode_token(token)
    if not payload or "user_id" not in payload:
        return None
    return db.get(User, payload["user_id"])


def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Dependency: raises 401 if no authenticated user, 403 if deactivated."""
    user = get_user(request, db)
    if not user:
        raise HTTPException(401, "Authentication required")
    if not user.is_active:
        raise HTTPException(403, "Account deactivated, contact an administrator")
    return user


def require_platform_admin(
    user: User = Depends(require_user), db: Session = Depends(get_db)
) -> User:
    """Dependency: raises 403 unless the user holds an active platform role."""
    if not is_platform_admin(db, user):
        raise HTTPException(403, "Insufficient permissions. Platform admin required.")
    return user


def require_import_admin(
    user: User = Depends(require_user), db: Session = Depends(get_db)
) -> User:
    """Dependency: platform admins or any organization admin."""
    if not is_platform_admin(db, user) and not org_admin_org_ids(db, user):
        raise HTTPException(
            403, "Insufficient permissions. Must be org admin or platform admin."
        )
    return user


# ── Role Lookups ──────────────────────────────────────────────────────


def active_roles(db: Session, user: User) -> list[AdminRole]:
    return (
        db.query(AdminRole)
        .filter(AdminRole.user_id == user.id, AdminRole.is_active.is_(True))
        .all()
    )


def is_platform_admin(db: Session, user: User) -> bool:
    return (
        db.query(AdminRole.id)
        .filter(
            AdminRole.user_id == user.id,
            AdminRole.is_active.is_(True),
            AdminRole.role_type.in_(PLATFORM_ROLES),
        )
        .first()
        is not None
    )


def is_any_admin(db: Session, user: User) -> bool:
    return any(r.role_type in ADMIN_ROLE_TYPES for r in active_roles(db, user))


def org_admin_org_ids(db: Session, user: User) -> set[int]:
    return {
        r.organization_id
        for r in active_roles(db, user)
        if r.role_type == "org_admin" and r.organization_id is not None
    }


def team_admin_team_ids(db: Session, user: User) -> set[int]:
    return {
        r.team_id
        for r in active_roles(db, user)
        if r.role_type == "team_admin" and r.team_id is not None
    }


def member_team_ids(db: Session, user: User) -> set[int]:
    rows = (
        db.query(TeamMember.team_id)
        .filter(TeamMember.user_id == user.id, TeamMember.status == "active")
        .all()
    )
    return {r[0] for r in rows}


def can_manage_org(db: Session, user: User, organization_id: int | None) -> bool:
    """Platform admin, or org admin of this organization."""
    if is_platform_admin(db, user):
        return True
    return organization_id is not None and organization_id in org_admin_org_ids(db, user)


def can_manage_team(db: Session, user: User, team: Team | None) -> bool:
    """Platform admin, org admin of the team's organization, or team admin of the team."""
    if team is None:
        return False
    if can_manage_org(db, user, team.organization_id):
        return True
    return team.id in team_admin_team_ids(db, user)


def can_manage_event(db: Session, user: User, event: Event) -> bool:
    """Manager of the event's team, or of its organization when the event has no team."""
    if event.team_id is None:
        return can_manage_org(db, user, event.organization_id)
    return can_manage_team(db, user, event.team)


def is_active_team_member(db: Session, user: User, team_id: int | None) -> bool:
    if team_id is None:
        return False
    return (
        db.query(TeamMember.id)
        .filter(
            TeamMember.user_id == user.id,
            TeamMember.team_id == team_id,
            TeamMember.status == "active",
        )
        .first()
        is not None
    )


def manageable_team_ids(db: Session, user: User) -> set[int] | None:
    """Team ids the user administers. None means every team (platform admin)."""
    if is_platform_admin(db, user):
        return None
    ids = set(team_admin_team_ids(db, user))
    org_ids = org_admin_org_ids(db, user)
    if org_ids:
        rows = db.query(Team.id).filter(Team.organization_id.in_(org_ids)).all()
        ids.update(r[0] for r in rows)
    return ids
