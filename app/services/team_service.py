"""
team_service.py — Team visibility, creation, and membership rules.

Business Rules:
- Only active teams are listed
- Platform admin sees all teams; org admin sees their orgs' teams; team admin
  sees their own teams; everyone else sees none
- An org admin filtering by someone else's organization gets an empty list
- Team slug is unique within its organization
- The creator of a team is granted team_admin on it
- Adding an existing inactive member reactivates the membership
- Delete is a soft delete (is_active=False)

Called by: routers/teams.py
Depends on: models, dependencies (role lookups), services/activity_service.py
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from ..dependencies import is_platform_admin, org_admin_org_ids, team_admin_team_ids
from ..models import AdminRole, Organization, Sport, Team, TeamMember, User
from ..schemas.teams import TEAM_UPDATE_FIELDS
from ..utils.serialization import row_to_dict
from .activity_service import log_activity

log = logging.getLogger(__name__)


def serialize_member(m: TeamMember) -> dict:
    data = row_to_dict(m)
    if m.user:
        data["user"] = {
            "id": m.user.id,
            "email": m.user.email,
            "full_name": m.user.full_name,
            "avatar_url": m.user.avatar_url,
        }
    return data


def list_visible_teams(db: Session, user: User, organization_id: int | None = None) -> list[Team]:
    q = db.query(Team).filter(Team.is_active.is_(True))
    if organization_id is not None:
        q = q.filter(Team.organization_id == organization_id)

    if not is_platform_admin(db, user):
        org_ids = org_admin_org_ids(db, user)
        team_ids = team_admin_team_ids(db, user)
        if org_ids:
            if organization_id is not None and organization_id not in org_ids:
                return []
            q = q.filter(Team.organization_id.in_(org_ids))
        elif team_ids:
            q = q.filter(Team.id.in_(team_ids))
        else:
            return []
    return q.order_by(Team.name).all()


def create_team(db: Session, data: dict, user: User) -> dict:
    org_id = data["organization_id"]
    if not db.get(Organization, org_id):
        return {"error": "Organization not found", "status": 404}
    if not db.get(Sport, data["sport_id"]):
        return {"error": "Sport not found", "status": 404}
    clash = (
        db.query(Team.id)
        .filter(Team.organization_id == org_id, Team.slug == data["slug"])
        .first()
    )
    if clash:
        return {"error": "A team with this slug already exists in this organization", "status": 409}

    team = Team(**data, created_by=user.id, is_active=True)
    db.add(team)
    db.flush()
    db.add(AdminRole(user_id=user.id, role_type="team_admin", team_id=team.id, is_active=True))
    db.commit()
    db.refresh(team)
    log.info(f"Team {team.slug} created in org {org_id} by {user.email}")

    log_activity(
        db, user.id, "team.created", "team", team.id,
        organization_id=org_id, team_id=team.id,
        new_values={"name": team.name, "slug": team.slug},
    )
    return row_to_dict(team)


def update_team(db: Session, team: Team, updates: dict, user: User) -> dict:
    fields = {k: v for k, v in updates.items() if k in TEAM_UPDATE_FIELDS}
    if not fields:
        return {"error": "No valid fields to update", "status": 400}
    old_values = {k: getattr(team, k) for k in fields}
    for k, v in fields.items():
        setattr(team, k, v)
    db.commit()
    db.refresh(team)
    log_activity(
        db, user.id, "team.updated", "team", team.id,
        organization_id=team.organization_id, team_id=team.id,
        old_values=old_values, new_values=fields,
    )
    return row_to_dict(team)


def deactivate_team(db: Session, team: Team, user: User) -> dict:
    team.is_active = False
    db.commit()
    log_activity(
        db, user.id, "team.deleted", "team", team.id,
        organization_id=team.organization_id, team_id=team.id,
    )
    return {"status": "deleted", "id": team.id}


def list_members(db: Session, team_id: int) -> list[dict]:
    members = (
        db.query(TeamMember)
        .filter(TeamMember.team_id == team_id)
        .order_by(TeamMember.joined_at)
        .all()
    )
    return [serialize_member(m) for m in members]


def add_member(db: Session, team: Team, data: dict, user: User) -> dict:
    target = db.get(User, data["user_id"])
    if not target:
        return {"error": "User not found", "status": 404}

    existing = (
        db.query(TeamMember)
        .filter(TeamMember.team_id == team.id, TeamMember.user_id == target.id)
        .first()
    )
    if existing and existing.status == "active":
        return {"error": "User is already a member of this team", "status": 409}

    if existing:
        existing.status = "active"
        existing.role = data["role"]
        existing.jersey_number = data.get("jersey_number")
        existing.position = data.get("position")
        existing.joined_at = datetime.now(timezone.utc)
        member = existing
    else:
        member = TeamMember(
            team_id=team.id,
            user_id=target.id,
            role=data["role"],
            jersey_number=data.get("jersey_number"),
            position=data.get("position"),
            status="active",
        )
        db.add(member)
    db.commit()
    db.refresh(member)

    log_activity(
        db, user.id, "team.member_added", "team_member", member.id,
        organization_id=team.organization_id, team_id=team.id,
        new_values={"team_id": team.id, "user_id": target.id, "role": data["role"]},
    )
    return serialize_member(member)
