"""Organization service — tenant CRUD with sport links and audit trail.

Returns plain dicts; failures come back as {"error": msg, "status": code}
for the router to raise.
"""

import logging

from sqlalchemy.orm import Session

from ..models import Organization, OrganizationSport, Sport, Team, User
from ..schemas.organizations import ORG_UPDATE_FIELDS
from ..utils.serialization import row_to_dict
from .activity_service import log_activity

log = logging.getLogger(__name__)


def org_sports(db: Session, org_id: int) -> list[dict]:
    rows = (
        db.query(Sport)
        .join(OrganizationSport, OrganizationSport.sport_id == Sport.id)
        .filter(OrganizationSport.organization_id == org_id)
        .order_by(Sport.name)
        .all()
    )
    return [{"id": s.id, "name": s.name, "slug": s.slug, "icon_url": s.icon_url} for s in rows]


def _set_sports(db: Session, org: Organization, sport_ids: list[int]) -> None:
    db.query(OrganizationSport).filter(OrganizationSport.organization_id == org.id).delete()
    valid = {s.id for s in db.query(Sport.id).filter(Sport.id.in_(sport_ids)).all()} if sport_ids else set()
    for sid in dict.fromkeys(sport_ids):
        if sid in valid:
            db.add(OrganizationSport(organization_id=org.id, sport_id=sid))


def serialize_org(db: Session, org: Organization, *, with_teams: bool = False) -> dict:
    data = row_to_dict(org)
    data["sports"] = org_sports(db, org.id)
    teams = db.query(Team).filter(Team.organization_id == org.id).order_by(Team.name).all()
    data["team_count"] = len(teams)
    if with_teams:
        data["teams"] = [
            {
                "id": t.id,
                "name": t.name,
                "slug": t.slug,
                "sport_id": t.sport_id,
                "is_active": t.is_active,
            }
            for t in teams
        ]
    return data


def list_organizations(db: Session, org_ids: set[int] | None) -> dict:
    """org_ids=None lists every organization (platform admin)."""
    q = db.query(Organization)
    if org_ids is not None:
        if not org_ids:
            return {"organizations": [], "count": 0}
        q = q.filter(Organization.id.in_(org_ids))
    orgs = q.order_by(Organization.created_at.desc(), Organization.id.desc()).all()
    items = [serialize_org(db, o) for o in orgs]
    return {"organizations": items, "count": len(items)}


def create_organization(db: Session, data: dict, user: User) -> dict:
    slug = data["slug"]
    if db.query(Organization.id).filter(Organization.slug == slug).first():
        return {"error": "An organization with this slug already exists", "status": 409}

    sport_ids = data.pop("sport_ids", None) or []
    org = Organization(**{k: v for k, v in data.items() if k in ORG_UPDATE_FIELDS})
    db.add(org)
    db.flush()
    if sport_ids:
        _set_sports(db, org, sport_ids)
    db.commit()
    db.refresh(org)
    log.info(f"Organization {org.slug} created by {user.email}")

    log_activity(
        db, user.id, "organization.created", "organization", org.id,
        organization_id=org.id, new_values={"name": org.name, "slug": org.slug},
    )
    return serialize_org(db, org)


def update_organization(db: Session, org: Organization, updates: dict, user: User) -> dict:
    sport_ids = updates.pop("sport_ids", None)
    fields = {k: v for k, v in updates.items() if k in ORG_UPDATE_FIELDS}
    if not fields and sport_ids is None:
        return {"error": "No valid fields to update", "status": 400}

    if "slug" in fields:
        if not fields["slug"]:
            return {"error": "Slug cannot be empty", "status": 400}
        clash = (
            db.query(Organization.id)
            .filter(Organization.slug == fields["slug"], Organization.id != org.id)
            .first()
        )
        if clash:
            return {"error": "An organization with this slug already exists", "status": 409}
    if "name" in fields and not fields["name"]:
        return {"error": "Name cannot be empty", "status": 400}

    old_values = {k: getattr(org, k) for k in fields}
    for k, v in fields.items():
        setattr(org, k, v)
    if sport_ids is not None:
        _set_sports(db, org, sport_ids)
    db.commit()
    db.refresh(org)

    new_values = dict(fields)
    if sport_ids is not None:
        new_values["sport_ids"] = sport_ids
    log_activity(
        db, user.id, "organization.updated", "organization", org.id,
        organization_id=org.id, old_values=old_values, new_values=new_values,
    )
    return serialize_org(db, org, with_teams=True)


def delete_organization(db: Session, org: Organization, user: User) -> dict:
    active_teams = (
        db.query(Team.id)
        .filter(Team.organization_id == org.id, Team.is_active.is_(True))
        .count()
    )
    if active_teams:
        return {
            "error": f"Cannot delete organization with {active_teams} active team(s). Deactivate teams first.",
            "status": 400,
        }
    snapshot = {"name": org.name, "slug": org.slug}
    org_id = org.id
    # Inactive teams go with the organization
    db.query(Team).filter(Team.organization_id == org_id).delete()
    db.delete(org)
    db.commit()
    log.info(f"Organization {snapshot['slug']} deleted by {user.email}")

    log_activity(
        db, user.id, "organization.deleted", "organization", org_id, old_values=snapshot,
    )
    return {"status": "deleted", "id": org_id}
