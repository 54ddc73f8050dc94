"""
event_service.py — Event scheduling and RSVP rules.

Business Rules:
- Visible events: platform admin sees all; everyone else sees events of
  teams they administer (directly or through their org) plus teams they
  are an active member of. Org admins also see their organization's
  events that have no team
- A create request carries one start timestamp; it is stored as
  event_date + start_time. end_time keeps only its clock time
- The event's organization is taken from its team
- RSVP "yes" is refused once yes-count reaches max_attendees; the caller's
  own existing "yes" does not count against them
- One RSVP per (event, user); re-submitting updates it

Called by: routers/events.py
Depends on: models, dependencies (role lookups), services/activity_service.py
"""

import logging

from sqlalchemy import and_, false, func, or_
from sqlalchemy.orm import Session

from ..dependencies import manageable_team_ids, member_team_ids, org_admin_org_ids
from ..models import Event, EventRsvp, Team, User
from ..schemas.events import EVENT_UPDATE_FIELDS, RSVP_RESPONSES
from ..utils.serialization import row_to_dict
from .activity_service import log_activity

log = logging.getLogger(__name__)


def serialize_event(e: Event) -> dict:
    data = row_to_dict(e)
    data["title"] = e.name
    data["event_type"] = row_to_dict(e.event_type) if e.event_type else None
    data["location"] = row_to_dict(e.location) if e.location else None
    data["team"] = {"id": e.team.id, "name": e.team.name} if e.team else None
    return data


def visible_events_clause(db: Session, user: User):
    """Filter for the events a user can see. None means every event."""
    managed = manageable_team_ids(db, user)
    if managed is None:
        return None
    teams = managed | member_team_ids(db, user)
    org_ids = org_admin_org_ids(db, user)
    if not teams and not org_ids:
        return false()
    return or_(
        Event.team_id.in_(teams),
        and_(Event.team_id.is_(None), Event.organization_id.in_(org_ids)),
    )


def list_visible_events(db: Session, user: User, team_id: int | None = None) -> list[Event]:
    q = db.query(Event)
    if team_id is not None:
        q = q.filter(Event.team_id == team_id)
    clause = visible_events_clause(db, user)
    if clause is not None:
        q = q.filter(clause)
    return q.order_by(Event.event_date, Event.start_time).all()


def create_event(db: Session, team: Team, data: dict, user: User) -> dict:
    start = data["start_time"]
    end = data.get("end_time")
    event = Event(
        team_id=team.id,
        organization_id=team.organization_id,
        event_type_id=data["event_type_id"],
        name=data["title"].strip(),
        description=data.get("description"),
        event_date=start.date(),
        start_time=None if data.get("all_day") else start.time().replace(tzinfo=None),
        end_time=end.time().replace(tzinfo=None) if end and not data.get("all_day") else None,
        location_id=data.get("location_id"),
        all_day=bool(data.get("all_day")),
        is_mandatory=bool(data.get("is_mandatory")),
        max_attendees=data.get("max_attendees"),
        rsvp_deadline=data.get("rsvp_deadline"),
        competition_id=data.get("competition_id"),
        opponent_team_id=data.get("opponent_team_id"),
        status="scheduled",
        created_by=user.id,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    log.info(f"Event '{event.name}' on {event.event_date} created for team {team.id}")

    log_activity(
        db, user.id, "event.created", "event", event.id,
        organization_id=team.organization_id, team_id=team.id,
        new_values={"name": event.name, "event_date": event.event_date},
    )
    return serialize_event(event)


def update_event(db: Session, event: Event, updates: dict) -> dict:
    fields = {k: v for k, v in updates.items() if k in EVENT_UPDATE_FIELDS}
    if not fields:
        return {"error": "No valid fields to update", "status": 400}
    for k, v in fields.items():
        setattr(event, k, v)
    db.commit()
    db.refresh(event)
    return serialize_event(event)


# ── RSVPs ────────────────────────────────────────────────────────────


def rsvp_summary(db: Session, event_id: int) -> dict:
    rsvps = (
        db.query(EventRsvp)
        .filter(EventRsvp.event_id == event_id)
        .order_by(EventRsvp.created_at.desc(), EventRsvp.id.desc())
        .all()
    )
    counts = {r: 0 for r in RSVP_RESPONSES}
    items = []
    for r in rsvps:
        counts[r.response] = counts.get(r.response, 0) + 1
        item = row_to_dict(r)
        item["user"] = {"id": r.user.id, "full_name": r.user.full_name} if r.user else None
        items.append(item)
    return {"rsvps": items, "counts": counts, "total": len(items)}


def _yes_count(db: Session, event_id: int, exclude_user_id: int) -> int:
    return (
        db.query(func.count(EventRsvp.id))
        .filter(
            EventRsvp.event_id == event_id,
            EventRsvp.response == "yes",
            EventRsvp.user_id != exclude_user_id,
        )
        .scalar()
        or 0
    )


def submit_rsvp(db: Session, event: Event, user: User, data: dict) -> dict:
    response = data.get("response")
    if response not in RSVP_RESPONSES:
        return {"error": "Invalid response. Must be one of: yes, no, maybe", "status": 400}

    if response == "yes" and event.max_attendees:
        if _yes_count(db, event.id, user.id) >= event.max_attendees:
            return {"error": "Event is at maximum capacity", "status": 400}

    rsvp = (
        db.query(EventRsvp)
        .filter(EventRsvp.event_id == event.id, EventRsvp.user_id == user.id)
        .first()
    )
    if rsvp:
        rsvp.response = response
        rsvp.guests_count = data.get("guests_count") or 0
        rsvp.notes = data.get("notes")
    else:
        rsvp = EventRsvp(
            event_id=event.id,
            user_id=user.id,
            response=response,
            guests_count=data.get("guests_count") or 0,
            notes=data.get("notes"),
        )
        db.add(rsvp)
    db.commit()
    db.refresh(rsvp)

    log_activity(
        db, user.id, "event.rsvp_submitted", "event_rsvp", rsvp.id,
        organization_id=event.organization_id, team_id=event.team_id,
        new_values={"event_id": event.id, "response": response},
    )
    return row_to_dict(rsvp)
