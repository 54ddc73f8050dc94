"""
routers/events.py — Event scheduling and RSVP routes.

Business Rules:
- Create/update need a manager of the event's team (its organization when it has none)
- Read needs a manager or an active member of the team
- Delete needs a platform admin or org admin of the team's organization
- RSVP needs an active team membership

Called by: main.py (router mount)
Depends on: services/event_service.py, dependencies
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import (
    can_manage_event,
    can_manage_org,
    can_manage_team,
    is_active_team_member,
    require_user,
)
from ..models import Event, EventType, Team, User
from ..schemas.common import missing_fields
from ..schemas.events import EventCreate, EventUpdate, RsvpRequest
from ..schemas.responses import EventListResponse, RsvpSummaryResponse
from ..services.event_service import (
    create_event,
    list_visible_events,
    rsvp_summary,
    serialize_event,
    submit_rsvp,
    update_event,
)

log = logging.getLogger(__name__)

router = APIRouter(tags=["events"])


def _get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise HTTPException(404, "Event not found")
    return event


def _can_view(db: Session, user: User, event: Event) -> bool:
    return can_manage_event(db, user, event) or is_active_team_member(db, user, event.team_id)


@router.get("/api/events", response_model=EventListResponse)
def api_list_events(
    team_id: int | None = Query(None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    events = [serialize_event(e) for e in list_visible_events(db, user, team_id)]
    return {"events": events, "count": len(events)}


@router.post("/api/events", status_code=201)
def api_create_event(
    body: EventCreate, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    missing = missing_fields(body, "team_id", "title", "event_type_id", "start_time")
    if missing:
        raise HTTPException(400, f"Missing required fields: {', '.join(missing)}")
    team = db.get(Team, body.team_id)
    if not team:
        raise HTTPException(404, "Team not found")
    if not can_manage_team(db, user, team):
        raise HTTPException(403, "Insufficient permissions to create events for this team")
    if not db.get(EventType, body.event_type_id):
        raise HTTPException(404, "Event type not found")
    if body.end_time and body.end_time < body.start_time:
        raise HTTPException(400, "end_time must be after start_time")
    return create_event(db, team, body.model_dump(), user)


@router.get("/api/events/{event_id}")
def api_get_event(event_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)):
    event = _get_event(db, event_id)
    if not _can_view(db, user, event):
        raise HTTPException(403, "You do not have access to this event")
    return serialize_event(event)


@router.put("/api/events/{event_id}")
def api_update_event(
    event_id: int,
    body: EventUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    event = _get_event(db, event_id)
    if not can_manage_event(db, user, event):
        raise HTTPException(403, "Insufficient permissions to update this event")
    result = update_event(db, event, body.model_dump(exclude_unset=True))
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result


@router.delete("/api/events/{event_id}")
def api_delete_event(
    event_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    event = _get_event(db, event_id)
    if not can_manage_org(db, user, event.organization_id):
        raise HTTPException(403, "Only organization or platform admins can delete events")
    db.delete(event)
    db.commit()
    log.info(f"Event {event_id} deleted by {user.email}")
    return {"status": "deleted", "id": event_id}


@router.get("/api/events/{event_id}/rsvp", response_model=RsvpSummaryResponse)
def api_event_rsvps(
    event_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    event = _get_event(db, event_id)
    if not _can_view(db, user, event):
        raise HTTPException(403, "You do not have access to this event")
    return rsvp_summary(db, event.id)


@router.post("/api/events/{event_id}/rsvp")
def api_submit_rsvp(
    event_id: int,
    body: RsvpRequest,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    if missing_fields(body, "response"):
        raise HTTPException(400, "Missing required fields: response")
    event = _get_event(db, event_id)
    if not is_active_team_member(db, user, event.team_id):
        raise HTTPException(403, "Only active team members can RSVP to this event")
    result = submit_rsvp(db, event, user, body.model_dump())
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result
