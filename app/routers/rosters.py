"""
routers/rosters.py — Event rosters, roster members, and the change log.

Business Rules:
- Reads need a manager or an active member of the event's team
- Every write needs a manager of the event's team

Called by: main.py (router mount)
Depends on: services/roster_service.py, dependencies
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import can_manage_event, is_active_team_member, require_user
from ..models import Event, Roster, RosterMember, User
from ..schemas.common import missing_fields
from ..schemas.events import RosterCreate, RosterMemberCreate, RosterMemberUpdate, RosterUpdate
from ..services.event_service import visible_events_clause
from ..services.roster_service import (
    add_roster_member,
    change_log,
    remove_roster_member,
    serialize_roster,
    serialize_roster_member,
    update_roster,
    update_roster_member,
)

log = logging.getLogger(__name__)

router = APIRouter(tags=["rosters"])


def _get_roster(db: Session, roster_id: int) -> Roster:
    roster = db.get(Roster, roster_id)
    if not roster:
        raise HTTPException(404, "Roster not found")
    return roster


def _require_manager(db: Session, user: User, event: Event | None) -> None:
    if event is None or not can_manage_event(db, user, event):
        raise HTTPException(403, "Insufficient permissions to manage this roster")


def _require_view(db: Session, user: User, event: Event) -> None:
    if can_manage_event(db, user, event) or is_active_team_member(db, user, event.team_id):
        return
    raise HTTPException(403, "You do not have access to this roster")


def _get_member(db: Session, roster: Roster, member_id: int) -> RosterMember:
    member = db.get(RosterMember, member_id)
    if not member or member.roster_id != roster.id:
        raise HTTPException(404, "Roster member not found")
    return member


# ── Rosters ──────────────────────────────────────────────────────────


@router.get("/api/rosters")
def api_list_rosters(
    event_id: int | None = Query(None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    q = db.query(Roster).join(Event, Roster.event_id == Event.id)
    if event_id is not None:
        q = q.filter(Roster.event_id == event_id)
    clause = visible_events_clause(db, user)
    if clause is not None:
        q = q.filter(clause)
    rosters = q.order_by(Roster.created_at.desc()).all()
    return {"rosters": [serialize_roster(r) for r in rosters], "count": len(rosters)}


@router.post("/api/rosters", status_code=201)
def api_create_roster(
    body: RosterCreate, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    if missing_fields(body, "event_id"):
        raise HTTPException(400, "Missing required fields: event_id")
    event = db.get(Event, body.event_id)
    if not event:
        raise HTTPException(404, "Event not found")
    _require_manager(db, user, event)
    roster = Roster(**body.model_dump())
    if not roster.name:
        roster.name = f"{event.name} Roster"
    db.add(roster)
    db.commit()
    db.refresh(roster)
    return serialize_roster(roster, with_members=True)


@router.get("/api/rosters/{roster_id}")
def api_get_roster(
    roster_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    roster = _get_roster(db, roster_id)
    _require_view(db, user, roster.event)
    return serialize_roster(roster, with_members=True)


@router.put("/api/rosters/{roster_id}")
def api_update_roster(
    roster_id: int,
    body: RosterUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    roster = _get_roster(db, roster_id)
    _require_manager(db, user, roster.event)
    result = update_roster(db, roster, body.model_dump(exclude_unset=True))
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result


@router.delete("/api/rosters/{roster_id}")
def api_delete_roster(
    roster_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    roster = _get_roster(db, roster_id)
    _require_manager(db, user, roster.event)
    db.delete(roster)
    db.commit()
    return {"status": "deleted", "id": roster_id}


@router.get("/api/rosters/{roster_id}/changes")
def api_roster_changes(
    roster_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    roster = _get_roster(db, roster_id)
    _require_manager(db, user, roster.event)
    changes = change_log(db, roster.id)
    return {"changes": changes, "count": len(changes)}


# ── Members ──────────────────────────────────────────────────────────


@router.get("/api/rosters/{roster_id}/members")
def api_roster_members(
    roster_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    roster = _get_roster(db, roster_id)
    _require_view(db, user, roster.event)
    members = [serialize_roster_member(m) for m in roster.members]
    return {"members": members, "count": len(members)}


@router.post("/api/rosters/{roster_id}/members", status_code=201)
def api_add_roster_member(
    roster_id: int,
    body: RosterMemberCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    roster = _get_roster(db, roster_id)
    _require_manager(db, user, roster.event)
    missing = missing_fields(body, "athlete_profile_id", "weight_class")
    if missing:
        raise HTTPException(400, f"Missing required fields: {', '.join(missing)}")
    result = add_roster_member(db, roster, body.model_dump(), user)
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result


@router.put("/api/rosters/{roster_id}/members/{member_id}")
def api_update_roster_member(
    roster_id: int,
    member_id: int,
    body: RosterMemberUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    roster = _get_roster(db, roster_id)
    _require_manager(db, user, roster.event)
    member = _get_member(db, roster, member_id)
    result = update_roster_member(db, member, body.model_dump(exclude_unset=True), user)
    if "error" in result:
        raise HTTPException(result["status"], result["error"])
    return result


@router.delete("/api/rosters/{roster_id}/members/{member_id}")
def api_remove_roster_member(
    roster_id: int,
    member_id: int,
    reason: str | None = Query(None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    roster = _get_roster(db, roster_id)
    _require_manager(db, user, roster.event)
    member = _get_member(db, roster, member_id)
    return remove_roster_member(db, member, user, reason)
