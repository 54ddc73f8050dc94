"""
roster_service.py — Event rosters and their change audit trail.

Business Rules:
- Every member add/remove/weight-class move/status change writes a
  roster_change_log row attributed to the caller
- max_athletes caps active members on the roster
- max_per_weight_class caps active members in one weight class
- Caps apply on add and again when an update promotes a member to
  active or moves an active member to another weight class
- An athlete appears at most once per roster
- Members come back ordered by weight class

Called by: routers/rosters.py
Depends on: models
"""

import logging

from sqlalchemy.orm import Session

from ..models import AthleteProfile, Roster, RosterChangeLog, RosterMember, User
from ..schemas.events import ROSTER_UPDATE_FIELDS
from ..utils.serialization import row_to_dict

log = logging.getLogger(__name__)

MEMBER_UPDATE_FIELDS = ("weight_class", "seed", "made_weight", "actual_weight", "status")


def serialize_roster_member(m: RosterMember) -> dict:
    data = row_to_dict(m)
    athlete = m.athlete
    if athlete and athlete.user:
        data["athlete"] = {
            "id": athlete.id,
            "user_id": athlete.user_id,
            "full_name": athlete.user.full_name,
            "current_weight_class": athlete.current_weight_class,
        }
    return data


def serialize_roster(r: Roster, with_members: bool = False) -> dict:
    data = row_to_dict(r)
    if with_members:
        data["members"] = [serialize_roster_member(m) for m in r.members]
    return data


def _log_change(
    db: Session,
    roster_id: int,
    athlete_profile_id: int | None,
    change_type: str,
    user: User,
    old_value=None,
    new_value=None,
    reason: str | None = None,
) -> None:
    db.add(
        RosterChangeLog(
            roster_id=roster_id,
            athlete_profile_id=athlete_profile_id,
            change_type=change_type,
            old_value=None if old_value is None else str(old_value),
            new_value=None if new_value is None else str(new_value),
            reason=reason,
            changed_by=user.id,
        )
    )


def update_roster(db: Session, roster: Roster, updates: dict) -> dict:
    fields = {k: v for k, v in updates.items() if k in ROSTER_UPDATE_FIELDS}
    if not fields:
        return {"error": "No valid fields to update", "status": 400}
    for k, v in fields.items():
        setattr(roster, k, v)
    db.commit()
    db.refresh(roster)
    return serialize_roster(roster)


def _active_count(
    db: Session, roster_id: int, weight_class: str | None = None, exclude_id: int | None = None
) -> int:
    q = db.query(RosterMember).filter(
        RosterMember.roster_id == roster_id, RosterMember.status == "active"
    )
    if weight_class is not None:
        q = q.filter(RosterMember.weight_class == weight_class)
    if exclude_id is not None:
        q = q.filter(RosterMember.id != exclude_id)
    return q.count()


def _cap_error(
    db: Session,
    roster: Roster,
    weight_class: str,
    check_total: bool = True,
    exclude_id: int | None = None,
) -> dict | None:
    """Error for one more active member at weight_class, or None if it fits."""
    if check_total and roster.max_athletes and (
        _active_count(db, roster.id, exclude_id=exclude_id) >= roster.max_athletes
    ):
        return {"error": f"Roster is full (max {roster.max_athletes} athletes)", "status": 400}
    if roster.max_per_weight_class and (
        _active_count(db, roster.id, weight_class, exclude_id) >= roster.max_per_weight_class
    ):
        return {
            "error": f"Weight class {weight_class} is full (max {roster.max_per_weight_class})",
            "status": 400,
        }
    return None


def add_roster_member(db: Session, roster: Roster, data: dict, user: User) -> dict:
    if not db.get(AthleteProfile, data["athlete_profile_id"]):
        return {"error": "Athlete not found", "status": 404}
    dup = (
        db.query(RosterMember.id)
        .filter(
            RosterMember.roster_id == roster.id,
            RosterMember.athlete_profile_id == data["athlete_profile_id"],
        )
        .first()
    )
    if dup:
        return {"error": "Athlete is already on this roster", "status": 409}

    status = data.get("status") or "active"
    if status == "active":
        error = _cap_error(db, roster, data["weight_class"])
        if error:
            return error

    member = RosterMember(
        roster_id=roster.id,
        athlete_profile_id=data["athlete_profile_id"],
        weight_class=data["weight_class"],
        seed=data.get("seed"),
        made_weight=data.get("made_weight"),
        actual_weight=data.get("actual_weight"),
        status=status,
    )
    db.add(member)
    _log_change(
        db, roster.id, member.athlete_profile_id, "added", user, new_value=member.weight_class
    )
    db.commit()
    db.refresh(member)
    log.info(f"Athlete {member.athlete_profile_id} added to roster {roster.id} at {member.weight_class}")
    return serialize_roster_member(member)


def update_roster_member(db: Session, member: RosterMember, data: dict, user: User) -> dict:
    reason = data.pop("reason", None)
    fields = {k: v for k, v in data.items() if k in MEMBER_UPDATE_FIELDS}
    if not fields:
        return {"error": "No valid fields to update", "status": 400}

    # Becoming active or moving weight class while active takes a new slot
    if (fields.get("status") or member.status) == "active":
        target_wc = fields.get("weight_class") or member.weight_class
        promoted = member.status != "active"
        if promoted or target_wc != member.weight_class:
            error = _cap_error(
                db, member.roster, target_wc, check_total=promoted, exclude_id=member.id
            )
            if error:
                return error

    new_wc = fields.get("weight_class")
    if new_wc and new_wc != member.weight_class:
        _log_change(
            db, member.roster_id, member.athlete_profile_id, "weight_class_changed", user,
            old_value=member.weight_class, new_value=new_wc,
            reason=reason or f"Changed from {member.weight_class} to {new_wc}",
        )
    new_status = fields.get("status")
    if new_status and new_status != member.status:
        _log_change(
            db, member.roster_id, member.athlete_profile_id, "status_changed", user,
            old_value=member.status, new_value=new_status, reason=reason,
        )
    for k, v in fields.items():
        setattr(member, k, v)
    db.commit()
    db.refresh(member)
    return serialize_roster_member(member)


def remove_roster_member(db: Session, member: RosterMember, user: User, reason: str | None = None) -> dict:
    member_id = member.id
    _log_change(
        db, member.roster_id, member.athlete_profile_id, "removed", user,
        old_value=member.weight_class, reason=reason,
    )
    db.delete(member)
    db.commit()
    return {"status": "deleted", "id": member_id}


def change_log(db: Session, roster_id: int) -> list[dict]:
    rows = (
        db.query(RosterChangeLog)
        .filter(RosterChangeLog.roster_id == roster_id)
        .order_by(RosterChangeLog.created_at.desc(), RosterChangeLog.id.desc())
        .all()
    )
    return [row_to_dict(r) for r in rows]
