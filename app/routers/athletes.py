"""
routers/athletes.py — Athlete profile routes.

Business Rules:
- Creating an athlete needs email, first_name, last_name, team_id
- Only platform admins and managers of the athlete's team can create, update, or delete
- An athlete's account is reused when the email already exists; otherwise a
  password-less account is created (the athlete sets one via signup/reset)
- full_name is always "first last", recomputed on update

Called by: main.py (router mount)
Depends on: dependencies, models
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import can_manage_team, require_user
from ..models import AthleteProfile, Team, User
from ..schemas.common import missing_fields
from ..schemas.teams import (
    ATHLETE_PROFILE_FIELDS,
    ATHLETE_USER_FIELDS,
    AthleteCreate,
    AthleteUpdate,
)
from ..services.auth_service import is_valid_email
from ..utils.serialization import row_to_dict

log = logging.getLogger(__name__)

router = APIRouter(tags=["athletes"])


def _full_name(first: str | None, last: str | None) -> str:
    return " ".join(p for p in (first, last) if p).strip()


def serialize_athlete(a: AthleteProfile) -> dict:
    data = row_to_dict(a)
    if a.user:
        data["user"] = {
            "id": a.user.id,
            "email": a.user.email,
            "first_name": a.user.first_name,
            "last_name": a.user.last_name,
            "full_name": a.user.full_name,
            "date_of_birth": a.user.date_of_birth.isoformat() if a.user.date_of_birth else None,
        }
    return data


def _get_athlete(db: Session, athlete_id: int) -> AthleteProfile:
    athlete = db.get(AthleteProfile, athlete_id)
    if not athlete:
        raise HTTPException(404, "Athlete not found")
    return athlete


def _require_team_manager(db: Session, user: User, team_id: int | None) -> None:
    team = db.get(Team, team_id) if team_id else None
    if not can_manage_team(db, user, team):
        raise HTTPException(403, "Insufficient permissions for this team")


@router.get("/api/athletes")
def api_list_athletes(
    team_id: int | None = Query(None),
    weight_class: str | None = Query(None),
    is_active: bool | None = Query(None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    q = db.query(AthleteProfile)
    if team_id is not None:
        q = q.filter(AthleteProfile.team_id == team_id)
    if weight_class:
        q = q.filter(AthleteProfile.current_weight_class == weight_class)
    if is_active is not None:
        q = q.filter(AthleteProfile.is_active.is_(is_active))
    athletes = q.order_by(AthleteProfile.created_at.desc()).all()
    return {"athletes": [serialize_athlete(a) for a in athletes], "count": len(athletes)}


@router.post("/api/athletes", status_code=201)
def api_create_athlete(
    body: AthleteCreate, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    missing = missing_fields(body, "email", "first_name", "last_name", "team_id")
    if missing:
        raise HTTPException(400, f"Missing required fields: {', '.join(missing)}")
    if not is_valid_email(body.email):
        raise HTTPException(400, "Invalid email format")
    _require_team_manager(db, user, body.team_id)

    data = body.model_dump()
    account = db.query(User).filter(User.email == body.email).first()
    if not account:
        account = User(email=body.email, platform_role="user", is_active=True)
        db.add(account)
    for k in ATHLETE_USER_FIELDS:
        if data.get(k) is not None:
            setattr(account, k, data[k])
    account.full_name = _full_name(account.first_name, account.last_name)
    db.flush()

    athlete = AthleteProfile(
        user_id=account.id,
        **{k: data.get(k) for k in ATHLETE_PROFILE_FIELDS if k != "is_active"},
        is_active=True,
    )
    db.add(athlete)
    db.commit()
    db.refresh(athlete)
    log.info(f"Athlete {account.email} added to team {body.team_id} by {user.email}")
    return serialize_athlete(athlete)


@router.get("/api/athletes/{athlete_id}")
def api_get_athlete(
    athlete_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return serialize_athlete(_get_athlete(db, athlete_id))


@router.put("/api/athletes/{athlete_id}")
def api_update_athlete(
    athlete_id: int,
    body: AthleteUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    athlete = _get_athlete(db, athlete_id)
    _require_team_manager(db, user, athlete.team_id)
    updates = body.model_dump(exclude_unset=True)
    if "team_id" in updates and updates["team_id"] != athlete.team_id:
        _require_team_manager(db, user, updates["team_id"])

    account = athlete.user
    for k in ATHLETE_USER_FIELDS:
        if k in updates:
            setattr(account, k, updates[k])
    if "first_name" in updates or "last_name" in updates:
        account.full_name = _full_name(account.first_name, account.last_name)
    for k in ATHLETE_PROFILE_FIELDS:
        if k in updates:
            setattr(athlete, k, updates[k])
    db.commit()
    db.refresh(athlete)
    return serialize_athlete(athlete)


@router.delete("/api/athletes/{athlete_id}")
def api_delete_athlete(
    athlete_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    athlete = _get_athlete(db, athlete_id)
    _require_team_manager(db, user, athlete.team_id)
    db.delete(athlete)
    db.commit()
    return {"status": "deleted", "id": athlete_id}
