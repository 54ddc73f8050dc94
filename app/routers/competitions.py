"""
routers/competitions.py — Competition CRUD.

Business Rules:
- Listing and reading are open to any signed-in user
- Create/update/delete need a platform admin or an org admin of the
  competition's organization

Called by: main.py (router mount)
Depends on: dependencies, models
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import can_manage_org, require_user
from ..models import Competition, Organization, Sport, User
from ..schemas.common import missing_fields
from ..schemas.competitions import COMPETITION_FIELDS, CompetitionCreate, CompetitionUpdate
from ..utils.serialization import row_to_dict

log = logging.getLogger(__name__)

router = APIRouter(tags=["competitions"])


def serialize_competition(c: Competition) -> dict:
    data = row_to_dict(c)
    data["sport"] = row_to_dict(c.sport) if c.sport else None
    data["default_location"] = row_to_dict(c.default_location) if c.default_location else None
    return data


def _get_competition(db: Session, competition_id: int) -> Competition:
    comp = db.get(Competition, competition_id)
    if not comp:
        raise HTTPException(404, "Competition not found")
    return comp


@router.get("/api/competitions")
def api_list_competitions(
    organization_id: int | None = Query(None),
    sport_id: int | None = Query(None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    q = db.query(Competition)
    if organization_id is not None:
        q = q.filter(Competition.organization_id == organization_id)
    if sport_id is not None:
        q = q.filter(Competition.sport_id == sport_id)
    comps = q.order_by(Competition.name).all()
    return {"competitions": [serialize_competition(c) for c in comps], "count": len(comps)}


@router.post("/api/competitions", status_code=201)
def api_create_competition(
    body: CompetitionCreate, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    missing = missing_fields(body, "organization_id", "sport_id", "name")
    if missing:
        raise HTTPException(400, f"Missing required fields: {', '.join(missing)}")
    if not can_manage_org(db, user, body.organization_id):
        raise HTTPException(403, "Insufficient permissions. Must be org admin or platform admin.")
    if not db.get(Organization, body.organization_id):
        raise HTTPException(404, "Organization not found")
    if not db.get(Sport, body.sport_id):
        raise HTTPException(404, "Sport not found")

    comp = Competition(**body.model_dump())
    db.add(comp)
    db.commit()
    db.refresh(comp)
    log.info(f"Competition '{comp.name}' created in org {comp.organization_id} by {user.email}")
    return serialize_competition(comp)


@router.get("/api/competitions/{competition_id}")
def api_get_competition(
    competition_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return serialize_competition(_get_competition(db, competition_id))


@router.put("/api/competitions/{competition_id}")
def api_update_competition(
    competition_id: int,
    body: CompetitionUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    comp = _get_competition(db, competition_id)
    if not can_manage_org(db, user, comp.organization_id):
        raise HTTPException(403, "Insufficient permissions. Must be org admin or platform admin.")
    updates = {k: v for k, v in body.model_dump(exclude_unset=True).items() if k in COMPETITION_FIELDS}
    if not updates:
        raise HTTPException(400, "No valid fields to update")
    for k, v in updates.items():
        setattr(comp, k, v)
    db.commit()
    db.refresh(comp)
    return serialize_competition(comp)


@router.delete("/api/competitions/{competition_id}")
def api_delete_competition(
    competition_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    comp = _get_competition(db, competition_id)
    if not can_manage_org(db, user, comp.organization_id):
        raise HTTPException(403, "Insufficient permissions. Must be org admin or platform admin.")
    db.delete(comp)
    db.commit()
    return {"status": "deleted", "id": competition_id}
