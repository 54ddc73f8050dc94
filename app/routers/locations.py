"""Venue API — list/read for any signed-in user, edits for platform admins."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_platform_admin, require_user
from ..models import Location, User
from ..schemas.common import missing_fields
from ..schemas.competitions import LOCATION_FIELDS, LocationCreate, LocationUpdate
from ..utils.serialization import row_to_dict

router = APIRouter(tags=["locations"])


def _get_location(db: Session, location_id: int) -> Location:
    loc = db.get(Location, location_id)
    if not loc:
        raise HTTPException(404, "Location not found")
    return loc


@router.get("/api/locations")
def api_list_locations(
    organization_id: int | None = Query(None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    q = db.query(Location)
    if organization_id is not None:
        q = q.filter(Location.organization_id == organization_id)
    locs = q.order_by(Location.name).all()
    return {"locations": [row_to_dict(loc) for loc in locs], "count": len(locs)}


@router.post("/api/locations", status_code=201)
def api_create_location(
    body: LocationCreate, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    if missing_fields(body, "name"):
        raise HTTPException(400, "Missing required fields: name")
    data = body.model_dump()
    data["country"] = data.get("country") or "USA"
    loc = Location(**data)
    db.add(loc)
    db.commit()
    db.refresh(loc)
    return row_to_dict(loc)


@router.get("/api/locations/{location_id}")
def api_get_location(
    location_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return row_to_dict(_get_location(db, location_id))


@router.put("/api/locations/{location_id}")
def api_update_location(
    location_id: int,
    body: LocationUpdate,
    user: User = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    loc = _get_location(db, location_id)
    updates = {k: v for k, v in body.model_dump(exclude_unset=True).items() if k in LOCATION_FIELDS}
    if not updates:
        raise HTTPException(400, "No valid fields to update")
    for k, v in updates.items():
        setattr(loc, k, v)
    db.commit()
    db.refresh(loc)
    return row_to_dict(loc)


@router.delete("/api/locations/{location_id}")
def api_delete_location(
    location_id: int,
    user: User = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    loc = _get_location(db, location_id)
    db.delete(loc)
    db.commit()
    return {"status": "deleted", "id": location_id}
