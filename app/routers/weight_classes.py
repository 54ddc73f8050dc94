"""
routers/weight_classes.py — Weight class catalog.

Business Rules:
- Listing is ordered by weight, filterable by sport and active flag
- Create: platform admin only
- Read/update/delete: platform admin, or org admin of the class's organization
- Copy: any admin; the copy is always active and owned by the caller, with
  name defaulting to "<name> (Copy)"

Called by: main.py (router mount)
Depends on: dependencies, models
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import can_manage_org, is_any_admin, require_platform_admin, require_user
from ..models import Sport, User, WeightClass
from ..schemas.common import missing_fields
from ..schemas.competitions import (
    WEIGHT_CLASS_FIELDS,
    WeightClassCopy,
    WeightClassCreate,
    WeightClassUpdate,
)
from ..utils.serialization import row_to_dict

log = logging.getLogger(__name__)

router = APIRouter(tags=["weight-classes"])


def _get_managed_class(db: Session, user: User, wc_id: int) -> WeightClass:
    wc = db.get(WeightClass, wc_id)
    if not wc:
        raise HTTPException(404, "Weight class not found")
    if not can_manage_org(db, user, wc.organization_id):
        raise HTTPException(403, "Insufficient permissions for this weight class")
    return wc


@router.get("/api/weight-classes")
def api_list_weight_classes(
    sport_id: int | None = Query(None),
    is_active: bool | None = Query(None),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    q = db.query(WeightClass)
    if sport_id is not None:
        q = q.filter(WeightClass.sport_id == sport_id)
    if is_active is not None:
        q = q.filter(WeightClass.is_active.is_(is_active))
    classes = q.order_by(WeightClass.weight).all()
    return {"weight_classes": [row_to_dict(wc) for wc in classes], "count": len(classes)}


@router.post("/api/weight-classes", status_code=201)
def api_create_weight_class(
    body: WeightClassCreate,
    user: User = Depends(require_platform_admin),
    db: Session = Depends(get_db),
):
    missing = missing_fields(body, "sport_id", "name", "weight")
    if missing:
        raise HTTPException(400, f"Missing required fields: {', '.join(missing)}")
    if not db.get(Sport, body.sport_id):
        raise HTTPException(404, "Sport not found")
    wc = WeightClass(**body.model_dump(), created_by=user.id)
    db.add(wc)
    db.commit()
    db.refresh(wc)
    return row_to_dict(wc)


@router.get("/api/weight-classes/{wc_id}")
def api_get_weight_class(
    wc_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return row_to_dict(_get_managed_class(db, user, wc_id))


@router.put("/api/weight-classes/{wc_id}")
def api_update_weight_class(
    wc_id: int,
    body: WeightClassUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    wc = _get_managed_class(db, user, wc_id)
    updates = {
        k: v for k, v in body.model_dump(exclude_unset=True).items() if k in WEIGHT_CLASS_FIELDS
    }
    if not updates:
        raise HTTPException(400, "No valid fields to update")
    if "organization_id" in updates and not can_manage_org(db, user, updates["organization_id"]):
        raise HTTPException(403, "Insufficient permissions for the target organization")
    for k, v in updates.items():
        setattr(wc, k, v)
    db.commit()
    db.refresh(wc)
    return row_to_dict(wc)


@router.delete("/api/weight-classes/{wc_id}")
def api_delete_weight_class(
    wc_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    wc = _get_managed_class(db, user, wc_id)
    db.delete(wc)
    db.commit()
    return {"status": "deleted", "id": wc_id}


@router.post("/api/weight-classes/{wc_id}/copy", status_code=201)
def api_copy_weight_class(
    wc_id: int,
    body: WeightClassCopy | None = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not is_any_admin(db, user):
        raise HTTPException(403, "Insufficient permissions. Admin role required.")
    source = db.get(WeightClass, wc_id)
    if not source:
        raise HTTPException(404, "Weight class not found")

    overrides = (body or WeightClassCopy()).model_dump(exclude_none=True)
    copy = WeightClass(
        sport_id=source.sport_id,
        organization_id=source.organization_id,
        name=overrides.get("name") or f"{source.name} (Copy)",
        weight=source.weight,
        age_group=overrides.get("age_group", source.age_group),
        state=overrides.get("state", source.state),
        city=overrides.get("city", source.city),
        expiration_date=overrides.get("expiration_date", source.expiration_date),
        notes=source.notes,
        is_active=True,
        created_by=user.id,
    )
    db.add(copy)
    db.commit()
    db.refresh(copy)
    log.info(f"Weight class {source.id} copied to {copy.id} by {user.email}")
    return row_to_dict(copy)
