"""Reference data API — sports and event types (read-only, any signed-in user)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import EventType, Sport, User
from ..utils.serialization import row_to_dict

router = APIRouter(tags=["reference"])


@router.get("/api/sports")
def api_list_sports(user: User = Depends(require_user), db: Session = Depends(get_db)):
    sports = db.query(Sport).order_by(Sport.name).all()
    return {"sports": [row_to_dict(s) for s in sports]}


@router.get("/api/event-types")
def api_list_event_types(user: User = Depends(require_user), db: Session = Depends(get_db)):
    types = db.query(EventType).order_by(EventType.name).all()
    return {"event_types": [row_to_dict(t) for t in types]}
