"""Activity service — audit trail for admin-facing changes.

Writes activity_log rows for create/update/delete actions across
organizations, teams, events and imports. Logging never breaks the
request that triggered it.

Usage:
    from app.services.activity_service import log_activity
    log_activity(db, user.id, "team.created", "team", team.id, new_values={...})
"""

import logging
from datetime import date, datetime, time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import ActivityLog

log = logging.getLogger("clubhouse.activity")


def _jsonable(values: dict | None) -> dict | None:
    if values is None:
        return None
    out = {}
    for k, v in values.items():
        if isinstance(v, (datetime, date, time)):
            out[k] = v.isoformat()
        else:
            out[k] = v
    return out


def log_activity(
    db: Session,
    user_id: int | None,
    action: str,
    entity_type: str,
    entity_id: int | None,
    *,
    organization_id: int | None = None,
    team_id: int | None = None,
    old_values: dict | None = None,
    new_values: dict | None = None,
) -> ActivityLog | None:
    """Record one activity row and commit it. Returns None if the write failed."""
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        organization_id=organization_id,
        team_id=team_id,
        old_values=_jsonable(old_values),
        new_values=_jsonable(new_values),
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.warning(f"Activity log write failed for {action}: {e}")
        return None
    return entry


def list_activity(db: Session, organization_ids: set[int] | None, limit: int = 100) -> list[dict]:
    """Recent activity, newest first. organization_ids=None means all organizations."""
    q = db.query(ActivityLog)
    if organization_ids is not None:
        if not organization_ids:
            return []
        q = q.filter(ActivityLog.organization_id.in_(organization_ids))
    rows = q.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()
    return [
        {
            "id": a.id,
            "user_id": a.user_id,
            "organization_id": a.organization_id,
            "team_id": a.team_id,
            "action": a.action,
            "entity_type": a.entity_type,
            "entity_id": a.entity_id,
            "old_values": a.old_values,
            "new_values": a.new_values,
            "created_at": a.created_at.isoformat() if a.created_at else None,
        }
        for a in rows
    ]
