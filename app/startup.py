"""
startup.py — Database Startup Migrations (Idempotent)

Tables, columns, and indexes are defined in the ORM models (app/models/) and
created via Base.metadata.create_all(checkfirst=True). This file also seeds
the reference rows every deployment needs: sports and event types.

Called by: main.py lifespan, routers/admin.py (setup-database)
Depends on: database.py (engine), models (Base, Sport, EventType)
"""

import logging
import os

from sqlalchemy.orm import Session

from .database import engine

log = logging.getLogger(__name__)

SEED_SPORTS = (
    ("Wrestling", "wrestling"),
    ("Basketball", "basketball"),
    ("Football", "football"),
    ("Soccer", "soccer"),
    ("Baseball", "baseball"),
    ("Softball", "softball"),
    ("Volleyball", "volleyball"),
    ("Track & Field", "track-field"),
    ("Jiu-Jitsu", "jiu-jitsu"),
)

SEED_EVENT_TYPES = (
    ("Tournament", "competitive"),
    ("Dual Meet", "competitive"),
    ("Competition", "competitive"),
    ("Practice", "training"),
    ("Open Mat", "training"),
    ("Team Meeting", "meeting"),
    ("Parent Meeting", "meeting"),
    ("Banquet", "social"),
    ("Fundraiser", "social"),
)


def run_startup_migrations() -> None:
    """Execute all idempotent startup operations. Safe to call on every app boot."""
    if os.environ.get("TESTING"):
        log.info("TESTING mode — skipping startup migrations")
        return
    setup_database()


def setup_database(bind=None) -> dict:
    """Sync the ORM schema and seed reference data. Returns seed counts."""
    from .models import Base

    bind = bind or engine
    Base.metadata.create_all(bind=bind, checkfirst=True)
    log.info("ORM schema sync complete (create_all checkfirst=True)")

    with Session(bind=bind) as db:
        sports = _seed_sports(db)
        event_types = _seed_event_types(db)
        db.commit()
    log.info(f"Startup migrations complete (sports +{sports}, event types +{event_types})")
    return {"sports_seeded": sports, "event_types_seeded": event_types}


# ── Seeds ────────────────────────────────────────────────────────────


def _seed_sports(db: Session) -> int:
    from .models import Sport

    existing = {name.lower() for (name,) in db.query(Sport.name).all()}
    added = 0
    for name, slug in SEED_SPORTS:
        if name.lower() not in existing:
            db.add(Sport(name=name, slug=slug))
            added += 1
    return added


def _seed_event_types(db: Session) -> int:
    from .models import EventType

    existing = {name.lower() for (name,) in db.query(EventType.name).all()}
    added = 0
    for name, category in SEED_EVENT_TYPES:
        if name.lower() not in existing:
            db.add(EventType(name=name, category=category))
            added += 1
    return added
