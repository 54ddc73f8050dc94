"""
competition_import.py — Reconcile AI-extracted competitions into the database.

Shared by the vision import (ai-import-direct) and the webhook callback
(ai-import-callback); the text import reuses the location upsert.

Business Rules:
- Location dedup key is (name, city, state), case-insensitive and trimmed;
  a miss creates the location under the importing organization
- Competition dedup key is (name, organization), case-insensitive and trimmed
- Vision import skips a competition that already exists
- Callback import reuses an existing competition and only adds the team
  events that are missing; one event per (competition, team)
- Every item runs inside its own savepoint; one bad item never rolls back
  the items before it
- Contact names split into first word / rest
- Weigh-in text like "7:30 AM" becomes 07:30:00

Called by: routers/imports.py, services/import_service.py
Depends on: models, services/upload_storage.py
"""

import logging
import re
from datetime import date, datetime, time, timezone

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Competition, Event, EventType, ImportJob, Location, Season, Sport, Team
from .upload_storage import delete_upload

log = logging.getLogger(__name__)

WRESTLING = "Wrestling"

_WEIGH_IN_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)
US_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%m-%d-%Y", "%m-%d-%y")

VISION_PROMPT = """You are a wrestling tournament data extraction assistant. Analyze this image and extract ALL tournament/competition information.

For EACH competition/tournament you find, extract:
- event_name: Full name of the tournament
- date: Date in YYYY-MM-DD format (if you see "12/14/24", convert to "2024-12-14")
- style: Wrestling style (Folkstyle, Freestyle, Greco-Roman)
- divisions_included: Comma-separated list (e.g., "Youth, Cadet, Junior")
- divisions_excluded: Any restrictions mentioned
- registration_weighin_time: Registration/weigh-in time
- registration_url: URL for registration if shown
- venue: Venue/location name
- venue_type: Type of venue, one of: "high_school", "middle_school", "elementary_school", "college", "arena", "gym", "community_center", "convention_center", "other"
- street_address: Street address
- city: City name
- state: State (2-letter code like CA, NY)
- zip: ZIP code
- contact_name: Contact person's full name
- contact_phone: Phone number
- contact_email: Email address

Choosing venue_type:
- "High School" or "HS" -> "high_school"
- "Middle School" or "MS" -> "middle_school"
- "College" or "University" -> "college"
- "Arena" or "Stadium" -> "arena"
- "Gym" or "Athletic Club" -> "gym"
- "Community Center" or "Rec Center" -> "community_center"
- anything else -> "other"

Return ONLY a valid JSON array:
[
  {
    "event_name": "Tournament Name",
    "date": "2024-12-14",
    "style": "Folkstyle",
    "venue_type": "high_school",
    ...
  }
]

If multiple competitions are shown, return one object per competition. If no competition data is found, return []."""


# ── Small parsers ────────────────────────────────────────────────────


def clean(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _key(value) -> str:
    return (clean(value) or "").lower()


def split_contact_name(name: str | None) -> tuple[str | None, str | None]:
    parts = (name or "").split()
    if not parts:
        return None, None
    return parts[0], (" ".join(parts[1:]) or None)


def parse_weigh_in_time(text: str | None) -> time | None:
    """'7:30 AM' → time(7, 30); '12:15 PM' → time(12, 15); None when no match."""
    if not text:
        return None
    m = _WEIGH_IN_RE.search(text)
    if not m:
        return None
    hours, minutes, period = int(m.group(1)), int(m.group(2)), m.group(3).upper()
    if period == "PM" and hours != 12:
        hours += 12
    if period == "AM" and hours == 12:
        hours = 0
    if hours > 23 or minutes > 59:
        return None
    return time(hours, minutes)


def parse_date(value) -> date | None:
    """ISO dates plus the US forms flyers use (12/14/2024, 12/14/24, 12-14-2024)."""
    if value is None or isinstance(value, date):
        return value
    text = clean(value)
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    for fmt in US_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {text}")


def parse_time(value) -> time | None:
    if value is None or isinstance(value, time):
        return value
    text = clean(value)
    return time.fromisoformat(text) if text else None


# ── Lookups ──────────────────────────────────────────────────────────


def wrestling_sport(db: Session) -> Sport | None:
    return db.query(Sport).filter(func.lower(Sport.name) == WRESTLING.lower()).first()


def find_location(db: Session, name, city, state) -> Location | None:
    return (
        db.query(Location)
        .filter(
            func.lower(func.trim(Location.name)) == _key(name),
            func.lower(func.trim(func.coalesce(Location.city, ""))) == _key(city),
            func.lower(func.trim(func.coalesce(Location.state, ""))) == _key(state),
        )
        .order_by(Location.id)
        .first()
    )


def find_competition(db: Session, organization_id: int, name) -> Competition | None:
    return (
        db.query(Competition)
        .filter(
            Competition.organization_id == organization_id,
            func.lower(func.trim(Competition.name)) == _key(name),
        )
        .order_by(Competition.id)
        .first()
    )


def upsert_location(db: Session, organization_id: int, fields: dict) -> tuple[Location, bool]:
    """Existing location on (name, city, state), else a new one. Returns (location, created)."""
    name = clean(fields.get("name")) or "Unknown Location"
    existing = find_location(db, name, fields.get("city"), fields.get("state"))
    if existing:
        return existing, False
    loc = Location(
        organization_id=organization_id,
        name=name,
        address=clean(fields.get("address")),
        city=clean(fields.get("city")),
        state=clean(fields.get("state")),
        zip=clean(fields.get("zip")),
        venue_type=clean(fields.get("venue_type")),
        phone=clean(fields.get("phone")),
        notes=clean(fields.get("notes")),
        country="USA",
    )
    db.add(loc)
    db.flush()
    return loc, True


# ── Vision import ────────────────────────────────────────────────────


def import_vision_items(db: Session, organization_id: int, sport_id: int, items: list) -> dict:
    """Insert competitions read from an image. Existing competitions are skipped."""
    inserted = skipped = locations_created = 0
    errors: list[str] = []

    for item in items:
        if not isinstance(item, dict):
            errors.append(f"Unreadable item: {item!r}"[:200])
            continue
        label = clean(item.get("event_name")) or "Unnamed Competition"
        new_location = duplicate = False
        try:
            with db.begin_nested():
                location_id = None
                if item.get("venue") or item.get("street_address") or item.get("city"):
                    loc, created = upsert_location(db, organization_id, {
                        "name": item.get("venue"),
                        "address": item.get("street_address"),
                        "city": item.get("city"),
                        "state": item.get("state"),
                        "zip": item.get("zip"),
                        "venue_type": item.get("venue_type"),
                    })
                    location_id = loc.id
                    new_location = created

                if find_competition(db, organization_id, label):
                    duplicate = True
                else:
                    first, last = split_contact_name(item.get("contact_name"))
                    day = parse_date(item.get("date"))
                    db.add(Competition(
                        organization_id=organization_id,
                        sport_id=sport_id,
                        name=label,
                        description=" ".join(
                            p for p in (clean(item.get("style")), clean(item.get("divisions_included"))) if p
                        ) or None,
                        competition_type="tournament",
                        start_date=day,
                        end_date=day,
                        default_location_id=location_id,
                        registration_url=clean(item.get("registration_url")),
                        contact_first_name=first,
                        contact_last_name=last,
                        contact_phone=clean(item.get("contact_phone")),
                        contact_email=clean(item.get("contact_email")),
                    ))
                    db.flush()
        except (SQLAlchemyError, ValueError) as e:
            log.error(f"Error processing competition {label}: {e}")
            errors.append(f"{label}: {e}")
            continue

        # Only count work whose savepoint was released
        locations_created += new_location
        if duplicate:
            log.info(f"Competition already exists: {label} - skipping")
            skipped += 1
        else:
            inserted += 1

    db.commit()
    return {
        "message": (
            f"Processed {len(items)} competitions: {inserted} inserted, "
            f"{skipped} skipped (duplicates)"
        ),
        "total": len(items),
        "inserted": inserted,
        "skipped": skipped,
        "locationsCreated": locations_created,
        "errors": errors,
    }


# ── Webhook callback ─────────────────────────────────────────────────


def normalize_callback_item(item: dict) -> dict:
    divisions = item.get("divisions")
    if isinstance(divisions, str):
        divisions = [d.strip() for d in divisions.split(",") if d.strip()]
    return {
        "name": clean(item.get("event_name") or item.get("name")),
        "date": clean(item.get("date")),
        "style": clean(item.get("style")),
        "divisions": divisions or [],
        "restrictions": clean(item.get("restrictions")),
        "registration_weigh_in_time": clean(
            item.get("registration_weighin_time") or item.get("registration_weigh_in_time")
        ),
        "registration_url": clean(item.get("registration_url")),
        "venue_name": clean(item.get("venue_name") or item.get("venue")),
        "venue_type": clean(item.get("venue_type")),
        "address": clean(item.get("street_address") or item.get("address")),
        "city": clean(item.get("city")),
        "state": clean(item.get("state")),
        "zip": clean(item.get("zip")),
        "contact_name": clean(item.get("contact_name")),
        "contact_phone": clean(item.get("contact_phone")),
        "contact_email": clean(item.get("contact_email")),
    }


def callback_description(item: dict) -> str:
    lines = [
        item["style"] and f"Style: {item['style']}",
        item["divisions"] and f"Divisions: {', '.join(item['divisions'])}",
        item["registration_weigh_in_time"]
        and f"Registration/Weigh-in: {item['registration_weigh_in_time']}",
        item["contact_name"] and f"Contact: {item['contact_name']}",
        item["contact_email"] and f"Email: {item['contact_email']}",
        item["contact_phone"] and f"Phone: {item['contact_phone']}",
    ]
    return "\n".join(line for line in lines if line)


def _current_season(db: Session, team_id: int, year: int) -> Season:
    season = db.query(Season).filter(Season.team_id == team_id, Season.year == year).first()
    if season:
        return season
    season = Season(
        team_id=team_id,
        year=year,
        name=f"{year} Season",
        start_date=date(year, 1, 1),
        end_date=date(year, 12, 31),
    )
    db.add(season)
    db.flush()
    return season


def _team_event_exists(db: Session, competition_id: int, team_id: int) -> bool:
    return (
        db.query(Event.id)
        .filter(Event.competition_id == competition_id, Event.team_id == team_id)
        .first()
        is not None
    )


def apply_callback(
    db: Session,
    organization_id: int,
    items: list,
    *,
    sport: Sport,
    teams: list[Team],
    file_path: str | None = None,
    job_id: int | None = None,
) -> dict:
    """Insert competitions from the processing webhook and schedule them for every team."""
    event_type = (
        db.query(EventType).filter(EventType.category == "competitive").order_by(EventType.id).first()
    )
    year = datetime.now(timezone.utc).year
    inserted = events_created = skipped = 0
    errors: list[str] = []

    for raw in items:
        if not isinstance(raw, dict):
            errors.append(f"Unreadable item: {raw!r}"[:200])
            continue
        item = normalize_callback_item(raw)
        label = item["name"] or "Unnamed Competition"
        reused = False
        try:
            with db.begin_nested():
                location_id = None
                if item["venue_name"] or item["address"]:
                    loc, _ = upsert_location(db, organization_id, {
                        "name": item["venue_name"] or "Unknown Venue",
                        "address": item["address"],
                        "city": item["city"],
                        "state": item["state"],
                        "zip": item["zip"],
                        "venue_type": item["venue_type"],
                        "phone": item["contact_phone"],
                    })
                    location_id = loc.id

                comp = find_competition(db, organization_id, label)
                if comp:
                    reused = True
                else:
                    first, last = split_contact_name(item["contact_name"])
                    comp = Competition(
                        organization_id=organization_id,
                        sport_id=sport.id,
                        name=label,
                        description=callback_description(item) or None,
                        competition_type="tournament",
                        default_location_id=location_id,
                        start_date=parse_date(item["date"]),
                        end_date=parse_date(item["date"]),
                        registration_url=item["registration_url"],
                        contact_first_name=first,
                        contact_last_name=last,
                        contact_phone=item["contact_phone"],
                        contact_email=item["contact_email"],
                    )
                    db.add(comp)
                    db.flush()

                new_events = 0
                if item["date"]:
                    event_date = parse_date(item["date"])
                    weigh_in = parse_weigh_in_time(item["registration_weigh_in_time"])
                    for team in teams:
                        if _team_event_exists(db, comp.id, team.id):
                            continue
                        season = _current_season(db, team.id, year)
                        db.add(Event(
                            competition_id=comp.id,
                            team_id=team.id,
                            organization_id=organization_id,
                            season_id=season.id,
                            name=label,
                            description=f"{item['style']} Tournament" if item["style"] else "Tournament",
                            event_type_id=event_type.id if event_type else None,
                            event_date=event_date,
                            location_id=location_id or comp.default_location_id,
                            weigh_in_time=weigh_in,
                            is_public=True,
                            status="scheduled",
                        ))
                        new_events += 1
                    db.flush()
        except (SQLAlchemyError, ValueError) as e:
            log.error(f"Error processing callback item {label}: {e}")
            errors.append(f"{label}: {e}")
            continue

        if reused:
            skipped += 1
        else:
            inserted += 1
        events_created += new_events

    result = {
        "message": f"Imported {inserted} competitions and {events_created} events",
        "insertedCount": inserted,
        "eventsCreated": events_created,
        "skipped": skipped,
        "errors": errors,
    }

    if job_id is not None:
        job = db.get(ImportJob, job_id)
        if job and job.organization_id == organization_id:
            job.status = "completed"
            job.result = result
            job.completed_at = datetime.now(timezone.utc)
    db.commit()
    log.info(f"Callback for org {organization_id}: {result['message']}, {skipped} existing")

    if file_path:
        delete_upload(file_path)
    return result
