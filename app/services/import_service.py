"""
import_service.py — AI text import: file → model-extracted records → rows.

Flow for text files (.txt .csv .json .tsv .rtf):
  1. Text is chunked on line boundaries (~4 chars per token, 50k-token chunks)
  2. Only the first chunk is sent to the model, in JSON mode
  3. Each returned record is inserted in its own savepoint

PDFs are not read here: they are parked in upload storage, an import_jobs
row is opened, and the external processing webhook is notified. Its result
comes back through /api/ai-import-callback.

Business Rules:
- A record failure is reported as "Record N: <reason>" and never stops the batch
- Athletes reuse an existing account with the same email
- An athlete's team must belong to the importing organization
- Competitions with location_* fields get a location (deduplicated);
  with event_date they also get an event, 09:00:00–17:00:00 unless given
- Competition sport falls back to the first sport named like wrestling/grappling

Called by: routers/imports.py
Depends on: utils/openai_client.py, services/competition_import.py,
            services/upload_storage.py, http_client
"""

import logging
import math
from datetime import datetime, time, timezone

import httpx
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..http_client import http
from ..models import (
    AthleteProfile,
    Competition,
    Event,
    EventType,
    ImportJob,
    Location,
    Organization,
    Sport,
    Team,
    User,
    WeightClass,
)
from ..utils.file_validation import format_labels
from ..utils.openai_client import chat_json
from .competition_import import clean, parse_date, parse_time, upsert_location
from .upload_storage import store_upload

log = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
CHUNK_TOKENS = 50_000
MAX_CHUNKS = 1

DEFAULT_START = time(9, 0)
DEFAULT_END = time(17, 0)

ENTITY_SCHEMAS = {
    "athletes": {
        "required": ["first_name", "last_name", "email", "team_id"],
        "optional": [
            "date_of_birth", "phone", "address", "city", "state", "zip",
            "current_weight_class", "preferred_weight_class", "wrestling_style",
            "grade_level", "years_experience",
        ],
        "description": "Wrestling athlete profiles with personal info and wrestling-specific data",
    },
    "locations": {
        "required": ["name"],
        "optional": [
            "address", "city", "state", "zip", "venue_type", "capacity", "phone",
            "website_url", "notes",
        ],
        "description": "Venue/location information for events and competitions",
    },
    "competitions": {
        "required": ["name"],
        "optional": [
            "description", "competition_type", "location_name", "location_address",
            "location_city", "location_state", "location_zip", "event_date", "start_time",
            "end_time", "is_recurring", "recurrence_rule",
        ],
        "description": (
            "Competition/tournament information. If location details (name, address) are "
            "provided, a location will be auto-created. If date/time is provided, an event "
            "will be auto-created."
        ),
    },
    "weight_classes": {
        "required": ["sport_id", "name", "weight"],
        "optional": ["age_group", "state", "city", "expiration_date", "notes"],
        "description": "Weight class definitions for sports",
    },
}


class RecordError(ValueError):
    """A single imported record could not be stored."""


# ── Chunking & prompting ─────────────────────────────────────────────


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def chunk_text(text: str, max_tokens: int = CHUNK_TOKENS) -> list[str]:
    """Split text into chunks of at most max_tokens, breaking only between lines."""
    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(text) <= max_chars:
        return [text]

    chunks: list[str] = []
    current = ""
    for line in text.split("\n"):
        if len(current) + len(line) > max_chars and current:
            chunks.append(current)
            current = line + "\n"
        else:
            current += line + "\n"
    if current:
        chunks.append(current)
    return chunks


def build_system_prompt(
    entity_type: str, filename: str, chunk_num: int, processed: int, total: int
) -> str:
    schema = ENTITY_SCHEMAS[entity_type]
    long_label, _ = format_labels(filename)
    tabular = long_label.startswith(("CSV", "TSV"))
    chunk_note = (
        f" (this is chunk {chunk_num} of {processed}, showing first {processed} of {total} total chunks)"
        if total > 1
        else ""
    )
    parse_note = (
        "Parse the CSV/TSV format - first row is the header with column names, "
        "subsequent rows are data records"
        if tabular
        else "Extract data from the text format provided"
    )
    return f"""You are a data extraction assistant. Extract structured data from the provided file content and format it as JSON.

Entity type: {entity_type}
Description: {schema["description"]}

Required fields: {", ".join(schema["required"])}
Optional fields: {", ".join(schema["optional"])}

File format: {long_label}

Instructions:
1. Extract as many {entity_type} records as you can find in the file{chunk_note}
2. {parse_note}
3. Map data to the specified fields as accurately as possible - be flexible with field name variations (e.g., "Competition Name" maps to "name", "Event" maps to "name", etc.)
4. For any data that doesn't fit the schema, include it in a "notes" field
5. Return a JSON array of objects, where each object represents one {entity_type} record
6. If you cannot extract certain required fields, set them to null and add explanation in notes
7. Even if data is messy or incomplete, extract whatever you can find.

Return ONLY valid JSON in this format:
{{
  "records": [
    {{
      "field_name": "value",
      "notes": "Any additional info that didn't fit standard fields"
    }}
  ]
}}

If the file appears empty or has no extractable data, return {{"records": []}} with an empty array."""


async def extract_records(
    api_key: str, entity_type: str, filename: str, text: str
) -> tuple[list[dict], int, int]:
    """Run the model over the leading chunk(s). Returns (records, chunks processed, total chunks)."""
    chunks = chunk_text(text)
    to_process = chunks[:MAX_CHUNKS]
    log.info(
        f"Processing {filename}: ~{estimate_tokens(text)} tokens, "
        f"{len(chunks)} chunk(s), sending {len(to_process)}"
    )
    if len(chunks) > len(to_process):
        log.warning(f"{filename} has {len(chunks)} chunks, only the first {len(to_process)} are imported")

    _, short_label = format_labels(filename)
    records: list[dict] = []
    for i, chunk in enumerate(to_process, start=1):
        parsed = await chat_json(
            api_key,
            system=build_system_prompt(entity_type, filename, i, len(to_process), len(chunks)),
            prompt=f"Parse this {short_label} file ({filename}) and extract {entity_type} data:\n\n{chunk}",
        )
        if parsed is None:
            log.error(f"No usable response for chunk {i} of {filename}")
            continue
        chunk_records = [r for r in parsed.get("records") or [] if isinstance(r, dict)]
        if not chunk_records:
            log.warning(f"No records extracted from chunk {i} of {filename}")
        records.extend(chunk_records)
    return records, len(to_process), len(chunks)


# ── Record inserts ───────────────────────────────────────────────────


def _int(value) -> int | None:
    text = clean(value)
    return int(float(text)) if text else None


def _insert_athlete(db: Session, org_id: int, record: dict, user: User) -> None:
    email = (clean(record.get("email")) or "").lower()
    first, last = clean(record.get("first_name")), clean(record.get("last_name"))
    if not email or not first or not last:
        raise RecordError("email, first_name and last_name are required")
    team_id = _int(record.get("team_id"))
    team = db.get(Team, team_id) if team_id else None
    if not team or team.organization_id != org_id:
        raise RecordError(f"Team {record.get('team_id')} not found in this organization")

    account = db.query(User).filter(func.lower(User.email) == email).first()
    if not account:
        account = User(email=email, platform_role="user", is_active=True)
        db.add(account)
    account.first_name = first
    account.last_name = last
    account.full_name = f"{first} {last}"
    for field in ("phone", "address", "city", "state", "zip"):
        if clean(record.get(field)):
            setattr(account, field, clean(record.get(field)))
    if record.get("date_of_birth"):
        account.date_of_birth = parse_date(record["date_of_birth"])
    db.flush()

    db.add(AthleteProfile(
        user_id=account.id,
        team_id=team.id,
        current_weight_class=clean(record.get("current_weight_class")),
        preferred_weight_class=clean(record.get("preferred_weight_class")),
        wrestling_style=clean(record.get("wrestling_style")),
        grade_level=clean(record.get("grade_level")),
        years_experience=_int(record.get("years_experience")),
        notes=clean(record.get("notes")),
        is_active=True,
    ))


def _insert_location(db: Session, org_id: int, record: dict, user: User) -> None:
    name = clean(record.get("name"))
    if not name:
        raise RecordError("name is required")
    db.add(Location(
        organization_id=org_id,
        name=name,
        address=clean(record.get("address")),
        city=clean(record.get("city")),
        state=clean(record.get("state")),
        zip=clean(record.get("zip")),
        venue_type=clean(record.get("venue_type")),
        capacity=_int(record.get("capacity")),
        phone=clean(record.get("phone")),
        website_url=clean(record.get("website_url")),
        notes=clean(record.get("notes")),
        country="USA",
    ))


def _fallback_sport_id(db: Session) -> int | None:
    row = (
        db.query(Sport.id)
        .filter(or_(Sport.name.ilike("%wrestling%"), Sport.name.ilike("%grappling%")))
        .order_by(Sport.id)
        .first()
    )
    return row[0] if row else None


def _competition_event_type_id(db: Session) -> int | None:
    row = (
        db.query(EventType.id)
        .filter(or_(EventType.name.ilike("%competition%"), EventType.name.ilike("%tournament%")))
        .order_by(EventType.id)
        .first()
    )
    return row[0] if row else None


def _insert_competition(db: Session, org_id: int, record: dict, user: User) -> None:
    name = clean(record.get("name"))
    if not name:
        raise RecordError("name is required")

    location = None
    if record.get("location_name") or record.get("location_address"):
        location, _ = upsert_location(db, org_id, {
            "name": clean(record.get("location_name")) or f"{name} Venue",
            "address": record.get("location_address"),
            "city": record.get("location_city"),
            "state": record.get("location_state"),
            "zip": record.get("location_zip"),
            "notes": f"Auto-created from competition import: {name}",
        })

    sport_id = _int(record.get("sport_id")) or _fallback_sport_id(db)
    if not sport_id:
        raise RecordError("Could not determine sport_id for competition")

    comp = Competition(
        organization_id=org_id,
        sport_id=sport_id,
        name=name,
        description=clean(record.get("description")),
        competition_type=clean(record.get("competition_type")) or "tournament",
        default_location_id=location.id if location else None,
        is_recurring=bool(record.get("is_recurring")),
        recurrence_rule=clean(record.get("recurrence_rule")),
        notes=clean(record.get("notes")) or (f"Location: {location.name}" if location else None),
    )
    db.add(comp)
    db.flush()

    if not record.get("event_date"):
        return
    event_type_id = _competition_event_type_id(db)
    if not event_type_id:
        log.warning(f"No competition event type; event for '{name}' not created")
        return
    try:
        with db.begin_nested():
            db.add(Event(
                organization_id=org_id,
                competition_id=comp.id,
                name=name,
                event_type_id=event_type_id,
                event_date=parse_date(record["event_date"]),
                start_time=parse_time(record.get("start_time")) or DEFAULT_START,
                end_time=parse_time(record.get("end_time")) or DEFAULT_END,
                location_id=location.id if location else None,
                description=comp.description,
                notes="Auto-created from competition import",
                created_by=user.id,
            ))
            db.flush()
    except (SQLAlchemyError, ValueError) as e:
        log.error(f"Failed to create event for competition '{name}': {e}")


def _insert_weight_class(db: Session, org_id: int, record: dict, user: User) -> None:
    sport_id = _int(record.get("sport_id"))
    name = clean(record.get("name"))
    if not sport_id or not name or clean(record.get("weight")) is None:
        raise RecordError("sport_id, name and weight are required")
    if not db.get(Sport, sport_id):
        raise RecordError(f"Sport {sport_id} not found")
    db.add(WeightClass(
        sport_id=sport_id,
        organization_id=org_id,
        name=name,
        weight=float(record["weight"]),
        age_group=clean(record.get("age_group")),
        state=clean(record.get("state")),
        city=clean(record.get("city")),
        expiration_date=parse_date(record.get("expiration_date")),
        notes=clean(record.get("notes")),
        is_active=True,
        created_by=user.id,
    ))


_INSERTERS = {
    "athletes": _insert_athlete,
    "locations": _insert_location,
    "competitions": _insert_competition,
    "weight_classes": _insert_weight_class,
}


def _reason(e: Exception) -> str:
    orig = getattr(e, "orig", None)
    return str(orig or e).split("\n")[0]


def insert_records(
    db: Session, organization_id: int, entity_type: str, records: list[dict], user: User
) -> dict:
    """Store each record in its own savepoint. Returns success/failure counts."""
    insert = _INSERTERS[entity_type]
    successful = failed = 0
    errors: list[str] = []
    for i, record in enumerate(records, start=1):
        try:
            with db.begin_nested():
                insert(db, organization_id, record, user)
                db.flush()
            successful += 1
        except (SQLAlchemyError, ValueError, TypeError, OverflowError) as e:
            failed += 1
            errors.append(f"Record {i}: {_reason(e)}")
    db.commit()
    return {"successful": successful, "failed": failed, "errors": errors}


# ── PDF hand-off ─────────────────────────────────────────────────────


async def hand_off_pdf(
    db: Session, org: Organization, entity_type: str, filename: str, content: bytes, user: User
) -> dict:
    """Park a PDF for the external processor. Returns {fileUrl, status, jobId} or an error dict."""
    if not settings.import_webhook_url:
        return {"error": "PDF processing is not configured (IMPORT_WEBHOOK_URL is empty)", "status": 500}

    try:
        relative, public_url = store_upload(org.id, filename, content)
    except OSError as e:
        log.error(f"Storage upload error for {filename}: {e}")
        return {"error": f"Failed to upload PDF: {e}", "status": 500}

    job = ImportJob(
        organization_id=org.id,
        entity_type=entity_type,
        file_name=filename,
        file_path=relative,
        file_size=len(content),
        status="processing",
        created_by=user.id,
    )
    db.add(job)
    db.commit()
    db.refresh(job)

    payload = {
        "fileUrl": public_url,
        "fileName": filename,
        "filePath": relative,
        "organizationId": org.id,
        "entityType": entity_type,
        "timestamp": int(datetime.now(timezone.utc).timestamp() * 1000),
        "fileSize": len(content),
        "jobId": job.id,
        "callbackUrl": f"{settings.app_url.rstrip('/')}/api/ai-import-callback",
    }
    failure = None
    try:
        resp = await http.post(settings.import_webhook_url, json=payload, timeout=30)
        if not 200 <= resp.status_code < 300:
            failure = f"Webhook returned status {resp.status_code}"
    except httpx.HTTPError as e:
        failure = str(e) or e.__class__.__name__

    if failure:
        log.error(f"Webhook error for job {job.id}: {failure}")
        job.status = "failed"
        job.result = {"error": failure}
        job.completed_at = datetime.now(timezone.utc)
        db.commit()
        return {"error": f"Failed to send PDF to processing service: {failure}", "status": 500}

    log.info(f"PDF {filename} sent for processing as job {job.id}")
    return {
        "message": (
            "PDF uploaded and sent for processing. The data will be imported "
            "once processing is complete."
        ),
        "fileUrl": public_url,
        "status": "processing",
        "jobId": job.id,
    }
