"""
routers/imports.py — AI-powered data import endpoints.

  POST /api/ai-import          — text/CSV/JSON/RTF via the text model; PDFs go to the webhook
  POST /api/ai-import-direct   — competition flyers/schedules via the vision model
  POST /api/ai-import-callback — results posted back by the PDF processing webhook

Business Rules:
- Upload endpoints: caller must be platform admin or an org admin, and must
  manage the target organization
- The organization needs its own OpenAI key; there is no platform fallback
- Uploads are capped at settings.max_import_size_mb
- The callback is unauthenticated unless IMPORT_CALLBACK_SECRET is set, in
  which case X-Callback-Secret must match
- All three endpoints share the import rate limit

Called by: main.py (router mount)
Depends on: services/import_service.py, services/competition_import.py,
            services/credential_service.py, utils/openai_client.py
"""

import base64
import hmac
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import can_manage_org, require_import_admin
from ..models import Organization, Team, User
from ..rate_limit import IMPORT_LIMIT, limiter
from ..schemas.imports import (
    ENTITY_TYPES,
    CallbackImportResult,
    DirectImportResult,
    ImportCallbackRequest,
    TextImportResult,
)
from ..services.activity_service import log_activity
from ..services.competition_import import (
    VISION_PROMPT,
    apply_callback,
    import_vision_items,
    wrestling_sport,
)
from ..services.credential_service import get_org_credential
from ..services.import_service import extract_records, hand_off_pdf, insert_records
from ..utils.file_validation import (
    check_size,
    extract_text,
    validate_image,
    validate_import_file,
)
from ..utils.openai_client import extract_json_array, vision_text

log = logging.getLogger(__name__)

router = APIRouter(tags=["imports"])


async def _read_import_request(
    db: Session,
    user: User,
    file: UploadFile | None,
    entity_type: str | None,
    organization_id: str | None,
) -> tuple[Organization, str, bytes, str]:
    """Common checks for both upload endpoints. Returns (org, entity_type, content, api_key)."""
    if file is None or not entity_type or not organization_id:
        raise HTTPException(400, "File, entity_type, and organization_id are required")
    try:
        org_id = int(organization_id)
    except ValueError:
        raise HTTPException(400, "organization_id must be an integer")

    if not can_manage_org(db, user, org_id):
        raise HTTPException(403, "You do not have permission to import data for this organization")
    org = db.get(Organization, org_id)
    if not org:
        raise HTTPException(404, "Organization not found")

    api_key = get_org_credential(db, org.id, "openai_api_key")
    if not api_key:
        raise HTTPException(
            400,
            "Organization does not have an OpenAI API key configured. "
            "Please configure it in organization settings.",
        )

    content = await file.read()
    reason = check_size(content, settings.max_import_size_mb * 1024 * 1024)
    if reason:
        raise HTTPException(400, reason)
    return org, entity_type, content, api_key


# ── Text import ──────────────────────────────────────────────────────


@router.post("/api/ai-import")
@limiter.limit(IMPORT_LIMIT)
async def ai_import(
    request: Request,
    file: UploadFile | None = File(None),
    entity_type: str | None = Form(None),
    organization_id: str | None = Form(None),
    user: User = Depends(require_import_admin),
    db: Session = Depends(get_db),
):
    if entity_type and entity_type not in ENTITY_TYPES:
        raise HTTPException(
            400, "Invalid entity_type. Must be athletes, locations, competitions, or weight_classes"
        )
    org, entity_type, content, api_key = await _read_import_request(
        db, user, file, entity_type, organization_id
    )
    filename = file.filename or "upload"

    ok, detail = validate_import_file(content, filename)
    if not ok:
        raise HTTPException(400, detail)

    if detail == ".pdf":
        result = await hand_off_pdf(db, org, entity_type, filename, content, user)
        if "error" in result:
            raise HTTPException(result["status"], result["error"])
        return result

    try:
        text = extract_text(content, filename)
    except (UnicodeDecodeError, ValueError) as e:
        raise HTTPException(
            400,
            f"Failed to parse file: {e}. The file may be corrupted or in an unsupported format.",
        )

    records, processed, total_chunks = await extract_records(api_key, entity_type, filename, text)
    if not records:
        raise HTTPException(400, "No records could be extracted from the file")

    counts = insert_records(db, org.id, entity_type, records, user)
    message = f"Imported {counts['successful']} of {len(records)} records"
    if total_chunks > processed:
        message += (
            f". Note: File was very large - processed first {processed} of {total_chunks} "
            "sections. Consider splitting the file for complete import."
        )
    log_activity(
        db, user.id, "import.completed", entity_type, None,
        organization_id=org.id,
        new_values={"file": filename, "successful": counts["successful"], "failed": counts["failed"]},
    )
    return TextImportResult(
        message=message,
        total=len(records),
        chunksProcessed=processed,
        totalChunks=total_chunks,
        **counts,
    ).model_dump()


# ── Vision import ────────────────────────────────────────────────────


@router.post("/api/ai-import-direct", response_model=DirectImportResult)
@limiter.limit(IMPORT_LIMIT)
async def ai_import_direct(
    request: Request,
    file: UploadFile | None = File(None),
    entity_type: str | None = Form(None),
    organization_id: str | None = Form(None),
    user: User = Depends(require_import_admin),
    db: Session = Depends(get_db),
):
    if entity_type and entity_type != "competitions":
        raise HTTPException(400, 'Currently only "competitions" entity type is supported')
    org, _, content, api_key = await _read_import_request(
        db, user, file, entity_type, organization_id
    )
    filename = file.filename or "upload"

    ok, image_format = validate_image(content, filename)
    if not ok:
        raise HTTPException(400, image_format)

    log.info(f"Processing {filename} with the vision model for org {org.id}")
    reply = await vision_text(
        api_key,
        prompt=VISION_PROMPT,
        image_b64=base64.b64encode(content).decode("ascii"),
        image_format=image_format,
    )
    if reply is None:
        raise HTTPException(500, "Failed to process image with AI")
    items = extract_json_array(reply)
    if items is None:
        raise HTTPException(
            500, "Failed to parse AI response. The image may not contain competition data."
        )
    if not items:
        raise HTTPException(400, "No competition data found in the image")

    sport = wrestling_sport(db)
    if not sport:
        raise HTTPException(500, "Wrestling sport not found in database")

    result = import_vision_items(db, org.id, sport.id, items)
    log_activity(
        db, user.id, "import.completed", "competitions", None,
        organization_id=org.id,
        new_values={"file": filename, "inserted": result["inserted"], "skipped": result["skipped"]},
    )
    return result


# ── Webhook callback ─────────────────────────────────────────────────


@router.post("/api/ai-import-callback", response_model=CallbackImportResult)
@limiter.limit(IMPORT_LIMIT)
def ai_import_callback(
    request: Request,
    body: ImportCallbackRequest,
    db: Session = Depends(get_db),
):
    if settings.import_callback_secret:
        supplied = request.headers.get("x-callback-secret", "")
        if not hmac.compare_digest(supplied, settings.import_callback_secret):
            log.warning("Import callback rejected: bad X-Callback-Secret")
            raise HTTPException(401, "Invalid callback secret")

    if not body.organizationId or not body.entityType or not body.data:
        raise HTTPException(400, "Missing required fields: organizationId, entityType, or data")
    if body.entityType != "competitions" or not isinstance(body.data, list):
        raise HTTPException(400, "Unsupported entity type or invalid data format")

    org = db.get(Organization, body.organizationId)
    if not org:
        raise HTTPException(404, "Organization not found")
    sport = wrestling_sport(db)
    if not sport:
        raise HTTPException(400, "Wrestling sport not found in database.")
    teams = (
        db.query(Team)
        .filter(Team.organization_id == org.id, Team.is_active.is_(True))
        .order_by(Team.id)
        .all()
    )
    if not teams:
        raise HTTPException(400, "No teams found for this organization.")

    log.info(f"Import callback for org {org.id}: {len(body.data)} item(s), job {body.jobId}")
    return apply_callback(
        db,
        org.id,
        body.data,
        sport=sport,
        teams=teams,
        file_path=body.filePath,
        job_id=body.jobId,
    )
