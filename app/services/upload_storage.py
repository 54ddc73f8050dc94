"""
upload_storage.py — Temporary storage for files handed to the import webhook.

Files land under settings.upload_dir as ai-imports/<org_id>/<timestamp>-<name>
and are served from settings.upload_public_url. The callback deletes them
once their data has been imported.

Business Rules:
- Stored names are reduced to a safe basename; no caller-controlled directories
- Deletion only ever touches paths inside upload_dir
- A missing file on delete is not an error

Called by: services/import_service.py, services/competition_import.py
Depends on: config
"""

import logging
import re
import time
from pathlib import Path

from ..config import settings

log = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def _root() -> Path:
    return Path(settings.upload_dir).resolve()


def _safe_name(filename: str) -> str:
    name = _UNSAFE.sub("_", Path(filename or "upload").name).strip("._")
    return name or "upload"


def store_upload(organization_id: int, filename: str, content: bytes) -> tuple[str, str]:
    """Write an upload to disk. Returns (relative path, public URL)."""
    timestamp = int(time.time() * 1000)
    relative = f"ai-imports/{organization_id}/{timestamp}-{_safe_name(filename)}"
    target = _root() / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    log.info(f"Stored upload {relative} ({len(content)} bytes)")
    return relative, f"{settings.upload_public_url.rstrip('/')}/{relative}"


def delete_upload(relative_path: str) -> bool:
    """Remove a stored upload. Returns True if a file was deleted."""
    root = _root()
    target = (root / relative_path).resolve()
    if root not in target.parents:
        log.warning(f"Refusing to delete path outside upload dir: {relative_path}")
        return False
    try:
        target.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        log.error(f"Error deleting uploaded file {relative_path}: {e}")
        return False
    log.info(f"Deleted uploaded file: {relative_path}")
    return True
