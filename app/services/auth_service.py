"""
auth_service.py — Password hashing, bearer tokens, and credential rules.

Business Rules:
- Passwords are hashed with bcrypt (cost from settings, default 12)
- Tokens are HS256 JWTs carrying {user_id, email, role} and expire after 7 days
- Authorization header must be exactly "Bearer <token>"
- Passwords need 8+ chars with upper, lower, digit, and special character
- Platform role ordering: user < admin < platform_admin < super_admin

Called by: routers/auth.py, dependencies.py, routers/athletes.py
Depends on: config.py (jwt_secret, jwt_algorithm, jwt_expire_days, bcrypt_rounds)
"""

import logging
import re
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from ..config import settings

log = logging.getLogger(__name__)

ROLE_HIERARCHY = {
    "user": 1,
    "admin": 2,
    "platform_admin": 3,
    "super_admin": 4,
}

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ── Passwords ────────────────────────────────────────────────────────


def hash_password(password: str) -> str:
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=settings.bcrypt_rounds),
    ).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        log.warning("Stored password hash is malformed")
        return False


def validate_password_strength(password: str) -> list[str]:
    """Return a list of unmet password rules (empty when the password is acceptable)."""
    errors = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")
    if not re.search(r"[^A-Za-z0-9]", password):
        errors.append("Password must contain at least one special character")
    return errors


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


# ── Tokens ───────────────────────────────────────────────────────────


def create_token(user_id: int, email: str, role: str) -> str:
    payload = {
        "user_id": user_id,
        "email": email,
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict | None:
    """Verify a token. Returns its payload, or None if expired or invalid."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def extract_bearer_token(auth_header: str | None) -> str | None:
    if not auth_header:
        return None
    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


# ── Roles ────────────────────────────────────────────────────────────


def has_role_level(role: str | None, required: str) -> bool:
    """True when `role` sits at or above `required` in the platform hierarchy."""
    return ROLE_HIERARCHY.get(role or "", 0) >= ROLE_HIERARCHY.get(required, 0)
