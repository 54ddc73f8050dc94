"""Model → JSON-safe dict conversion for API responses.

Walks the mapped table columns, ISO-formats dates and times, and never
emits password hashes or encrypted credential columns.
"""

from datetime import date, datetime, time

_HIDDEN = {
    "password_hash",
    "openai_api_key",
    "ghl_client_id",
    "ghl_client_secret",
    "ghl_api_key",
}


def _value(v):
    if isinstance(v, (datetime, date, time)):
        return v.isoformat()
    return v


def row_to_dict(obj, *, exclude: tuple[str, ...] = ()) -> dict:
    if obj is None:
        return {}
    return {
        key: _value(getattr(obj, key, None))
        for key in obj.__class__.__table__.columns.keys()
        if key not in _HIDDEN and key not in exclude
    }


def user_summary(user) -> dict:
    """Public profile fields returned by login, signup and /me."""
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "avatar_url": user.avatar_url,
        "platform_role": user.platform_role or "user",
        "timezone": user.timezone,
    }
