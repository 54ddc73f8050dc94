"""Helpers shared by request schemas."""

from pydantic import BaseModel


def missing_fields(body: BaseModel, *names: str) -> list[str]:
    """Names of required fields that are absent or blank on a request body."""
    missing = []
    for name in names:
        value = getattr(body, name, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing
