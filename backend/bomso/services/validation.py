from __future__ import annotations

from typing import Any

from bomso.domain.errors import ValidationError


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def require_fields(values: dict[str, Any]) -> dict[str, str]:
    """Return stripped values, raising when any of them is missing or blank.

    Keys are the wire names so the error details match what callers sent.
    """
    cleaned = {name: clean_text(value) for name, value in values.items()}
    missing = [name for name, value in cleaned.items() if not value]
    if missing:
        raise ValidationError("Missing required fields", details={"missing": missing})
    return cleaned
