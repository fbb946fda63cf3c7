"""Reusable input helpers for catalog schemas and services.

Request models are deliberately permissive: required fields default to
None so the services can report missing fields, malformed identifiers and
bad phone numbers in a fixed order, as domain errors rather than generic
422s. These helpers hold the shared rules.
"""

import re
from typing import Any

# Exactly ten ASCII digits
CONTACT_NO_REGEX = re.compile(r"\d{10}", re.ASCII)


def coerce_text(value: Any) -> Any:
    """Trim strings and turn plain integers into their decimal text.

    Anything else is returned untouched for the field's own validation.
    """
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def is_blank(value: Any) -> bool:
    """None and whitespace-only strings count as absent."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def missing_fields(values: dict[str, Any]) -> list[str]:
    """Return the wire names of blank entries, in the given order.

    Args:
        values: {wire_name: value}, ordered as the errors should be reported

    Example:
        missing_fields({"supplierId": "", "productId": "BYNPD00001"})
        → ["supplierId"]
    """
    return [name for name, value in values.items() if is_blank(value)]


def is_valid_contact_no(value: str) -> bool:
    """Validate a contact number: exactly 10 digits, no separators."""
    return CONTACT_NO_REGEX.fullmatch(value) is not None
