"""
Validation utilities for the Inventory service.

Provides business rule validation for raw item payloads (JSON or CSV
imports) beyond schema validation. All problems are collected so callers
can report them at once.
"""
from typing import Any, Dict, List, Optional

from .classifier import parse_date
from .exceptions import InvalidDateError, ValidationError

REQUIRED_FIELDS = ("name", "category", "quantity", "expiry_date")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def validate_item_data(data: Dict[str, Any]) -> List[str]:
    """
    Validate a raw item payload.

    Args:
        data: Mapping of item fields

    Returns:
        List of error messages, empty when the payload is valid
    """
    errors = []

    for field in REQUIRED_FIELDS:
        if _is_blank(data.get(field)):
            errors.append(f"{field} is required")

    quantity = data.get("quantity")
    if not _is_blank(quantity):
        value = _as_int(quantity)
        if value is None:
            errors.append(f"quantity must be an integer, got {quantity!r}")
        elif value < 0:
            errors.append("quantity must be non-negative")

    threshold = data.get("low_stock_threshold")
    if not _is_blank(threshold):
        value = _as_int(threshold)
        if value is None:
            errors.append(f"low_stock_threshold must be an integer, got {threshold!r}")
        elif value < 0:
            errors.append("low_stock_threshold must be non-negative")

    expiry = data.get("expiry_date")
    if not _is_blank(expiry):
        try:
            parse_date(expiry, "expiry_date")
        except InvalidDateError:
            errors.append(f"Invalid expiry date: {expiry!r}")

    return errors


def ensure_valid(data: Dict[str, Any]) -> None:
    """
    Raise if a payload fails validation.

    Raises:
        ValidationError: Carrying every failing field's message
    """
    errors = validate_item_data(data)
    if errors:
        raise ValidationError(errors)
