"""
Per-record classification for the Inventory service.

Pure functions mapping a record, the engine configuration and an explicit
reference date to derived facts: days until expiry, expiry flags, the
effective low stock threshold and the record's status.

An item is treated as expired from the first moment of its expiry day, so a
record expiring on the reference day is ``expired`` and never ``expiring``.
"""
from datetime import date, datetime
from typing import Any, Union

from .config import EngineConfig
from .exceptions import InvalidDateError
from .schemas import Status

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike, field: str = "date") -> date:
    """
    Normalize a date-like value to a calendar date.

    Args:
        value: A date, a datetime (time of day is dropped) or an ISO 8601 string
        field: Field name used in the error message

    Returns:
        The calendar date

    Raises:
        InvalidDateError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise InvalidDateError(value, field)


def days_until_expiry(expiry_date: DateLike, reference_date: DateLike) -> int:
    """Whole calendar days from the reference day to the expiry day; negative once past."""
    expiry = parse_date(expiry_date, "expiry_date")
    reference = parse_date(reference_date, "reference_date")
    return (expiry - reference).days


def is_expired(expiry_date: DateLike, reference_date: DateLike) -> bool:
    return days_until_expiry(expiry_date, reference_date) <= 0


def is_expiring_soon(expiry_date: DateLike, reference_date: DateLike, warning_days: int) -> bool:
    days = days_until_expiry(expiry_date, reference_date)
    return 0 < days <= warning_days


def effective_threshold(record: Any, config: EngineConfig) -> int:
    """
    Resolve the low stock threshold for a record.

    Args:
        record: Inventory record
        config: Engine configuration supplying the global default

    Returns:
        The record's own threshold if set, otherwise the configured default
    """
    threshold = getattr(record, "low_stock_threshold", None)
    if threshold is None:
        return config.default_low_stock_threshold
    return threshold


def classify_status(record: Any, config: EngineConfig, reference_date: DateLike) -> Status:
    """
    Compute the status of a single record.

    The checks run in a fixed order and the first match wins: out of stock,
    expired, expiring, low stock, in stock.

    Args:
        record: Inventory record
        config: Engine configuration
        reference_date: The "today" to classify against

    Returns:
        Status of the record

    Raises:
        InvalidDateError: If the record's expiry date or the reference date is invalid
    """
    if record.quantity == 0:
        return Status.OUT_OF_STOCK
    if is_expired(record.expiry_date, reference_date):
        return Status.EXPIRED
    if is_expiring_soon(record.expiry_date, reference_date, config.expiry_warning_days):
        return Status.EXPIRING
    if record.quantity <= effective_threshold(record, config):
        return Status.LOW_STOCK
    return Status.IN_STOCK
