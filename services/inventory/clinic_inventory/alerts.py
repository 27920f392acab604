"""
Alert detection and ranking for the Inventory service.

Each detector scans the whole collection independently, so one record can
raise several alerts. The combined list is ranked by priority and keeps
detector order (out of stock, critical low, expired, expiring soon) within
a priority.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from . import classifier
from .config import EngineConfig
from .schemas import Alert, AlertKind, Priority

logger = logging.getLogger(__name__)

PRIORITY_RANK = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}

ACTION_LABELS = {
    AlertKind.OUT_OF_STOCK: "Restock Now",
    AlertKind.CRITICAL_LOW: "Update Stock",
    AlertKind.EXPIRED: "Remove Item",
    AlertKind.EXPIRING_SOON: "Update Item",
}


def format_date(value) -> str:
    """Format a date as e.g. "Aug 5, 2025"."""
    d = classifier.parse_date(value)
    return f"{d:%b} {d.day}, {d.year}"


def _alert(kind: AlertKind, record: Any, message: str, priority: Priority) -> Alert:
    return Alert(
        kind=kind,
        record=record,
        record_id=getattr(record, "id", None),
        item_name=record.name,
        message=message,
        priority=priority,
        action_label=ACTION_LABELS[kind],
    )


def _out_of_stock(records, config, reference_date) -> List[Alert]:
    return [
        _alert(AlertKind.OUT_OF_STOCK, r, f"{r.name} is out of stock", Priority.HIGH)
        for r in records
        if r.quantity == 0
    ]


def _critical_low(records, config, reference_date) -> List[Alert]:
    alerts = []
    for r in records:
        limit = classifier.effective_threshold(r, config) // 2
        if 0 < r.quantity <= limit:
            message = f"{r.name} has critically low stock ({r.quantity} remaining)"
            alerts.append(_alert(AlertKind.CRITICAL_LOW, r, message, Priority.HIGH))
    return alerts


def _expired(records, config, reference_date) -> List[Alert]:
    return [
        _alert(
            AlertKind.EXPIRED,
            r,
            f"{r.name} has expired on {format_date(r.expiry_date)}",
            Priority.HIGH,
        )
        for r in records
        if classifier.is_expired(r.expiry_date, reference_date)
    ]


def _expiring_soon(records, config, reference_date) -> List[Alert]:
    alerts = []
    for r in records:
        days = classifier.days_until_expiry(r.expiry_date, reference_date)
        if 0 < days <= config.critical_expiry_days:
            unit = "day" if days == 1 else "days"
            message = f"{r.name} expires in {days} {unit}"
            alerts.append(_alert(AlertKind.EXPIRING_SOON, r, message, Priority.MEDIUM))
    return alerts


# Order matters: it is the tie-break within a priority.
DETECTORS = (
    _out_of_stock,
    _critical_low,
    _expired,
    _expiring_soon,
)


def generate_alerts(records: Iterable[Any], config: EngineConfig, reference_date) -> List[Alert]:
    """
    Detect and rank alerts across a record collection.

    Args:
        records: Inventory records
        config: Engine configuration
        reference_date: The "today" to evaluate against

    Returns:
        Alerts sorted by priority (high first); ties keep detector order,
        then collection order

    Raises:
        InvalidDateError: If a record carries an unreadable expiry date
    """
    snapshot = tuple(records)
    alerts = []
    for detector in DETECTORS:
        alerts.extend(detector(snapshot, config, reference_date))

    # sorted() is stable
    ranked = sorted(alerts, key=lambda a: PRIORITY_RANK[a.priority], reverse=True)
    logger.debug(f"Generated {len(ranked)} alerts for {len(snapshot)} records")
    return ranked


def filter_alerts(
    alerts: Iterable[Alert],
    kind: Optional[str] = None,
    priority: Optional[str] = None,
) -> List[Alert]:
    """
    Narrow an alert list by kind and/or priority.

    Args:
        alerts: Alerts to filter
        kind: Alert kind to keep; None or "all" keeps every kind
        priority: Priority to keep; None or "all" keeps every priority

    Returns:
        Matching alerts in their original order

    Raises:
        ValueError: If kind or priority is not a known value
    """
    alerts = list(alerts)
    if kind and kind != "all":
        kind = AlertKind(kind)
        alerts = [a for a in alerts if a.kind == kind]
    if priority and priority != "all":
        priority = Priority(priority)
        alerts = [a for a in alerts if a.priority == priority]
    return alerts


def count_alerts(alerts: Iterable[Alert]) -> Dict[str, int]:
    """Totals per alert kind and per priority, plus the overall total."""
    counts = {"total": 0}
    for kind in AlertKind:
        counts[kind.value] = 0
    for priority in Priority:
        counts[priority.value] = 0
    for alert in alerts:
        counts["total"] += 1
        counts[alert.kind.value] += 1
        counts[alert.priority.value] += 1
    return counts


def expiry_watchlist(records: Iterable[Any], config: EngineConfig, reference_date) -> List[Any]:
    """
    Expired and expiring records, most urgent first.

    Args:
        records: Inventory records
        config: Engine configuration (its warning window bounds the list)
        reference_date: The "today" to evaluate against

    Returns:
        Records with days until expiry <= the warning window, sorted ascending
        by days until expiry so expired items lead
    """
    watched = []
    for r in tuple(records):
        days = classifier.days_until_expiry(r.expiry_date, reference_date)
        if days <= config.expiry_warning_days:
            watched.append((days, r))
    watched.sort(key=lambda pair: pair[0])
    return [r for _, r in watched]
