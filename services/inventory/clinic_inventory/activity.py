"""
Recent activity feed for the Inventory service.

Reports which records were touched most recently. The feed does not
distinguish creates from edits; it only knows "last updated".
"""
from typing import Any, Iterable, List

from .classifier import parse_date
from .schemas import ActivityEntry


def recent_activity(records: Iterable[Any], limit: int = 10) -> List[ActivityEntry]:
    """
    Build the activity feed, most recently updated first.

    Args:
        records: Inventory records
        limit: Maximum number of entries to return

    Returns:
        Activity entries ordered by last_updated descending; records updated
        on the same day keep their collection order

    Raises:
        ValueError: If limit is negative
    """
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    ordered = sorted(
        tuple(records),
        key=lambda r: parse_date(r.last_updated, "last_updated"),
        reverse=True,
    )
    return [
        ActivityEntry(
            record_id=getattr(record, "id", None),
            item_name=record.name,
            message=f"{record.name} was updated",
            last_updated=parse_date(record.last_updated, "last_updated"),
        )
        for record in ordered[:limit]
    ]
