"""
Summaries and partitions over a collection of inventory records.

Every function takes a snapshot of the records it is given and never
mutates them.
"""
from typing import Any, Dict, Iterable, List, Optional, Union

from . import classifier
from .config import EngineConfig
from .schemas import Stats, Status

SEARCH_FIELDS = ("name", "category", "batch_number", "description")


def compute_stats(records: Iterable[Any], config: EngineConfig, reference_date) -> Stats:
    """
    Count records per stock-level bucket.

    out_of_stock, expired, low_stock and in_stock are mutually exclusive and
    always sum to total. A record whose status is "expiring" is counted in
    low_stock or in_stock by its quantity. The expiring counter is reported
    on its own and never includes expired records.

    Args:
        records: Inventory records
        config: Engine configuration
        reference_date: The "today" to classify against

    Returns:
        Stats with all counters filled in
    """
    stats = Stats()
    for record in tuple(records):
        stats.total += 1
        status = classifier.classify_status(record, config, reference_date)
        if status == Status.OUT_OF_STOCK:
            stats.out_of_stock += 1
        elif status == Status.EXPIRED:
            stats.expired += 1
        elif record.quantity <= classifier.effective_threshold(record, config):
            stats.low_stock += 1
        else:
            stats.in_stock += 1

        if _is_expiring(record, config, reference_date):
            stats.expiring += 1
    return stats


def _is_expiring(record: Any, config: EngineConfig, reference_date) -> bool:
    return (
        classifier.is_expiring_soon(record.expiry_date, reference_date, config.expiry_warning_days)
        and not classifier.is_expired(record.expiry_date, reference_date)
    )


def filter_by_status(
    records: Iterable[Any],
    status: Optional[Union[Status, str]],
    config: EngineConfig,
    reference_date,
) -> List[Any]:
    """
    Select records by computed status.

    "expiring" selects every record inside the warning window that has not
    expired, even when out of stock or low stock would otherwise take
    precedence.

    Args:
        records: Inventory records
        status: Status to keep; falsy returns every record
        config: Engine configuration
        reference_date: The "today" to classify against

    Returns:
        Matching records in collection order

    Raises:
        ValueError: If status is not a known Status value
    """
    records = list(records)
    if not status:
        return records
    status = Status(status)

    if status == Status.EXPIRING:
        return [r for r in records if _is_expiring(r, config, reference_date)]
    return [r for r in records if classifier.classify_status(r, config, reference_date) == status]


def filter_by_category(records: Iterable[Any], category: Optional[str]) -> List[Any]:
    """Exact, case-sensitive category match. An empty category keeps every record."""
    records = list(records)
    if not category:
        return records
    return [r for r in records if r.category == category]


def search_items(records: Iterable[Any], query: Optional[str]) -> List[Any]:
    """
    Case-insensitive substring search over name, category, batch number and description.

    Args:
        records: Inventory records
        query: Search text; empty returns every record

    Returns:
        Records where any searched field contains the query, in collection order
    """
    records = list(records)
    if not query:
        return records
    term = query.lower()

    def matches(record) -> bool:
        for field in SEARCH_FIELDS:
            value = getattr(record, field, None)
            if value and term in str(value).lower():
                return True
        return False

    return [r for r in records if matches(r)]


def group_by_status(records: Iterable[Any], config: EngineConfig, reference_date) -> Dict[Status, List[Any]]:
    """Partition records by computed status; every Status is present as a key."""
    groups = {status: [] for status in Status}
    for record in tuple(records):
        groups[classifier.classify_status(record, config, reference_date)].append(record)
    return groups


def low_stock_items(records: Iterable[Any], config: EngineConfig) -> List[Any]:
    """Records with 0 < quantity <= effective threshold, regardless of expiry."""
    return [
        r for r in tuple(records)
        if 0 < r.quantity <= classifier.effective_threshold(r, config)
    ]


def expiring_soon_items(records: Iterable[Any], config: EngineConfig, reference_date) -> List[Any]:
    return filter_by_status(records, Status.EXPIRING, config, reference_date)


def expired_items(records: Iterable[Any], reference_date) -> List[Any]:
    return [r for r in tuple(records) if classifier.is_expired(r.expiry_date, reference_date)]


def apply_filters(
    records: Iterable[Any],
    config: EngineConfig,
    reference_date,
    search: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[Union[Status, str]] = None,
) -> List[Any]:
    """
    Apply search, then category, then status filtering.

    Args:
        records: Inventory records
        config: Engine configuration
        reference_date: The "today" to classify against
        search: Optional search text
        category: Optional category label
        status: Optional status

    Returns:
        Records passing every given filter, in collection order
    """
    result = search_items(records, search)
    result = filter_by_category(result, category)
    return filter_by_status(result, status, config, reference_date)
