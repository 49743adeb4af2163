"""
Pure helpers for dashboard figures and list filters.

They work on records already loaded (ORM rows or response schemas) and never
touch the database.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.models.shared.enums import PayrollStatus
from app.services.hr.payroll_calculator import breakdown_for_record


def _status_of(record: Any):
    return getattr(record, "status", None)


def sum_net_payable_by_status(records: Iterable[Any]) -> Dict[PayrollStatus, int]:
    """Net payable per payroll status, every status present even when zero"""
    totals = {status: 0 for status in PayrollStatus}
    for record in records:
        status = PayrollStatus(_status_of(record))
        # Recomputed so a drifted stored total never reaches the dashboard
        totals[status] += breakdown_for_record(record).net_payable
    return totals


def count_by_status(records: Iterable[Any], statuses: Optional[Iterable[Any]] = None) -> Dict[Any, int]:
    counts: Dict[Any, int] = {status: 0 for status in (statuses or ())}
    for record in records:
        status = _status_of(record)
        counts[status] = counts.get(status, 0) + 1
    return counts


def filter_by_status(records: Iterable[Any], status: Any) -> List[Any]:
    return [record for record in records if _status_of(record) == status]


def _resolve(record: Any, path: str) -> Any:
    value = record
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def filter_by_free_text(records: Iterable[Any], query: Optional[str], fields: Sequence[str]) -> List[Any]:
    """
    Case-insensitive substring match across the given fields.

    Fields may be dotted paths that follow relations, e.g. "employee.last_name".
    A blank query keeps every record.
    """
    records = list(records)
    needle = (query or "").strip().lower()
    if not needle:
        return records

    matches = []
    for record in records:
        for field in fields:
            value = _resolve(record, field)
            if value is None:
                continue
            text = value.value if hasattr(value, "value") else value
            if needle in str(text).lower():
                matches.append(record)
                break
    return matches
