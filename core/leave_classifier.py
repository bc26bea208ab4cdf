from datetime import date, timedelta
from typing import Collection, Iterable, Optional

from core.leave_models import (
    BLOCKING_STATUSES,
    ClassificationResult,
    LeaveRequest,
)

SUNDAY = 6


def is_already_on_leave(day: date, target: LeaveRequest, all_leaves: Iterable[LeaveRequest]) -> bool:
    """
    True when another pending/approved request already covers `day`.
    The target never blocks itself; the first match is enough.
    """
    for other in all_leaves:
        if target.id is not None and other.id == target.id:
            continue
        if other.status not in BLOCKING_STATUSES:
            continue
        if other.covers(day):
            return True
    return False


def classify(
    target: LeaveRequest,
    all_leaves: Iterable[LeaveRequest],
    holidays: Collection[date],
) -> Optional[ClassificationResult]:
    """
    Split every day of a multi-day request into exactly one bucket:
    - Sunday
    - Holiday
    - already on leave (another pending/approved request)
    - countable leave day

    Returns None for single-day requests or when the range is incomplete.
    A range with from_date > to_date yields zero totals.
    """
    if not target.is_multi_day or target.from_date is None or target.to_date is None:
        return None

    others = list(all_leaves)
    result = ClassificationResult()

    current = target.from_date
    while current <= target.to_date:
        result.total_days += 1

        if current.weekday() == SUNDAY:
            result.sundays += 1
        elif current in holidays:
            result.holidays += 1
        elif is_already_on_leave(current, target, others):
            result.already_leave += 1
        else:
            result.countable_leave_days += 1

        current += timedelta(days=1)

    return result
