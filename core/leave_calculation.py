from datetime import date

from core.holiday import load_holidays
from core.leave_classifier import classify
from core.leave_models import (
    ClassificationResult,
    LeaveCategory,
    LeaveRequest,
    LeaveStatus,
)

TABLE = "leaves"


def get_leave(store, leave_id: str) -> LeaveRequest | None:
    row = store.get(TABLE, leave_id)
    return LeaveRequest.from_row(row) if row else None


def list_leaves(store, status: str | None = None, user_id: str | None = None) -> list[LeaveRequest]:
    filters = {}
    if status:
        filters["status"] = LeaveStatus(status).value
    if user_id:
        filters["user_id"] = user_id

    rows = store.select(TABLE, order_by="created_at", descending=True, **filters)
    return [LeaveRequest.from_row(r) for r in rows]


def _check_shape(category, leave_date, from_date, to_date):
    category = LeaveCategory(category)

    if category == LeaveCategory.MULTI_DAY:
        if from_date is None or to_date is None:
            raise ValueError("Multi-day leave needs both from_date and to_date")
        if from_date > to_date:
            raise ValueError("to_date cannot be earlier than from_date")
        leave_date = None
    else:
        if leave_date is None:
            raise ValueError("Single-day leave needs leave_date")
        from_date = to_date = None

    return {
        "category": category.value,
        "leave_date": leave_date.isoformat() if leave_date else None,
        "from_date": from_date.isoformat() if from_date else None,
        "to_date": to_date.isoformat() if to_date else None,
    }


def create_leave(
    store,
    user_id: str,
    leave_type: str,
    category: str,
    leave_date: date | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    reason: str | None = None,
) -> LeaveRequest:
    row = store.insert(TABLE, {
        "user_id": user_id,
        "leave_type": leave_type,
        "reason": reason,
        "status": LeaveStatus.PENDING.value,
        **_check_shape(category, leave_date, from_date, to_date),
    })
    return LeaveRequest.from_row(row)


EDITABLE = ("leave_type", "category", "leave_date", "from_date", "to_date", "reason")


def update_leave(store, leave_id: str, **values) -> LeaveRequest | None:
    """
    Edit a stored request. Changing the category drops the dates of the
    other shape. Status changes go through decide_leave instead.
    """
    unknown = [k for k in values if k not in EDITABLE]
    if unknown:
        raise ValueError(f"Cannot edit: {', '.join(unknown)}")

    leave = get_leave(store, leave_id)
    if leave is None:
        return None

    merged = leave.model_dump()
    merged.update(values)
    changes = _check_shape(merged["category"], merged["leave_date"], merged["from_date"], merged["to_date"])
    changes["leave_type"] = merged["leave_type"]
    changes["reason"] = merged["reason"]

    row = store.update(TABLE, leave_id, changes)
    return LeaveRequest.from_row(row)


def delete_leave(store, leave_id: str) -> bool:
    return store.delete(TABLE, leave_id)


def _breakdown(store, target: LeaveRequest) -> ClassificationResult | None:
    if not target.is_multi_day or target.from_date is None or target.to_date is None:
        return None

    all_leaves = list_leaves(store)
    holidays = load_holidays(store, target.from_date, target.to_date)
    return classify(target, all_leaves, holidays)


def get_leave_breakdown(store, leave_id: str) -> ClassificationResult | None:
    """
    Day breakdown of a stored leave against the current snapshot of
    leave requests and company holidays. None for unknown or single-day leaves.
    """
    target = get_leave(store, leave_id)
    if target is None:
        return None
    return _breakdown(store, target)


def preview_breakdown(store, user_id: str, from_date: date, to_date: date,
                      leave_id: str | None = None) -> ClassificationResult | None:
    """Breakdown for a range that has not been saved yet."""
    target = LeaveRequest(
        id=leave_id,
        user_id=user_id,
        category=LeaveCategory.MULTI_DAY,
        from_date=from_date,
        to_date=to_date,
        leave_type="preview",
    )
    return _breakdown(store, target)


def chargeable_days(leave: LeaveRequest, result: ClassificationResult | None) -> int:
    if not leave.is_multi_day:
        return 1
    return result.countable_leave_days if result else 0
