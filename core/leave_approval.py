import logging

from core.leave_calculation import get_leave
from core.leave_models import LeaveStatus

logger = logging.getLogger(__name__)

DECISIONS = (LeaveStatus.APPROVED.value, LeaveStatus.REJECTED.value)


def decide_leave(store, leave_id: str, status: str):
    """
    Approve or reject a leave and notify the requester.
    Returns (ok, message).
    """
    if status not in DECISIONS:
        return False, f"Invalid decision: {status}"

    leave = get_leave(store, leave_id)
    if leave is None:
        return False, "Leave not found"

    # only proceed if the status is actually changing
    if leave.status.value == status:
        return False, f"Leave is already {status}"

    store.update("leaves", leave_id, {"status": status})

    approved = status == LeaveStatus.APPROVED.value
    verb = "approved" if approved else "declined"
    store.insert("notifications", {
        "user_id": leave.user_id,
        "title": "Leave Approved" if approved else "Leave Rejected",
        "message": f"Your leave request ({leave.describe()}) has been {verb}.",
        "type": "leave_approved" if approved else "leave_rejected",
        "related_id": leave_id,
        "related_type": "leave",
    })

    logger.info("Leave %s %s (was %s)", leave_id, status, leave.status.value)
    return True, f"Leave {status}"


def list_notifications(store, user_id: str, unread_only: bool = False) -> list[dict]:
    filters = {"user_id": user_id}
    if unread_only:
        filters["is_read"] = 0
    return store.select("notifications", order_by="created_at", descending=True, **filters)


def mark_notification_read(store, notification_id: str) -> bool:
    return store.update("notifications", notification_id, {"is_read": 1}) is not None
