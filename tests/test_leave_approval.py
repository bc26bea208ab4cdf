from datetime import date

from core.leave_approval import decide_leave, list_notifications, mark_notification_read
from core.leave_calculation import get_leave
from core.leave_models import LeaveStatus

MON = date(2025, 3, 3)


def test_approve_updates_status_and_notifies(store, add_leave):
    leave = add_leave(from_date=MON, to_date=date(2025, 3, 5))

    ok, message = decide_leave(store, leave.id, "approved")

    assert ok, message
    assert get_leave(store, leave.id).status == LeaveStatus.APPROVED

    [note] = list_notifications(store, "member-1")
    assert note["title"] == "Leave Approved"
    assert note["type"] == "leave_approved"
    assert note["related_id"] == leave.id
    assert note["related_type"] == "leave"
    assert "From: 2025-03-03 | To: 2025-03-05" in note["message"]
    assert note["message"].endswith("has been approved.")


def test_reject_single_day(store, add_leave):
    leave = add_leave(category="single-day", leave_date=MON, leave_type="Sick Leave")

    ok, _ = decide_leave(store, leave.id, "rejected")

    assert ok
    [note] = list_notifications(store, "member-1")
    assert note["title"] == "Leave Rejected"
    assert note["message"] == (
        "Your leave request (Type: Single Day | Date: 2025-03-03 | Leave Type: Sick Leave) has been declined."
    )


def test_same_status_is_refused(store, add_leave):
    leave = add_leave(category="single-day", leave_date=MON, status="approved")

    ok, message = decide_leave(store, leave.id, "approved")

    assert not ok
    assert message == "Leave is already approved"
    assert list_notifications(store, "member-1") == []


def test_unknown_leave_and_bad_status(store, add_leave):
    leave = add_leave(category="single-day", leave_date=MON)

    assert decide_leave(store, "missing", "approved") == (False, "Leave not found")
    ok, _ = decide_leave(store, leave.id, "pending")
    assert not ok
    assert get_leave(store, leave.id).status == LeaveStatus.PENDING


def test_approved_leave_can_still_be_rejected(store, add_leave):
    leave = add_leave(category="single-day", leave_date=MON)

    decide_leave(store, leave.id, "approved")
    ok, _ = decide_leave(store, leave.id, "rejected")

    assert ok
    assert len(list_notifications(store, "member-1")) == 2


def test_mark_notification_read(store, add_leave):
    leave = add_leave(category="single-day", leave_date=MON)
    decide_leave(store, leave.id, "approved")
    [note] = list_notifications(store, "member-1", unread_only=True)

    assert mark_notification_read(store, note["id"])
    assert list_notifications(store, "member-1", unread_only=True) == []
    assert not mark_notification_read(store, "missing")
