from datetime import date

import pytest

from core.holiday import add_holiday
from core.leave_calculation import (
    chargeable_days,
    create_leave,
    delete_leave,
    get_leave,
    get_leave_breakdown,
    list_leaves,
    preview_breakdown,
    update_leave,
)
from core.leave_models import LeaveCategory, LeaveStatus

MON = date(2025, 3, 3)


def test_create_multi_day_leave(store):
    leave = create_leave(
        store, "member-1", "Casual Leave", "multi-day",
        from_date=MON, to_date=date(2025, 3, 5), reason="family trip",
    )

    assert leave.id
    assert leave.status == LeaveStatus.PENDING
    assert leave.category == LeaveCategory.MULTI_DAY
    assert leave.leave_date is None
    assert get_leave(store, leave.id) == leave


def test_create_single_day_leave_drops_range(store):
    leave = create_leave(
        store, "member-1", "Sick Leave", "single-day",
        leave_date=MON, from_date=MON, to_date=MON,
    )

    assert leave.leave_date == MON
    assert leave.from_date is None and leave.to_date is None


@pytest.mark.parametrize("kwargs", [
    {"category": "multi-day", "from_date": MON},
    {"category": "multi-day", "from_date": date(2025, 3, 5), "to_date": MON},
    {"category": "single-day"},
    {"category": "half-day", "leave_date": MON},
])
def test_create_leave_rejects_bad_shapes(store, kwargs):
    with pytest.raises(ValueError):
        create_leave(store, "member-1", "Casual Leave", **kwargs)


def test_breakdown_uses_stored_leaves_and_holidays(store, add_leave):
    target = add_leave(from_date=MON, to_date=date(2025, 3, 9))
    add_leave(user_id="member-2", category="single-day", status="approved", leave_date=date(2025, 3, 4))
    add_leave(user_id="member-3", category="single-day", status="rejected", leave_date=date(2025, 3, 6))
    add_holiday(store, "Holi", date(2025, 3, 5))
    add_holiday(store, "Far away", date(2025, 12, 25))

    result = get_leave_breakdown(store, target.id)

    assert result.total_days == 7
    assert result.sundays == 1
    assert result.holidays == 1
    assert result.already_leave == 1
    assert result.countable_leave_days == 4


def test_breakdown_is_none_for_single_day_and_unknown(store, add_leave):
    single = add_leave(category="single-day", leave_date=MON)

    assert get_leave_breakdown(store, single.id) is None
    assert get_leave_breakdown(store, "missing") is None


def test_preview_counts_existing_leaves(store, add_leave):
    add_leave(user_id="member-1", from_date=MON, to_date=MON, status="approved")

    result = preview_breakdown(store, "member-1", MON, date(2025, 3, 5))

    assert result.total_days == 3
    assert result.already_leave == 1
    assert result.countable_leave_days == 2


def test_preview_excludes_the_leave_being_edited(store, add_leave):
    existing = add_leave(from_date=MON, to_date=date(2025, 3, 5))

    result = preview_breakdown(store, "member-1", MON, date(2025, 3, 5), leave_id=existing.id)

    assert result.already_leave == 0


def test_list_leaves_filters_and_orders_newest_first(store, add_leave):
    old = add_leave(user_id="a", category="single-day", leave_date=MON, created_at="2025-01-01 09:00:00")
    new = add_leave(user_id="a", category="single-day", leave_date=MON, status="approved",
                    created_at="2025-02-01 09:00:00")
    add_leave(user_id="b", category="single-day", leave_date=MON, created_at="2025-03-01 09:00:00")

    assert [l.id for l in list_leaves(store, user_id="a")] == [new.id, old.id]
    assert [l.id for l in list_leaves(store, status="approved")] == [new.id]
    assert len(list_leaves(store)) == 3

    with pytest.raises(ValueError):
        list_leaves(store, status="cancelled")


def test_chargeable_days(store, add_leave):
    single = add_leave(category="single-day", leave_date=date(2025, 3, 10))
    multi = add_leave(from_date=MON, to_date=date(2025, 3, 9))

    assert chargeable_days(single, None) == 1
    assert chargeable_days(multi, get_leave_breakdown(store, multi.id)) == 6
    assert chargeable_days(multi, None) == 0


def test_chargeable_days_skip_a_day_already_taken(store, add_leave):
    add_leave(category="single-day", leave_date=MON)
    multi = add_leave(from_date=MON, to_date=date(2025, 3, 9))

    # MON is held by the pending single-day request
    assert chargeable_days(multi, get_leave_breakdown(store, multi.id)) == 5


def test_update_leave_moves_dates_and_keeps_status(store, add_leave):
    leave = add_leave(from_date=MON, to_date=date(2025, 3, 5), status="approved")

    updated = update_leave(store, leave.id, to_date=date(2025, 3, 7), reason="longer trip")

    assert updated.from_date == MON
    assert updated.to_date == date(2025, 3, 7)
    assert updated.reason == "longer trip"
    assert updated.status == LeaveStatus.APPROVED
    assert get_leave(store, leave.id) == updated


def test_update_leave_switching_category_drops_other_dates(store, add_leave):
    leave = add_leave(from_date=MON, to_date=date(2025, 3, 5))

    updated = update_leave(store, leave.id, category="single-day", leave_date=MON)

    assert updated.category == LeaveCategory.SINGLE_DAY
    assert updated.leave_date == MON
    assert updated.from_date is None and updated.to_date is None


@pytest.mark.parametrize("values", [
    {"to_date": date(2025, 3, 1)},
    {"category": "single-day"},
    {"status": "approved"},
])
def test_update_leave_rejects_bad_edits(store, add_leave, values):
    leave = add_leave(from_date=MON, to_date=date(2025, 3, 5))

    with pytest.raises(ValueError):
        update_leave(store, leave.id, **values)
    assert get_leave(store, leave.id) == leave


def test_update_and_delete_unknown_leave(store, add_leave):
    leave = add_leave(category="single-day", leave_date=MON)

    assert update_leave(store, "missing", reason="x") is None
    assert delete_leave(store, leave.id)
    assert get_leave(store, leave.id) is None
    assert not delete_leave(store, leave.id)
