from datetime import date

from core.change_feed import DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed
from core.holiday import add_holiday
from core.leave_approval import decide_leave
from core.live_rows import LeaveBreakdownView, LiveRows, PendingLeaveBoard

MON = date(2025, 3, 3)


def test_publish_respects_table_event_and_predicate():
    feed = ChangeFeed()
    seen = []
    feed.subscribe("leaves", lambda c: seen.append(("all", c.event)))
    feed.subscribe("leaves", lambda c: seen.append(("inserts", c.event)), event=INSERT)
    feed.subscribe("leaves", lambda c: seen.append(("mine", c.event)), predicate=lambda r: r["user_id"] == "me")
    feed.subscribe("company_holidays", lambda c: seen.append(("holidays", c.event)))

    feed.publish(ChangeEvent("leaves", INSERT, new={"id": "1", "user_id": "me"}))
    feed.publish(ChangeEvent("leaves", UPDATE, new={"id": "2", "user_id": "you"}, old={"id": "2", "user_id": "you"}))

    assert seen == [("all", INSERT), ("inserts", INSERT), ("mine", INSERT), ("all", UPDATE)]


def test_predicate_sees_rows_leaving_the_filter():
    feed = ChangeFeed()
    seen = []
    feed.subscribe("leaves", seen.append, predicate=lambda r: r["status"] == "pending")

    feed.publish(ChangeEvent("leaves", UPDATE, new={"id": "1", "status": "approved"}, old={"id": "1", "status": "pending"}))

    assert len(seen) == 1


def test_failing_subscriber_does_not_stop_delivery(caplog):
    feed = ChangeFeed()
    seen = []

    def boom(change):
        raise RuntimeError("boom")

    feed.subscribe("leaves", boom)
    feed.subscribe("leaves", seen.append)

    delivered = feed.publish(ChangeEvent("leaves", DELETE, old={"id": "1"}))

    assert delivered == 1
    assert seen[0].row == {"id": "1"}
    assert "Change subscriber failed" in caplog.text


def test_unsubscribe():
    feed = ChangeFeed()
    seen = []
    sub = feed.subscribe("leaves", seen.append)
    other = feed.subscribe("leaves", seen.append)

    sub.unsubscribe()
    feed.publish(ChangeEvent("leaves", INSERT, new={"id": "1"}))

    assert len(seen) == 1
    assert len(feed) == 1
    other.unsubscribe()
    assert len(feed) == 0


def test_store_writes_publish_events(store):
    events = []
    store.feed.subscribe("company_holidays", events.append)

    h = add_holiday(store, "Holi", date(2025, 3, 14))
    store.update("company_holidays", h.id, {"description": "colours"})
    store.delete("company_holidays", h.id)

    assert [e.event for e in events] == [INSERT, UPDATE, DELETE]
    assert events[1].old["description"] is None
    assert events[1].new["description"] == "colours"
    assert events[2].row["id"] == h.id


def test_live_rows_follow_inserts_updates_and_deletes(store, add_leave):
    first = add_leave(category="single-day", leave_date=MON)
    refreshed = []
    pending = LiveRows(store, "leaves", on_change=refreshed.append, status="pending")
    assert [r["id"] for r in pending] == [first.id]

    second = add_leave(category="single-day", leave_date=MON)
    assert [r["id"] for r in pending] == [first.id, second.id]

    decide_leave(store, first.id, "approved")
    assert [r["id"] for r in pending] == [second.id]

    store.delete("leaves", second.id)
    assert len(pending) == 0
    assert len(refreshed) == 3

    pending.close()
    add_leave(category="single-day", leave_date=MON)
    assert len(pending) == 0
    assert len(pending.refresh()) == 1


def test_live_rows_keep_order(store, add_person):
    people = LiveRows(store, "members", order_by="name")
    add_person("members", "Zoya")
    add_person("members", "Arjun")
    add_person("members", "Meera")

    assert [r["name"] for r in people] == ["Arjun", "Meera", "Zoya"]


def test_breakdown_view_recomputes_on_changes(store, add_leave):
    target = add_leave(from_date=MON, to_date=date(2025, 3, 5))
    results = []
    view = LeaveBreakdownView(store, target.id, on_change=results.append)
    assert view.result.countable_leave_days == 3

    add_holiday(store, "Holi", date(2025, 3, 4))
    assert view.result.holidays == 1

    other = add_leave(user_id="member-2", category="single-day", leave_date=MON, status="approved")
    assert view.result.already_leave == 1

    decide_leave(store, other.id, "rejected")
    assert view.result.already_leave == 0
    assert view.result.countable_leave_days == 2

    view.close()
    add_leave(user_id="member-3", category="single-day", leave_date=date(2025, 3, 5))
    assert view.result.countable_leave_days == 2
    assert len(results) == 3


def test_live_rows_match_a_fresh_select(store, add_leave):
    pending = LiveRows(store, "leaves", status="pending")
    for _ in range(3):
        add_leave(category="single-day", leave_date=MON)

    assert [r["id"] for r in pending] == [r["id"] for r in pending.refresh()]


def test_pending_board_tracks_requests_and_breakdowns(store, add_leave):
    single = add_leave(category="single-day", leave_date=date(2025, 3, 10))
    board = PendingLeaveBoard(store)
    assert board.items() == [(single, None)]

    multi = add_leave(user_id="member-2", from_date=MON, to_date=date(2025, 3, 5),
                      created_at="2030-01-01 00:00:00")
    [(first, breakdown), (second, _)] = board.items()
    assert first.id == multi.id
    assert second.id == single.id
    assert breakdown.countable_leave_days == 3

    add_holiday(store, "Holi", date(2025, 3, 4))
    assert board.items()[0][1].holidays == 1

    decide_leave(store, multi.id, "approved")
    assert [leave.id for leave, _ in board.items()] == [single.id]
    assert board.views == {}

    store.delete("leaves", single.id)
    assert len(board) == 0

    board.close()
    assert len(store.feed) == 0
