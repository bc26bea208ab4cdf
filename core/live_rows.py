import logging
import threading

from core.change_feed import DELETE, ChangeEvent
from core.leave_calculation import get_leave_breakdown
from core.leave_models import LeaveCategory, LeaveRequest, LeaveStatus

logger = logging.getLogger(__name__)


class LiveRows:
    """
    A filtered list of rows kept current from the store's change feed.
    """

    def __init__(self, store, table, on_change=None, order_by=None, descending=False, **filters):
        self.store = store
        self.table = table
        self.filters = filters
        self.order_by = order_by
        self.descending = descending
        self.on_change = on_change
        self.rows = []

        self.refresh()
        self._sub = store.feed.subscribe(table, self._apply)

    def _wanted(self, row) -> bool:
        return all(row.get(k) == v for k, v in self.filters.items())

    def _sort(self):
        if self.order_by:
            # NULLs first, as sqlite orders them
            self.rows.sort(
                key=lambda r: (r.get(self.order_by) is not None, r.get(self.order_by) or ""),
                reverse=self.descending,
            )

    def refresh(self):
        self.rows = self.store.select(
            self.table,
            order_by=self.order_by,
            descending=self.descending,
            **self.filters,
        )
        return self.rows

    def _apply(self, change: ChangeEvent):
        row = change.row
        row_id = row.get("id") if row else None

        self.rows = [r for r in self.rows if r.get("id") != row_id]
        if change.event != DELETE and change.new is not None and self._wanted(change.new):
            # unordered lists keep insertion order, like a fresh select
            self.rows.append(change.new)
            self._sort()

        logger.debug("%s %s -> %d row(s)", change.event, self.table, len(self.rows))
        if self.on_change:
            self.on_change(self.rows)

    def close(self):
        self._sub.unsubscribe()

    def __len__(self):
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)


class LeaveBreakdownView:
    """
    Keeps the day breakdown of one leave current while leaves or holidays change.
    """

    WATCHED = ("leaves", "company_holidays")

    def __init__(self, store, leave_id, on_change=None):
        self.store = store
        self.leave_id = leave_id
        self.on_change = on_change
        self.result = get_leave_breakdown(store, leave_id)
        self._subs = [store.feed.subscribe(t, self._recompute) for t in self.WATCHED]

    def _recompute(self, change: ChangeEvent):
        self.result = get_leave_breakdown(self.store, self.leave_id)
        if self.on_change:
            self.on_change(self.result)

    def close(self):
        for sub in self._subs:
            sub.unsubscribe()


class PendingLeaveBoard:
    """
    Pending leave requests, newest first, each multi-day one paired with a
    breakdown that stays current. Requests leave the board once decided.
    """

    def __init__(self, store):
        self.store = store
        self.views = {}
        self._lock = threading.Lock()
        self.leaves = LiveRows(
            store,
            "leaves",
            on_change=self._sync,
            order_by="created_at",
            descending=True,
            status=LeaveStatus.PENDING.value,
        )
        self._sync(self.leaves.rows)

    def _sync(self, rows):
        with self._lock:
            ids = {r["id"] for r in rows}
            for gone in set(self.views) - ids:
                self.views.pop(gone).close()
            for r in rows:
                if r["id"] not in self.views and r["category"] == LeaveCategory.MULTI_DAY.value:
                    self.views[r["id"]] = LeaveBreakdownView(self.store, r["id"])

    def items(self) -> list:
        with self._lock:
            return [
                (LeaveRequest.from_row(r), self.views[r["id"]].result if r["id"] in self.views else None)
                for r in self.leaves.rows
            ]

    def close(self):
        self.leaves.close()
        with self._lock:
            for view in self.views.values():
                view.close()
            self.views.clear()

    def __len__(self):
        return len(self.leaves)
