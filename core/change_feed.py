import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
ANY_EVENT = "*"


@dataclass
class ChangeEvent:
    table: str
    event: str
    new: Optional[dict] = None
    old: Optional[dict] = None

    @property
    def row(self) -> Optional[dict]:
        return self.new if self.new is not None else self.old


@dataclass(eq=False)
class Subscription:
    table: str
    callback: Callable[[ChangeEvent], None]
    predicate: Optional[Callable[[dict], bool]] = None
    event: str = ANY_EVENT
    feed: Optional["ChangeFeed"] = field(default=None, repr=False)

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        if self.event != ANY_EVENT and change.event != self.event:
            return False
        if self.predicate is None:
            return True
        # an update may move a row in or out of the predicate
        return any(
            row is not None and self.predicate(row)
            for row in (change.new, change.old)
        )

    def unsubscribe(self):
        if self.feed is not None:
            self.feed.unsubscribe(self)


class ChangeFeed:
    """
    In-process row-change notifications keyed by table name and row predicate.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription] = []

    def subscribe(self, table, callback, predicate=None, event=ANY_EVENT) -> Subscription:
        sub = Subscription(table, callback, predicate, event, feed=self)
        with self._lock:
            self._subscriptions.append(sub)
        logger.debug("Subscribed to %s (%s)", table, event)
        return sub

    def unsubscribe(self, sub: Subscription):
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    def publish(self, change: ChangeEvent) -> int:
        with self._lock:
            targets = [s for s in self._subscriptions if s.table == change.table]

        delivered = 0
        for sub in targets:
            try:
                if not sub.matches(change):
                    continue
                sub.callback(change)
                delivered += 1
            except Exception:
                logger.exception("Change subscriber failed on %s %s", change.event, change.table)
        return delivered

    def __len__(self):
        with self._lock:
            return len(self._subscriptions)
