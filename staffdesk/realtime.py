"""
In-process change feed for admin dashboards.

Services publish INSERT/UPDATE/DELETE events after a successful commit.
Consumers subscribe with an explicit Subscription handle that must be closed
(or used as a context manager) when the view that opened it goes away.
"""

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

EVENT_TYPES = ("INSERT", "UPDATE", "DELETE")
FEED_TABLES = ("appointments", "appointment_recipients", "blocked_times")


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: str
    record: dict
    sequence: int
    occurred_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def entity_id(self):
        return self.record.get("id")

    def to_dict(self) -> dict:
        return {
            "table": self.table,
            "eventType": self.event_type,
            "record": self.record,
            "sequence": self.sequence,
            "occurredAt": self.occurred_at.isoformat(),
        }


class Subscription:
    """Handle for one listener; events stop arriving once closed"""

    def __init__(self, feed: "ChangeFeed", table: str, callback: Callable[[ChangeEvent], Any]):
        self._feed = feed
        self.table = table
        self.callback = callback
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._feed._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ChangeFeed:
    def __init__(self):
        self._subscriptions: dict[str, list[Subscription]] = {}
        self._sequence = itertools.count(1)
        self._lock = Lock()

    def subscribe(self, table: str, callback: Callable[[ChangeEvent], Any]) -> Subscription:
        if table not in FEED_TABLES:
            raise ValueError(f"Unknown table for change feed: {table}")
        subscription = Subscription(self, table, callback)
        with self._lock:
            self._subscriptions.setdefault(table, []).append(subscription)
        logger.debug(f"📡 Subscribed to {table} ({self.subscriber_count(table)} listeners)")
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            listeners = self._subscriptions.get(subscription.table, [])
            if subscription in listeners:
                listeners.remove(subscription)

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(table, []))

    def publish(self, table: str, event_type: str, record: dict) -> ChangeEvent:
        """Deliver an event to every open subscription on ``table``; listener errors are logged"""
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event_type}")

        with self._lock:
            event = ChangeEvent(table, event_type, record, next(self._sequence))
            listeners = list(self._subscriptions.get(table, []))

        for subscription in listeners:
            if subscription.closed:
                continue
            try:
                subscription.callback(event)
            except Exception as e:
                logger.error(f"❌ Change feed listener failed for {table}: {str(e)}")
        return event


class LiveCollection:
    """
    Client-side view of a table kept current from change events.

    Events are applied idempotently per entity id: a duplicate or an event
    older than the last one applied for that id is ignored, and a delete is
    remembered so a late update cannot resurrect the row.
    """

    def __init__(self, records: Optional[list[dict]] = None):
        self._items: dict[Any, dict] = {}
        self._versions: dict[Any, int] = {}
        self._deleted: set = set()
        for record in records or []:
            self._items[record["id"]] = dict(record)

    def apply(self, event: ChangeEvent) -> bool:
        """Apply ``event``; returns False when it was ignored"""
        entity_id = event.entity_id
        if entity_id is None:
            return False
        if self._versions.get(entity_id, 0) >= event.sequence:
            return False
        self._versions[entity_id] = event.sequence

        if event.event_type == "DELETE":
            self._items.pop(entity_id, None)
            self._deleted.add(entity_id)
            return True

        if entity_id in self._deleted:
            return False
        current = self._items.get(entity_id, {})
        self._items[entity_id] = {**current, **event.record}
        return True

    def upsert_local(self, record: dict) -> None:
        """Optimistic local write; any later feed event for the id overrides it"""
        if record["id"] in self._deleted:
            return
        current = self._items.get(record["id"], {})
        self._items[record["id"]] = {**current, **record}

    def get(self, entity_id) -> Optional[dict]:
        return self._items.get(entity_id)

    def items(self) -> list[dict]:
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id) -> bool:
        return entity_id in self._items


change_feed = ChangeFeed()
