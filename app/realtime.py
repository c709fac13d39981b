"""In-process change feed.

Committed inserts, updates and deletes of models that declare a
``__feed_table__`` are published to subscribers keyed by table name and
event type. Subscribers receive coalesced batches: events for the same
record within the debounce window collapse to the latest one, and a batch
is released once the feed has been quiet for ``debounce`` seconds (or
``max_wait`` seconds after the first buffered event, whichever is first).
Every event carries a monotonically increasing ``seq`` so consumers can
discard snapshots older than one they already delivered.
"""
import itertools
import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from sqlalchemy import event
from sqlalchemy.orm import Session

from app.metrics import OPEN_STREAMS

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
EVENTS = (INSERT, UPDATE, DELETE)

_PENDING_KEY = "_feed_pending"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    seq: int
    table: str
    event: str
    record: dict = field(default_factory=dict)

    @property
    def key(self):
        return self.table, self.record.get("id")

    def to_dict(self):
        return {"seq": self.seq, "table": self.table, "event": self.event, "record": self.record}


class Subscription:
    def __init__(self, feed, table, events, match=None, debounce=0.25, max_wait=2.0):
        self.feed = feed
        self.table = table
        self.events = frozenset(events)
        self.match = match
        self.debounce = debounce
        self.max_wait = max(max_wait, debounce)
        self.closed = False
        self._pending = OrderedDict()
        self._first_at = None
        self._last_at = None
        self._cond = threading.Condition()

    def offer(self, ev: ChangeEvent) -> bool:
        if ev.table != self.table or ev.event not in self.events:
            return False
        if self.match is not None and not self.match(ev.record):
            return False
        with self._cond:
            if self.closed:
                return False
            self._pending.pop(ev.key, None)
            self._pending[ev.key] = ev
            self._last_at = time.monotonic()
            if self._first_at is None:
                self._first_at = self._last_at
            self._cond.notify_all()
        return True

    def next_batch(self, timeout: Optional[float] = None):
        """Block until a coalesced batch is ready; ``[]`` on timeout or close."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while not self._pending and not self.closed:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return []
                self._cond.wait(remaining)
            if self.closed:
                return []
            while not self.closed:
                now = time.monotonic()
                release_at = min(self._last_at + self.debounce, self._first_at + self.max_wait)
                if now >= release_at:
                    break
                self._cond.wait(release_at - now)
            batch = list(self._pending.values())
            self._pending.clear()
            self._first_at = self._last_at = None
            return batch

    def close(self):
        self.feed.unsubscribe(self)
        with self._cond:
            self.closed = True
            self._pending.clear()
            self._cond.notify_all()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions = []
        self._seq = itertools.count(1)

    def subscribe(
        self,
        table: str,
        events: Iterable[str] = (INSERT, UPDATE),
        match: Optional[Callable[[dict], bool]] = None,
        debounce: float = 0.25,
        max_wait: float = 2.0,
    ) -> Subscription:
        sub = Subscription(self, table, events, match=match, debounce=debounce, max_wait=max_wait)
        with self._lock:
            self._subscriptions.append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, table: str, event_type: str, record: dict) -> ChangeEvent:
        with self._lock:
            ev = ChangeEvent(next(self._seq), table, event_type, dict(record))
            subscriptions = list(self._subscriptions)
        delivered = sum(1 for sub in subscriptions if sub.offer(ev))
        logger.debug("feed %s %s seq=%s delivered=%s", table, event_type, ev.seq, delivered)
        return ev


feed = ChangeFeed()


def _collect_changes(session, flush_context):
    pending = session.info.setdefault(_PENDING_KEY, [])
    for obj in session.new:
        table = getattr(obj, "__feed_table__", None)
        if table:
            pending.append((table, INSERT, obj.feed_record()))
    for obj in session.dirty:
        table = getattr(obj, "__feed_table__", None)
        if table and session.is_modified(obj, include_collections=False):
            pending.append((table, UPDATE, obj.feed_record()))
    for obj in session.deleted:
        table = getattr(obj, "__feed_table__", None)
        if table:
            pending.append((table, DELETE, obj.feed_record()))


def _publish_committed(session):
    for table, event_type, record in session.info.pop(_PENDING_KEY, []):
        feed.publish(table, event_type, record)


def _discard_uncommitted(session, transaction):
    if transaction.parent is None:
        session.info.pop(_PENDING_KEY, None)


def init_app(app):
    """Hook the feed into SQLAlchemy session commits."""
    if not event.contains(Session, "after_flush", _collect_changes):
        event.listen(Session, "after_flush", _collect_changes)
        event.listen(Session, "after_commit", _publish_committed)
        event.listen(Session, "after_transaction_end", _discard_uncommitted)
    app.extensions["change_feed"] = feed


def subscribe_for(app, table, **kwargs):
    """Subscribe using the app's debounce settings."""
    kwargs.setdefault("debounce", app.config.get("REALTIME_DEBOUNCE_SECONDS", 0.25))
    kwargs.setdefault("max_wait", app.config.get("REALTIME_MAX_WAIT_SECONDS", 2.0))
    return feed.subscribe(table, **kwargs)


def sse(data, event_name=None, event_id=None) -> str:
    lines = []
    if event_id is not None:
        lines.append(f"id: {event_id}")
    if event_name:
        lines.append(f"event: {event_name}")
    lines.append(f"data: {json.dumps(data, default=str)}")
    return "\n".join(lines) + "\n\n"


def event_stream(subscription: Subscription, snapshot: Callable, keepalive: float, event_name: str):
    """Yield SSE frames: one initial snapshot, then one per coalesced batch.

    ``snapshot(batch)`` is called with the list of events in the batch (empty
    for the initial frame) and returns the payload to send, or ``None`` to
    skip the frame.
    """
    last_seq = 0
    OPEN_STREAMS.labels(event_name).inc()
    try:
        payload = snapshot([])
        if payload is not None:
            yield sse({"seq": last_seq, **payload}, event_name, last_seq)
        while not subscription.closed:
            batch = subscription.next_batch(timeout=keepalive)
            if not batch:
                if subscription.closed:
                    break
                yield ": keepalive\n\n"
                continue
            seq = max(ev.seq for ev in batch)
            if seq <= last_seq:
                continue
            last_seq = seq
            payload = snapshot(batch)
            if payload is not None:
                yield sse({"seq": seq, **payload}, event_name, seq)
    finally:
        subscription.close()
        OPEN_STREAMS.labels(event_name).dec()
