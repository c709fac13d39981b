import threading
import time
from decimal import Decimal

from app import realtime
from app.realtime import ChangeFeed
from models import db
from models.order import Order


def test_events_for_same_record_coalesce_to_latest():
    feed = ChangeFeed()
    sub = feed.subscribe("orders", debounce=0.05, max_wait=1.0)
    feed.publish("orders", realtime.INSERT, {"id": 1, "order_status": "new"})
    feed.publish("orders", realtime.UPDATE, {"id": 1, "order_status": "preparing"})
    feed.publish("orders", realtime.INSERT, {"id": 2, "order_status": "new"})
    batch = sub.next_batch(timeout=1)
    assert [ev.record["id"] for ev in batch] == [1, 2]
    assert batch[0].record["order_status"] == "preparing"
    assert batch[0].seq < batch[1].seq
    sub.close()
    assert feed.subscriber_count == 0


def test_filter_by_table_event_and_record():
    feed = ChangeFeed()
    sub = feed.subscribe(
        "orders",
        events=(realtime.UPDATE,),
        match=lambda record: record.get("restaurant_id") == 5,
        debounce=0.01,
    )
    feed.publish("menus", realtime.UPDATE, {"id": 1, "restaurant_id": 5})
    feed.publish("orders", realtime.INSERT, {"id": 2, "restaurant_id": 5})
    feed.publish("orders", realtime.UPDATE, {"id": 3, "restaurant_id": 6})
    assert sub.next_batch(timeout=0.1) == []
    feed.publish("orders", realtime.UPDATE, {"id": 4, "restaurant_id": 5})
    assert [ev.record["id"] for ev in sub.next_batch(timeout=1)] == [4]


def test_max_wait_releases_busy_stream():
    feed = ChangeFeed()
    sub = feed.subscribe("orders", debounce=0.2, max_wait=0.3)
    stop = threading.Event()

    def _chatter():
        i = 0
        while not stop.is_set():
            feed.publish("orders", realtime.UPDATE, {"id": i % 3})
            i += 1
            time.sleep(0.02)

    worker = threading.Thread(target=_chatter)
    worker.start()
    try:
        started = time.monotonic()
        batch = sub.next_batch(timeout=2)
        elapsed = time.monotonic() - started
    finally:
        stop.set()
        worker.join()
    assert batch
    assert elapsed < 1.5


def test_close_wakes_waiting_consumer():
    feed = ChangeFeed()
    sub = feed.subscribe("orders")
    threading.Timer(0.05, sub.close).start()
    assert sub.next_batch(timeout=2) == []
    assert sub.closed


def _order(restaurant, number):
    return Order(
        restaurant_id=restaurant.id,
        order_number=number,
        customer_name="Ana",
        total_amount=Decimal("10.00"),
        order_status="new",
    )


def test_commit_publishes_insert(app, restaurant):
    sub = realtime.subscribe_for(app, "orders", events=realtime.EVENTS)
    try:
        db.session.add(_order(restaurant, "260101-001"))
        db.session.commit()
        batch = sub.next_batch(timeout=2)
    finally:
        sub.close()
    assert len(batch) == 1
    assert batch[0].event == realtime.INSERT
    assert batch[0].record["restaurant_id"] == restaurant.id
    assert batch[0].record["order_number"] == "260101-001"


def test_rollback_publishes_nothing(app, restaurant):
    sub = realtime.subscribe_for(app, "orders", events=realtime.EVENTS)
    try:
        db.session.add(_order(restaurant, "260101-002"))
        db.session.flush()
        db.session.rollback()
        assert sub.next_batch(timeout=0.3) == []
    finally:
        sub.close()


def test_sse_frame_format():
    frame = realtime.sse({"a": 1}, "kitchen", 7)
    assert frame.startswith("id: 7\n")
    assert "event: kitchen\n" in frame
    assert 'data: {"a": 1}' in frame
    assert frame.endswith("\n\n")
