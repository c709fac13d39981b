from flask import request
from prometheus_client import Counter, Gauge, Histogram
from sqlalchemy import event
import time

from models import db

DB_QUERY_DURATION = Histogram(
    "db_query_duration_seconds",
    "Database query duration in seconds",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)

ERROR_COUNTER = Counter(
    "flask_error_total",
    "Count of HTTP responses with status >= 400",
    ["endpoint", "method", "code"],
)

ORDERS_PLACED = Counter(
    "orders_placed_total",
    "Orders accepted at checkout",
)

ORDER_TRANSITIONS = Counter(
    "order_status_transitions_total",
    "Committed order status changes",
    ["status"],
)

OPEN_STREAMS = Gauge(
    "realtime_open_streams",
    "Server-sent event streams currently connected",
    ["channel"],
)


def init_app(app):
    """Time every statement on the app's engine and count error responses."""

    with app.app_context():
        engine = db.engine

        @event.listens_for(engine, "before_cursor_execute")
        def _query_started(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("_query_start_time", []).append(time.time())

        @event.listens_for(engine, "after_cursor_execute")
        def _query_finished(conn, cursor, statement, parameters, context, executemany):
            start = conn.info.get("_query_start_time").pop(-1)
            DB_QUERY_DURATION.observe(time.time() - start)

    @app.after_request
    def _count_errors(resp):
        if resp.status_code >= 400:
            ERROR_COUNTER.labels(request.endpoint or "unknown", request.method, resp.status_code).inc()
        return resp
