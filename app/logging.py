"""JSON log lines with request, trace and restaurant context.

Every line carries the request id, the OpenTelemetry trace/span ids and,
inside restaurant-scoped requests, the restaurant id or slug. Dict messages
are masked recursively so customer contact data and credentials never reach
the log sink outside of local debugging.
"""
import logging
import json
import os
from typing import Any
from opentelemetry.trace import get_current_span


SENSITIVE_KEYS = {
    "password",
    "password_hash",
    "confirm_password",
    "new_password",
    "token",
    "access_token",
    "refresh_token",
    "email",
    "phone",
    "customer_phone",
}
REDACTED = "[REDACTED]"


def _flask_value(getter, default="n/a"):
    try:
        return getter() or default
    except RuntimeError:
        # outside a request or app context
        return default


def current_request_id() -> str:
    from flask import g
    return _flask_value(lambda: getattr(g, "request_id", None))


def current_tenant() -> str:
    """Restaurant id or public slug addressed by the current request."""
    from flask import request

    def _lookup():
        args = request.view_args or {}
        value = args.get("restaurant_id") or args.get("slug")
        return str(value) if value is not None else None

    return _flask_value(_lookup, default="-")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id()
        record.restaurant = current_tenant()
        return True


def current_trace_ids():
    span = get_current_span()
    ctx = span.get_span_context() if span else None
    if not ctx or not ctx.is_valid:
        return "n/a", "n/a"
    return format(ctx.trace_id, "032x"), format(ctx.span_id, "016x")


class TraceIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id, record.span_id = current_trace_ids()
        return True


def mask(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: (REDACTED if key in SENSITIVE_KEYS else mask(item))
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [mask(item) for item in value]
    return value


class MaskingFilter(logging.Filter):
    """Redact sensitive keys, except in DEBUG records outside production."""

    def filter(self, record: logging.LogRecord) -> bool:
        env = os.getenv("APP_ENV", "development").lower()
        if record.levelno == logging.DEBUG and env != "production":
            return True
        if isinstance(record.msg, dict):
            record.msg = mask(record.msg)
        if isinstance(record.args, dict):
            record.args = mask(record.args)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        base = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "request_id": getattr(record, "request_id", "n/a"),
            "restaurant": getattr(record, "restaurant", "-"),
            "trace_id": getattr(record, "trace_id", "n/a"),
            "span_id": getattr(record, "span_id", "n/a"),
        }
        if isinstance(record.msg, dict):
            base.update(record.msg)
        else:
            base["message"] = record.getMessage()
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, default=str)


def configure_logging(app) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(datefmt="%Y-%m-%dT%H:%M:%S%z"))
    handler.addFilter(RequestIdFilter())
    handler.addFilter(TraceIdFilter())
    handler.addFilter(MaskingFilter())

    level_name = os.getenv("LOG_LEVEL")
    if level_name:
        level = getattr(logging, level_name.upper(), logging.INFO)
    else:
        level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO

    app.logger.handlers.clear()
    app.logger.addHandler(handler)
    app.logger.setLevel(level)

    root = logging.getLogger()
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        root.addHandler(handler)
    root.setLevel(level)

    for name in ("werkzeug", "celery"):
        child = logging.getLogger(name)
        child.setLevel(level)
        child.handlers.clear()
        child.addHandler(handler)
        child.propagate = False
