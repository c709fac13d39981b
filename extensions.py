from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os


def _default_limit():
    return current_app.config.get("DEFAULT_RATE_LIMIT", "200 per hour")


# Global limiter instance used across the app
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=os.getenv("RATELIMIT_STORAGE_URL", "memory://"),
    strategy="fixed-window",
    default_limits=[_default_limit],
)
