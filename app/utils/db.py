from contextlib import contextmanager
import logging

from sqlalchemy.exc import IntegrityError

from models import db

logger = logging.getLogger(__name__)


@contextmanager
def transactional(message="Database transaction failed"):
    """Commit the session when the block finishes; roll back, log and re-raise on error."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception(message)
        raise


def run_in_transaction(fn, *args, message="Database transaction failed", retries=0,
                       retry_on=(IntegrityError,), **kwargs):
    """Call ``fn`` inside :func:`transactional` and return its result.

    Errors listed in ``retry_on`` (unique-key races such as two checkouts
    drawing the same order number) re-run the whole unit up to ``retries``
    more times.
    """
    attempt = 0
    while True:
        try:
            with transactional(message):
                return fn(*args, **kwargs)
        except retry_on:
            attempt += 1
            if attempt > retries:
                raise
            logger.warning("%s: conflict, retrying (%d/%d)", message, attempt, retries)
