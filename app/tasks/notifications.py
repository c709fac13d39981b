import logging
from celery import shared_task
from flask import current_app

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_password_reset_email_task(self, to: str, reset_link: str) -> None:
    """Stand-in for the reset mail; the link carries a live token so only DEBUG shows it."""
    logger.info("[Email disabled] password reset requested for %s", to)
    logger.debug("[Email disabled] reset link for %s: %s", to, reset_link)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_welcome_email_task(self, to: str, name: str, restaurant_name: str) -> None:
    """Log the welcome message for a new team member."""
    logger.info("[Email disabled] welcome %s to %s", name, restaurant_name)


def dispatch(task, *args):
    """Run inline under test, otherwise queue on the broker."""
    if current_app.config.get("TESTING"):
        return task(*args)
    return task.delay(*args)
