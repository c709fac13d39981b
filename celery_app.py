import os
import logging
from celery import Celery
from celery.signals import task_failure, task_retry

broker_url = os.environ.get("CELERY_BROKER_URL", "memory://")
backend_url = os.environ.get("CELERY_RESULT_BACKEND", "cache+memory://")

celery_app = Celery("pratodigital", broker=broker_url, backend=backend_url, include=["app.tasks.notifications"])
celery_app.conf.update(
    task_always_eager=os.environ.get("CELERY_TASK_ALWAYS_EAGER", "0") == "1",
    task_eager_propagates=True,
    task_store_eager_result=False,
    task_ignore_result=True,
    # mail goes out on its own queue so a slow relay never delays other work
    task_routes={"app.tasks.notifications.*": {"queue": "notifications"}},
    task_default_queue="default",
    timezone="UTC",
)

logger = logging.getLogger(__name__)


@task_failure.connect
def _log_failure(sender=None, task_id=None, exception=None, **kwargs):
    logger.error("task %s (%s) failed: %s", getattr(sender, "name", "?"), task_id, exception)


@task_retry.connect
def _log_retry(sender=None, request=None, reason=None, **kwargs):
    logger.warning("task %s retrying: %s", getattr(sender, "name", "?"), reason)
