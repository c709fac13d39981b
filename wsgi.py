import celery_app  # noqa: F401
from app import create_app

app = create_app()
