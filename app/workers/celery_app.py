from celery import Celery

from app.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "atelier",
    broker=settings.get_celery_broker_url(),
    backend=settings.get_celery_result_backend(),
    include=["app.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Runs are sequential by design; one batch at a time per worker process.
    worker_concurrency=1,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)
