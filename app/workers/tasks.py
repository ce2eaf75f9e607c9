import logging

from app.db.session import session_scope
from app.services.batch.runner import RunOutcome, build_runner
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="app.workers.tasks.process_batch_job")
def process_batch_job(job_id: str) -> dict | None:
    with session_scope() as db:
        try:
            outcome = build_runner(db).run(job_id)
        except Exception as exc:  # noqa: BLE001
            logger.exception("batch_job_task_failed", extra={"job_id": job_id, "error": str(exc)})
            return None
    return _outcome_payload(outcome)


@celery_app.task(name="app.workers.tasks.retry_batch_job")
def retry_batch_job(job_id: str) -> dict | None:
    with session_scope() as db:
        try:
            outcome = build_runner(db).retry_failed(job_id)
        except Exception as exc:  # noqa: BLE001
            logger.exception("batch_job_retry_task_failed", extra={"job_id": job_id, "error": str(exc)})
            return None
    return _outcome_payload(outcome)


def _outcome_payload(outcome: RunOutcome | None) -> dict | None:
    if outcome is None:
        return None
    return {
        "job_id": outcome.job_id,
        "status": outcome.status,
        "successful_items": outcome.successful_items,
        "failed_items": outcome.failed_items,
    }
