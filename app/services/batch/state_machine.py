from enum import Enum

from app.services.batch.errors import InvalidTransitionError


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})

_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    # pending/completed -> failed: a run aborted before its claim was persisted.
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    # Retry path, only while failed garments remain (see can_retry).
    JobStatus.COMPLETED: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.FAILED: frozenset({JobStatus.PROCESSING}),
}

START_FROM = (JobStatus.PENDING.value,)
RETRY_FROM = tuple(status.value for status in TERMINAL_STATUSES)


def can_transition(current: str | JobStatus, target: str | JobStatus) -> bool:
    try:
        src = JobStatus(current)
        dst = JobStatus(target)
    except ValueError:
        return False
    return dst in _TRANSITIONS[src]


def assert_transition(current: str | JobStatus, target: str | JobStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(_value(current), _value(target))


def can_start(status: str) -> bool:
    return status == JobStatus.PENDING.value


def can_retry(status: str, failed_garment_ids: list[str] | None) -> bool:
    return status in RETRY_FROM and bool(failed_garment_ids)


def terminal_status_for_run(failed_items: int, total_items: int) -> JobStatus:
    """A full run fails only when every garment failed."""
    if failed_items == total_items:
        return JobStatus.FAILED
    return JobStatus.COMPLETED


def terminal_status_for_retry(successful_items: int) -> JobStatus:
    """A retry pass leaves the job failed only if no garment of the job has ever succeeded."""
    if successful_items == 0:
        return JobStatus.FAILED
    return JobStatus.COMPLETED


def _value(status: str | JobStatus) -> str:
    return status.value if isinstance(status, JobStatus) else str(status)
