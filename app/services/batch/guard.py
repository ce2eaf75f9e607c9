import threading
from collections.abc import Iterator
from contextlib import contextmanager


class SingleFlightGuard:
    """Process-local lock allowing one batch run at a time.

    A second claim while a run is in flight does not block; it yields False and
    the caller treats the start request as a no-op.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active_job_id: str | None = None

    @property
    def active_job_id(self) -> str | None:
        return self._active_job_id

    def is_busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def claim(self, job_id: str) -> Iterator[bool]:
        acquired = self._lock.acquire(blocking=False)
        if not acquired:
            yield False
            return
        self._active_job_id = job_id
        try:
            yield True
        finally:
            self._active_job_id = None
            self._lock.release()


batch_run_guard = SingleFlightGuard()
