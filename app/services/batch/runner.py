"""Sequential driver for batch generation jobs.

A run walks the job's garments strictly in order, one generation call at a
time, and persists a full progress snapshot after every garment. Per-garment
errors are recorded in the job's error log and never stop the run; errors in
setup or in checkpoint writes abort it and leave the job failed.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.models.common import utcnow
from app.models.garment import Garment
from app.schemas.batch_job import BatchJobConfiguration
from app.services.batch.errors import BatchJobSetupError, CheckpointWriteError
from app.services.batch.guard import SingleFlightGuard, batch_run_guard
from app.services.batch.prompts import PromptContext, build_generation_prompt
from app.services.batch.state_machine import (
    RETRY_FROM,
    START_FROM,
    JobStatus,
    assert_transition,
    can_retry,
    can_start,
    terminal_status_for_retry,
    terminal_status_for_run,
)
from app.services.batch.store import BatchJobStore, GarmentResolver, GeneratedImageSink, load_prompt_context
from app.services.generation.gateway import GenerationGateway, get_generation_gateway

logger = logging.getLogger(__name__)

GARMENT_NOT_FOUND = "Garment not found"
RETRY_ERROR_PREFIX = "Retry: "


@dataclass(slots=True)
class RunOutcome:
    job_id: str
    status: str
    processed_items: int
    successful_items: int
    failed_items: int
    failed_garment_ids: list[str]


@dataclass(slots=True)
class _Progress:
    successful: int = 0
    failed_ids: list[str] = field(default_factory=list)
    error_log: list[dict] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_ids)

    def record_failure(self, garment_id: str, error: str) -> None:
        self.failed_ids.append(garment_id)
        self.error_log.append({"garment_id": garment_id, "error": error, "timestamp": utcnow().isoformat()})

    def snapshot(self) -> dict[str, Any]:
        return {
            "successful_items": self.successful,
            "failed_items": self.failed,
            "failed_garment_ids": list(self.failed_ids),
            "error_log": list(self.error_log),
        }


class BatchJobRunner:
    def __init__(
        self,
        store: BatchJobStore,
        resolve_garment: Callable[[str], Garment | None],
        gateway: GenerationGateway,
        image_sink: GeneratedImageSink,
        load_context: Callable[[BatchJobConfiguration], PromptContext] | None = None,
        guard: SingleFlightGuard | None = None,
        settings: Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store = store
        self.resolve_garment = resolve_garment
        self.gateway = gateway
        self.image_sink = image_sink
        self.load_context = load_context or (lambda configuration: PromptContext())
        self.guard = guard or batch_run_guard
        self.settings = settings or get_settings()
        self._sleep = sleep

    def run(self, job_id: str) -> RunOutcome | None:
        """Process every garment of a pending job. Returns None when the start request is a no-op."""
        with self.guard.claim(job_id) as acquired:
            if not acquired:
                logger.info("batch_job_start_ignored", extra={"job_id": job_id, "active_job_id": self.guard.active_job_id})
                return None
            job = self.store.require(job_id)
            if not can_start(job.status):
                logger.info("batch_job_not_startable", extra={"job_id": job_id, "status": job.status})
                return None

            garment_ids = list(job.garment_ids or [])
            configuration, context = self._setup(job_id, START_FROM, {"started_at": utcnow()}, job.configuration)
            if configuration is None:
                return None
            logger.info("batch_job_started", extra={"job_id": job_id, "total_items": len(garment_ids)})

            progress = _Progress(error_log=list(job.error_log or []))
            return self._drive(
                job_id,
                garment_ids,
                configuration,
                context,
                progress,
                finish=lambda: terminal_status_for_run(progress.failed, len(garment_ids)),
                track_processed=True,
            )

    def retry_failed(self, job_id: str) -> RunOutcome | None:
        """Re-attempt the garments that failed on the previous pass."""
        with self.guard.claim(job_id) as acquired:
            if not acquired:
                logger.info("batch_job_retry_ignored", extra={"job_id": job_id, "active_job_id": self.guard.active_job_id})
                return None
            job = self.store.require(job_id)
            if not can_retry(job.status, job.failed_garment_ids):
                logger.info("batch_job_nothing_to_retry", extra={"job_id": job_id, "status": job.status})
                return None

            retry_ids = list(job.failed_garment_ids)
            configuration, context = self._setup(job_id, RETRY_FROM, {"completed_at": None}, job.configuration)
            if configuration is None:
                return None
            logger.info("batch_job_retry_started", extra={"job_id": job_id, "retry_items": len(retry_ids)})

            progress = _Progress(successful=job.successful_items or 0, error_log=list(job.error_log or []))
            return self._drive(
                job_id,
                retry_ids,
                configuration,
                context,
                progress,
                finish=lambda: terminal_status_for_retry(progress.successful),
                track_processed=False,
                error_prefix=RETRY_ERROR_PREFIX,
            )

    def _setup(
        self,
        job_id: str,
        from_statuses: tuple[str, ...],
        claim_fields: dict[str, Any] | None,
        raw_configuration: dict | None,
    ) -> tuple[BatchJobConfiguration | None, PromptContext | None]:
        try:
            if not self.store.claim(job_id, from_statuses, claim_fields):
                logger.info("batch_job_claim_lost", extra={"job_id": job_id})
                return None, None
            configuration = BatchJobConfiguration.model_validate(raw_configuration or {})
            context = self.load_context(configuration)
        except Exception as exc:
            logger.exception("batch_job_setup_failed", extra={"job_id": job_id, "error": str(exc)})
            self._mark_failed(job_id)
            raise BatchJobSetupError(f"Batch job {job_id} could not be started: {exc}") from exc
        return configuration, context

    def _drive(
        self,
        job_id: str,
        garment_ids: list[str],
        configuration: BatchJobConfiguration,
        context: PromptContext,
        progress: _Progress,
        finish: Callable[[], JobStatus],
        track_processed: bool,
        error_prefix: str = "",
    ) -> RunOutcome:
        prompt = build_generation_prompt(configuration, context)
        try:
            for index, garment_id in enumerate(garment_ids):
                self._attempt(job_id, garment_id, prompt, configuration, progress, error_prefix)
                fields = progress.snapshot()
                if track_processed:
                    fields["processed_items"] = index + 1
                self._checkpoint(job_id, fields)

            final_status = finish()
            assert_transition(JobStatus.PROCESSING, final_status)
            job = self._checkpoint(job_id, {"status": final_status.value, "completed_at": utcnow()})
        except Exception:
            logger.exception("batch_job_aborted", extra={"job_id": job_id})
            self._mark_failed(job_id)
            raise

        logger.info(
            "batch_job_finished",
            extra={
                "job_id": job_id,
                "status": job.status,
                "successful_items": job.successful_items,
                "failed_items": job.failed_items,
            },
        )
        return RunOutcome(
            job_id=job_id,
            status=job.status,
            processed_items=job.processed_items,
            successful_items=job.successful_items,
            failed_items=job.failed_items,
            failed_garment_ids=list(job.failed_garment_ids or []),
        )

    def _attempt(
        self,
        job_id: str,
        garment_id: str,
        prompt: str,
        configuration: BatchJobConfiguration,
        progress: _Progress,
        error_prefix: str,
    ) -> None:
        try:
            garment = self.resolve_garment(garment_id)
            if garment is None:
                logger.warning("batch_item_missing", extra={"job_id": job_id, "garment_id": garment_id})
                progress.record_failure(garment_id, f"{error_prefix}{GARMENT_NOT_FOUND}")
                return
            result = self.gateway.generate(prompt, [garment.image_url])
            self.image_sink.create(
                garment_id=garment_id,
                image_url=result.url,
                prompt_used=prompt,
                model_type=configuration.model_id or "default",
                status="completed",
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("batch_item_failed", extra={"job_id": job_id, "garment_id": garment_id, "error": str(exc)})
            progress.record_failure(garment_id, f"{error_prefix}{str(exc) or 'Generation failed'}")
            return
        progress.successful += 1

    def _checkpoint(self, job_id: str, fields: dict[str, Any]):
        attempts = self.settings.checkpoint_write_attempts
        for attempt in range(1, attempts + 1):
            try:
                return self.store.update(job_id, fields)
            except Exception as exc:
                if attempt == attempts:
                    raise CheckpointWriteError(f"Progress for batch job {job_id} could not be saved: {exc}") from exc
                logger.warning(
                    "checkpoint_write_retry",
                    extra={"job_id": job_id, "attempt": attempt, "error": str(exc)},
                )
                self._sleep(self.settings.checkpoint_retry_delay_seconds)

    def _mark_failed(self, job_id: str) -> None:
        try:
            self.store.update(job_id, {"status": JobStatus.FAILED.value, "completed_at": utcnow()})
        except Exception:  # noqa: BLE001
            logger.exception("batch_job_mark_failed_error", extra={"job_id": job_id})


def build_runner(db: Session, gateway: GenerationGateway | None = None) -> BatchJobRunner:
    return BatchJobRunner(
        store=BatchJobStore(db),
        resolve_garment=GarmentResolver(db),
        gateway=gateway or get_generation_gateway(),
        image_sink=GeneratedImageSink(db),
        load_context=lambda configuration: load_prompt_context(db, configuration),
    )
