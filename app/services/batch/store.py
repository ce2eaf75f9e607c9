from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from app.models.batch_job import BatchJob
from app.models.brand_seed import BrandSeed
from app.models.fashion_model import FashionModel
from app.models.garment import Garment
from app.models.generated_image import GeneratedImage
from app.models.common import utcnow
from app.schemas.batch_job import BatchJobConfiguration
from app.services.batch.errors import BatchJobNotFoundError
from app.services.batch.prompts import PromptContext
from app.services.batch.state_machine import JobStatus

SORTABLE_FIELDS = {"created_at", "priority", "name", "status", "scheduled_for"}


class BatchJobStore:
    """Persistence for batch jobs. Every write commits on its own."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, fields: dict[str, Any]) -> BatchJob:
        garment_ids = list(fields.get("garment_ids") or [])
        job = BatchJob(
            name=fields["name"],
            status=JobStatus.PENDING.value,
            garment_ids=garment_ids,
            configuration=dict(fields.get("configuration") or {}),
            priority=fields.get("priority", 5),
            scheduled_for=fields.get("scheduled_for"),
            total_items=len(garment_ids),
            processed_items=0,
            successful_items=0,
            failed_items=0,
            failed_garment_ids=[],
            error_log=[],
        )
        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)
        return job

    def get(self, job_id: str) -> BatchJob | None:
        return self.db.get(BatchJob, job_id, populate_existing=True)

    def require(self, job_id: str) -> BatchJob:
        job = self.get(job_id)
        if job is None:
            raise BatchJobNotFoundError(f"Batch job {job_id} not found")
        return job

    def update(self, job_id: str, fields: dict[str, Any]) -> BatchJob:
        try:
            job = self.require(job_id)
            for key, value in fields.items():
                setattr(job, key, value)
            self.db.add(job)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(job)
        return job

    def claim(self, job_id: str, from_statuses: Iterable[str], fields: dict[str, Any] | None = None) -> bool:
        """Conditionally move a job into processing. False when another caller got there first."""
        values = {"status": JobStatus.PROCESSING.value, "updated_at": utcnow(), **(fields or {})}
        try:
            result = self.db.execute(
                update(BatchJob)
                .where(BatchJob.id == job_id, BatchJob.status.in_(list(from_statuses)))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return result.rowcount == 1

    def delete(self, job_id: str) -> bool:
        job = self.get(job_id)
        if job is None:
            return False
        self.db.delete(job)
        self.db.commit()
        return True

    def delete_many(self, job_ids: Iterable[str]) -> int:
        ids = list(job_ids)
        if not ids:
            return 0
        result = self.db.execute(delete(BatchJob).where(BatchJob.id.in_(ids)).execution_options(synchronize_session=False))
        self.db.commit()
        return result.rowcount or 0

    def list(self, sort: str | None = "-created_at") -> list[BatchJob]:
        stmt = select(BatchJob)
        if sort:
            descending = sort.startswith("-")
            field = sort.lstrip("-")
            if field not in SORTABLE_FIELDS:
                raise ValueError(f"Unsupported sort field: {field}")
            column = getattr(BatchJob, field)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        return list(self.db.scalars(stmt).all())


class GarmentResolver:
    def __init__(self, db: Session) -> None:
        self.db = db

    def __call__(self, garment_id: str) -> Garment | None:
        return self.db.get(Garment, garment_id)


class GeneratedImageSink:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(
        self,
        garment_id: str,
        image_url: str,
        prompt_used: str,
        model_type: str = "default",
        status: str = "completed",
    ) -> GeneratedImage:
        image = GeneratedImage(
            garment_id=garment_id,
            image_url=image_url,
            prompt_used=prompt_used,
            model_type=model_type,
            status=status,
        )
        try:
            self.db.add(image)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return image


def load_prompt_context(db: Session, configuration: BatchJobConfiguration) -> PromptContext:
    context = PromptContext()
    if configuration.model_id:
        persona = db.get(FashionModel, configuration.model_id)
        if persona is not None:
            context.model_prompt = persona.prompt
    if configuration.brand_seed_id:
        seed = db.get(BrandSeed, configuration.brand_seed_id)
        if seed is not None:
            context.brand_style = seed.brand_style
            context.brand_character = seed.character
    return context
