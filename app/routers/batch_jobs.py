from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.session import get_db
from app.models.batch_job import BatchJob
from app.schemas.batch_job import BatchJobCreate, BatchJobRead, BulkDeleteRequest, JobDispatchResponse
from app.services.batch.guard import batch_run_guard
from app.services.batch.state_machine import JobStatus, can_retry, can_start
from app.services.batch.store import BatchJobStore
from app.workers.tasks import process_batch_job, retry_batch_job

router = APIRouter(prefix="/batch-jobs", tags=["batch-jobs"])


@router.post("", response_model=BatchJobRead, status_code=status.HTTP_201_CREATED)
def create_batch_job(payload: BatchJobCreate, db: Session = Depends(get_db)) -> BatchJob:
    return BatchJobStore(db).create(payload.model_dump(mode="python"))


@router.get("", response_model=list[BatchJobRead])
def list_batch_jobs(
    sort: str = Query("-created_at", pattern="^-?(created_at|priority|name|status|scheduled_for)$"),
    db: Session = Depends(get_db),
) -> list[BatchJob]:
    return BatchJobStore(db).list(sort)


@router.get("/{job_id}", response_model=BatchJobRead)
def get_batch_job(job_id: str, db: Session = Depends(get_db)) -> BatchJob:
    job = BatchJobStore(db).get(job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch job not found")
    return job


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_batch_job(job_id: str, db: Session = Depends(get_db)) -> None:
    store = BatchJobStore(db)
    job = store.get(job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch job not found")
    if job.status == JobStatus.PROCESSING.value:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Batch job is processing")
    store.delete(job_id)
    return None


@router.post("/bulk-delete")
def bulk_delete_batch_jobs(payload: BulkDeleteRequest, db: Session = Depends(get_db)) -> dict:
    store = BatchJobStore(db)
    deletable = [job_id for job_id in payload.ids if (job := store.get(job_id)) and job.status != JobStatus.PROCESSING.value]
    return {"deleted": store.delete_many(deletable)}


@router.post("/{job_id}/start", response_model=JobDispatchResponse, status_code=status.HTTP_202_ACCEPTED)
def start_batch_job(job_id: str, db: Session = Depends(get_db)) -> JobDispatchResponse:
    store = BatchJobStore(db)
    job = _require_job(store, job_id)
    if not can_start(job.status):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Batch job is {job.status}, not pending")
    _ensure_idle()
    _dispatch(process_batch_job, job_id)
    return JobDispatchResponse(job_id=job_id, status=store.require(job_id).status)


@router.post("/{job_id}/retry", response_model=JobDispatchResponse, status_code=status.HTTP_202_ACCEPTED)
def retry_batch_job_items(job_id: str, db: Session = Depends(get_db)) -> JobDispatchResponse:
    store = BatchJobStore(db)
    job = _require_job(store, job_id)
    if not can_retry(job.status, job.failed_garment_ids):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Batch job has no failed garments to retry")
    _ensure_idle()
    _dispatch(retry_batch_job, job_id)
    return JobDispatchResponse(job_id=job_id, status=store.require(job_id).status)


def _require_job(store: BatchJobStore, job_id: str) -> BatchJob:
    job = store.get(job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Batch job not found")
    return job


def _ensure_idle() -> None:
    if batch_run_guard.is_busy():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Batch job {batch_run_guard.active_job_id} is already processing",
        )


def _dispatch(task, job_id: str) -> None:
    if get_settings().celery_task_always_eager:
        task(job_id)
    else:
        task.delay(job_id)
