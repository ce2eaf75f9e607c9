from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

JobStatusLiteral = Literal["pending", "processing", "completed", "failed"]


class BatchJobConfiguration(BaseModel):
    """Generation parameters carried on a job. Every field is optional; fallbacks are applied when prompts are built."""

    model_config = ConfigDict(extra="allow", protected_namespaces=())

    model_id: str | None = None
    gender: str | None = None
    brand_seed_id: str | None = None
    environment: str | None = None


class ErrorLogEntry(BaseModel):
    garment_id: str
    error: str
    timestamp: datetime


class BatchJobCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    garment_ids: list[str] = Field(min_length=1)
    configuration: BatchJobConfiguration = Field(default_factory=BatchJobConfiguration)
    priority: int = Field(default=5, ge=1, le=10)
    scheduled_for: datetime | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped


class BatchJobRead(BaseModel):
    id: str
    name: str
    status: JobStatusLiteral
    garment_ids: list[str]
    configuration: dict
    priority: int
    scheduled_for: datetime | None
    total_items: int
    processed_items: int
    successful_items: int
    failed_items: int
    failed_garment_ids: list[str]
    error_log: list[ErrorLogEntry]
    started_at: datetime | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BulkDeleteRequest(BaseModel):
    ids: list[str] = Field(min_length=1)


class JobDispatchResponse(BaseModel):
    job_id: str
    status: str
