from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class JobStatus(StrEnum):
    queued = "queued"
    processing = "processing"
    completed = "completed"
    failed = "failed"


class LogStatus(StrEnum):
    pending = "pending"
    success = "success"
    error = "error"


class ParsingJob(BaseModel):
    id: int
    total_urls: int
    processed_urls: int = 0
    successful_urls: int = 0
    failed_urls: int = 0
    status: JobStatus = JobStatus.queued
    source: str = "manual"
    created_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


class ParseLog(BaseModel):
    id: int | None = None
    url: str
    status: LogStatus
    message: str | None = None
    job_id: int | None = None
    casino_id: int | None = None
    created_at: datetime | None = None
