from __future__ import annotations

from datetime import datetime, timezone

from app.schemas.jobs import JobStatus, LogStatus, ParseLog, ParsingJob
from app.services.supabase import SupabaseService

JOBS_TABLE = "parsing_jobs"
LOGS_TABLE = "parse_logs"

ACTIVE_STATUSES = (JobStatus.queued, JobStatus.processing)
MAX_LOGS = 50


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JobStore:
    """Batch job rows and their parse log rows, persisted in the datastore."""

    def __init__(self, db: SupabaseService) -> None:
        self._db = db

    async def create_job(self, total_urls: int, source: str = "manual") -> ParsingJob:
        rows = await self._db.insert(JOBS_TABLE, {
            "total_urls": total_urls,
            "processed_urls": 0,
            "successful_urls": 0,
            "failed_urls": 0,
            "status": JobStatus.queued.value,
            "source": source,
        })
        return ParsingJob(**rows[0])

    async def get_job(self, job_id: int) -> ParsingJob | None:
        row = await self._db.select_one(JOBS_TABLE, eq={"id": job_id})
        return ParsingJob(**row) if row else None

    async def list_active(self) -> list[ParsingJob]:
        rows = await self._db.select(
            JOBS_TABLE,
            in_={"status": [s.value for s in ACTIVE_STATUSES]},
            order="created_at",
            descending=True,
        )
        return [ParsingJob(**r) for r in rows]

    async def mark_processing(self, job_id: int) -> None:
        await self._db.update(
            JOBS_TABLE,
            {"status": JobStatus.processing.value, "started_at": _now()},
            eq={"id": job_id},
        )

    async def update_progress(
        self, job_id: int, processed: int, successful: int, failed: int
    ) -> None:
        await self._db.update(
            JOBS_TABLE,
            {
                "processed_urls": processed,
                "successful_urls": successful,
                "failed_urls": failed,
            },
            eq={"id": job_id},
        )

    async def mark_completed(self, job_id: int) -> None:
        await self._db.update(
            JOBS_TABLE,
            {"status": JobStatus.completed.value, "completed_at": _now()},
            eq={"id": job_id},
        )

    async def mark_failed(self, job_id: int) -> None:
        await self._db.update(
            JOBS_TABLE,
            {"status": JobStatus.failed.value, "completed_at": _now()},
            eq={"id": job_id},
        )

    async def add_log(
        self,
        url: str,
        status: LogStatus,
        message: str,
        job_id: int | None = None,
        casino_id: int | None = None,
    ) -> ParseLog:
        rows = await self._db.insert(LOGS_TABLE, {
            "url": url,
            "status": status.value,
            "message": message,
            "job_id": job_id,
            "casino_id": casino_id,
        })
        return ParseLog(**rows[0])

    async def update_log(self, log_id: int, status: LogStatus, message: str) -> None:
        await self._db.update(
            LOGS_TABLE,
            {"status": status.value, "message": message},
            eq={"id": log_id},
        )

    async def recent_logs(self, job_id: int, limit: int = MAX_LOGS) -> list[ParseLog]:
        rows = await self._db.select(
            LOGS_TABLE,
            eq={"job_id": job_id},
            order="created_at",
            descending=True,
            limit=min(limit, MAX_LOGS),
        )
        return [ParseLog(**r) for r in rows]
