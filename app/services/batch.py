import asyncio
import logging

from app.jobs import JobStore
from app.schemas.jobs import LogStatus, ParsingJob
from app.services.casino_parser import CasinoParserService

logger = logging.getLogger(__name__)


class BatchService:
    """Runs a list of URLs sequentially in the background as one tracked job."""

    def __init__(self, parser: CasinoParserService, jobs: JobStore):
        self._parser = parser
        self._jobs = jobs
        self._tasks: set[asyncio.Task] = set()

    async def submit(self, urls: list[str], source: str = "manual") -> ParsingJob:
        job = await self._jobs.create_job(total_urls=len(urls), source=source)
        logger.info("[Job %s] Queued %d URLs (source=%s)", job.id, len(urls), source)

        task = asyncio.create_task(self.run(urls, job.id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job

    async def run(self, urls: list[str], job_id: int) -> None:
        successful = 0
        failed = 0
        try:
            await self._jobs.mark_processing(job_id)
            logger.info("[Job %s] Starting batch of %d URLs", job_id, len(urls))

            for index, url in enumerate(urls):
                try:
                    await self._jobs.add_log(url, LogStatus.pending, "Processing URL", job_id=job_id)
                    result = await self._parser.parse_and_save(url, job_id=job_id)
                    if result.success:
                        successful += 1
                    else:
                        failed += 1
                except Exception as exc:
                    failed += 1
                    logger.exception("[Job %s] Error processing %s", job_id, url)
                    await self._log_error(url, job_id, exc)

                await self._save_progress(job_id, index + 1, successful, failed)

            await self._jobs.mark_completed(job_id)
            logger.info(
                "[Job %s] Completed: %d succeeded, %d failed", job_id, successful, failed
            )
        except Exception:
            logger.exception("[Job %s] Batch processing failed", job_id)
            try:
                await self._jobs.mark_failed(job_id)
            except Exception:
                logger.exception("[Job %s] Could not mark job as failed", job_id)

    async def _log_error(self, url: str, job_id: int, exc: Exception) -> None:
        try:
            await self._jobs.add_log(url, LogStatus.error, f"Error: {exc}", job_id=job_id)
        except Exception:
            logger.exception("[Job %s] Could not write error log for %s", job_id, url)

    async def _save_progress(
        self, job_id: int, processed: int, successful: int, failed: int
    ) -> None:
        try:
            await self._jobs.update_progress(job_id, processed, successful, failed)
        except Exception:
            logger.exception("[Job %s] Could not update progress", job_id)
