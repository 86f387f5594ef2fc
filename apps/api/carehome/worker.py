"""
Background worker: runs deferred jobs (care file PDF generation).

Usage:
    python -m carehome.worker

Runs as its own process next to the API and polls the jobs table every
WORKER_POLL_INTERVAL seconds.
"""

import asyncio
import logging

from carehome.core.config import settings
from carehome.core.structured_logging import build_log_context
from carehome.db.session import SessionLocal
from carehome.jobs.registry import resolve_job_handler
from carehome.services import job_service

logger = logging.getLogger(__name__)


async def process_job(db, job) -> None:
    handler = resolve_job_handler(job.job_type)
    logger.info(
        "Running %s job %s (attempt %s/%s)",
        job.job_type,
        job.id,
        job.attempts,
        job.max_attempts,
    )
    await handler(db, job)


async def process_pending_jobs(db, limit: int | None = None) -> int:
    """Run one batch of due jobs. Returns how many were picked up."""
    jobs = job_service.get_due_jobs(db, limit=limit or settings.WORKER_BATCH_SIZE)

    for job in jobs:
        context = build_log_context(job_id=str(job.id), org_id=str(job.organization_id))
        job_service.start_attempt(db, job)
        try:
            await process_job(db, job)
        except Exception as e:
            db.rollback()
            will_retry = job_service.fail_attempt(db, job, f"{type(e).__name__}: {e}")
            logger.error(
                "Job %s raised %s%s",
                job.id,
                type(e).__name__,
                ", will retry" if will_retry else "",
                extra=context,
            )
            continue
        job_service.complete_job(db, job)
    return len(jobs)


async def worker_loop() -> None:
    logger.info(
        "Worker starting (poll interval: %ss, batch size: %s)",
        settings.WORKER_POLL_INTERVAL,
        settings.WORKER_BATCH_SIZE,
    )
    if not settings.pdf_generation_enabled:
        logger.warning("PDF_API_URL is not an https:// URL, care file PDFs will be marked failed")

    while True:
        with SessionLocal() as db:
            try:
                await process_pending_jobs(db)
            except Exception:
                logger.exception("Worker poll failed")
        await asyncio.sleep(settings.WORKER_POLL_INTERVAL)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Worker shutting down")


if __name__ == "__main__":
    main()
