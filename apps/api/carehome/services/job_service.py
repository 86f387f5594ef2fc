"""
Deferred work queue.

Jobs are rows in the `jobs` table picked up by `carehome.worker`. The write
path schedules them with `run_after` inside its own transaction, so a job
only exists once the record that triggered it has committed.
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from carehome.core.structured_logging import build_log_context
from carehome.db.enums import JobStatus, JobType
from carehome.db.models import Job

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
MAX_ERROR_LENGTH = 1000


def _now() -> datetime:
    return datetime.now(timezone.utc)


def run_after(
    db: Session,
    delay_ms: int,
    job_type: JobType,
    payload: dict,
    *,
    org_id: UUID,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    commit: bool = True,
) -> Job:
    """
    Queue `job_type` to run no earlier than `delay_ms` from now.

    With commit=False the job is only flushed and joins the caller's
    transaction.
    """
    if delay_ms < 0:
        raise ValueError("delay_ms must not be negative")
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    job = Job(
        organization_id=org_id,
        job_type=job_type.value,
        payload=payload,
        run_at=_now() + timedelta(milliseconds=delay_ms),
        status=JobStatus.PENDING.value,
        attempts=0,
        max_attempts=max_attempts,
    )
    db.add(job)
    if commit:
        db.commit()
        db.refresh(job)
    else:
        db.flush()
    return job


def get_due_jobs(db: Session, limit: int = 10) -> list[Job]:
    """
    Pending jobs whose run_at has passed, oldest first.

    Rows are locked with SKIP LOCKED on PostgreSQL so concurrent workers
    never pick up the same job.
    """
    return (
        db.query(Job)
        .filter(
            Job.status == JobStatus.PENDING.value,
            Job.run_at <= _now(),
        )
        .order_by(Job.run_at, Job.created_at)
        .limit(limit)
        .with_for_update(skip_locked=True)
        .all()
    )


def get_job(db: Session, job_id: UUID, org_id: UUID | None = None) -> Job | None:
    query = db.query(Job).filter(Job.id == job_id)
    if org_id:
        query = query.filter(Job.organization_id == org_id)
    return query.first()


def list_jobs(
    db: Session,
    org_id: UUID,
    status: JobStatus | None = None,
    job_type: JobType | None = None,
    limit: int = 50,
) -> list[Job]:
    """Jobs for an organization, newest first."""
    query = db.query(Job).filter(Job.organization_id == org_id)
    if status:
        query = query.filter(Job.status == status.value)
    if job_type:
        query = query.filter(Job.job_type == job_type.value)
    return query.order_by(Job.created_at.desc()).limit(limit).all()


def start_attempt(db: Session, job: Job) -> Job:
    job.status = JobStatus.RUNNING.value
    job.attempts += 1
    db.commit()
    db.refresh(job)
    return job


def complete_job(db: Session, job: Job) -> Job:
    job.status = JobStatus.COMPLETED.value
    job.completed_at = _now()
    job.last_error = None
    db.commit()
    db.refresh(job)
    return job


def fail_attempt(db: Session, job: Job, error: str) -> bool:
    """
    Record a failed attempt.

    Returns True when the job goes back to pending for another attempt,
    False once max_attempts is exhausted and the job is failed for good.
    """
    job.last_error = error[:MAX_ERROR_LENGTH]
    will_retry = job.attempts < job.max_attempts
    job.status = JobStatus.PENDING.value if will_retry else JobStatus.FAILED.value
    db.commit()
    db.refresh(job)
    if not will_retry:
        logger.warning(
            "Job %s failed after %s attempts",
            job.id,
            job.attempts,
            extra=build_log_context(job_id=str(job.id), org_id=str(job.organization_id)),
        )
    return will_retry
