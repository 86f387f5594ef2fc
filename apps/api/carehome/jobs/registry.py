"""Maps job types to the coroutine that runs them."""

from __future__ import annotations

from typing import Awaitable, Callable, Mapping

from carehome.db.enums import JobType
from carehome.jobs.handlers import care_file_pdfs

JobHandler = Callable[..., Awaitable[None]]


class UnknownJobTypeError(ValueError):
    pass


JOB_HANDLERS: Mapping[JobType, JobHandler] = {
    JobType.GENERATE_CARE_FILE_PDF: care_file_pdfs.process_generate_care_file_pdf,
}


def resolve_job_handler(job_type: str) -> JobHandler:
    try:
        return JOB_HANDLERS[JobType(job_type)]
    except (ValueError, KeyError):
        raise UnknownJobTypeError(f"Unknown job type: {job_type}") from None
