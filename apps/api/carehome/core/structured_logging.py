"""
PHI-safe log context.

Only identifiers go into log records. Resident names, dates of birth and
form payloads never do.
"""

from uuid import UUID

LOGGABLE_IDENTIFIERS = frozenset(
    {
        "user_id",
        "org_id",
        "resident_id",
        "record_id",
        "form_kind",
        "incident_id",
        "report_id",
        "job_id",
    }
)


def build_log_context(**identifiers: str | UUID | None) -> dict[str, str]:
    """Return an `extra=` dict of the given identifiers, skipping empty ones."""
    unknown = set(identifiers) - LOGGABLE_IDENTIFIERS
    if unknown:
        raise TypeError(f"Not a loggable identifier: {', '.join(sorted(unknown))}")
    return {key: str(value) for key, value in identifiers.items() if value}
