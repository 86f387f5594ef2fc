"""Care file form kinds and payload validation.

Every assessment form goes through one generic engine. A form kind only
supplies its strict payload model, the renderer path for its PDF template
and a few display hints. Drafts are validated against a derived model in
which every field is optional but present values keep their full rules.
"""

from dataclasses import dataclass, field
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, create_model

from carehome.schemas.care_files import (
    AdmissionPayload,
    CareFilePayload,
    DependencyPayload,
    DnacprPayload,
    PeepPayload,
    PhotographyConsentPayload,
    SkinIntegrityPayload,
)


class CareFileError(Exception):
    """Base exception for care file operations."""


class UnknownFormKindError(CareFileError):
    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown care file form kind: {kind}")


class CareFileValidationError(CareFileError):
    """Payload rejected before any database access."""

    def __init__(self, errors: list[dict[str, Any]]):
        self.errors = errors
        super().__init__(f"Invalid care file payload ({len(errors)} errors)")


def build_draft_model(model: type[CareFilePayload]) -> type[BaseModel]:
    """Derive a model where every field is optional but typed as in `model`."""
    fields: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        fields[name] = (Optional[annotation], None)
    return create_model(
        f"{model.__name__}Draft",
        __config__=ConfigDict(extra="forbid"),
        **fields,
    )


@dataclass(frozen=True)
class FormKindSpec:
    name: str
    label: str
    payload_model: type[CareFilePayload]
    renderer_path: str
    include_resident_snapshot: bool = False
    summary_fields: tuple[str, ...] = ()
    draft_model: type[BaseModel] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "draft_model", build_draft_model(self.payload_model))


FORM_KINDS: dict[str, FormKindSpec] = {
    spec.name: spec
    for spec in (
        FormKindSpec(
            name="admission",
            label="Admission assessment",
            payload_model=AdmissionPayload,
            renderer_path="/api/pdf/admission",
            summary_fields=("first_name", "last_name", "bedroom_number"),
        ),
        FormKindSpec(
            name="dependency",
            label="Dependency assessment",
            payload_model=DependencyPayload,
            renderer_path="/api/pdf/dependency",
            summary_fields=("dependency_level", "completed_by", "date"),
        ),
        FormKindSpec(
            name="dnacpr",
            label="DNACPR",
            payload_model=DnacprPayload,
            renderer_path="/api/pdf/dnacpr",
            include_resident_snapshot=True,
            summary_fields=("dnacpr", "reason", "date"),
        ),
        FormKindSpec(
            name="skin-integrity",
            label="Skin integrity assessment",
            payload_model=SkinIntegrityPayload,
            renderer_path="/api/pdf/skin-integrity",
            summary_fields=(
                "sensory_perception",
                "moisture",
                "activity",
                "mobility",
                "nutrition",
                "friction_shear",
                "date",
            ),
        ),
        FormKindSpec(
            name="peep",
            label="Personal emergency evacuation plan",
            payload_model=PeepPayload,
            renderer_path="/api/pdf/peep",
            include_resident_snapshot=True,
            summary_fields=("staff_needed", "completed_by", "date"),
        ),
        FormKindSpec(
            name="photography-consent",
            label="Photography consent",
            payload_model=PhotographyConsentPayload,
            renderer_path="/api/pdf/photography-consent",
            summary_fields=(
                "healthcare_records",
                "social_activities_internal",
                "social_activities_external",
                "date",
            ),
        ),
    )
}


def get_form_kind(kind: str) -> FormKindSpec:
    spec = FORM_KINDS.get(kind)
    if spec is None:
        raise UnknownFormKindError(kind)
    return spec


def validate_payload(kind: str, payload: dict[str, Any], *, draft: bool = False) -> dict[str, Any]:
    """
    Validate a form payload and return it as a JSON-ready dict.

    Only fields the caller actually sent are returned, so draft merges never
    blank out previously saved values.

    Raises:
        UnknownFormKindError: kind is not registered
        CareFileValidationError: missing required field, wrong type or literal
    """
    spec = get_form_kind(kind)
    model = spec.draft_model if draft else spec.payload_model
    try:
        validated = model.model_validate(payload)
    except ValidationError as exc:
        # Inputs are clinical data; keep them out of the error report
        raise CareFileValidationError(
            exc.errors(include_url=False, include_context=False, include_input=False)
        ) from exc
    return validated.model_dump(mode="json", exclude_unset=True)


def summarize_payload(kind: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Pick the list-view fields for a form kind."""
    spec = get_form_kind(kind)
    return {name: payload[name] for name in spec.summary_fields if name in payload}
