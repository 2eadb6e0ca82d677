import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from src.core.projects.backend import ProjectBackend
from src.core.projects.constants import IDENTIFIER_FIELDS, Field, SaveLevel
from src.core.projects.errors import (
    ApiValidationError,
    NetworkError,
    ProjectApiResponseError,
    ProjectSubmissionError,
    classify_submission_error,
)
from src.core.projects.payload import build_payload, resolve_save_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    level: SaveLevel
    draft: dict[str, Any]
    data: dict[str, Any] = field(default_factory=dict)
    error: Optional[ProjectSubmissionError] = None


def reconcile_identifiers(draft: Mapping[str, Any], data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy server-assigned identifiers into the draft once, and only as a complete pair."""
    updated = dict(draft)
    if updated.get(Field.REFERENCE_NUMBER):
        return updated
    if not all(data.get(name) for name in IDENTIFIER_FIELDS):
        return updated
    for name in IDENTIFIER_FIELDS:
        updated[name] = data[name]
    return updated


def submit_project(
    *,
    draft: Mapping[str, Any],
    level: Union[SaveLevel, str],
    access_token: Optional[str],
    backend: ProjectBackend,
    step: Optional[str] = None,
) -> SubmissionResult:
    save_level = resolve_save_level(level)
    payload = build_payload(draft, save_level)
    try:
        response = backend.upsert_project(
            level=save_level.value, payload=payload, access_token=access_token
        )
        if not response.success or response.body.get("success") is False:
            raise ProjectApiResponseError(response.body, status_code=response.status_code)
    except (ProjectApiResponseError, NetworkError) as exc:
        error = classify_submission_error(exc)
        body = exc.body if isinstance(exc, ProjectApiResponseError) else {}
        logger.warning(
            "Project submission failed",
            extra={
                "extra_fields": {
                    "step": step,
                    "level": save_level.value,
                    "reference_number": draft.get(Field.REFERENCE_NUMBER),
                    "error_code": error.error_code,
                    "validation_errors": (
                        error.field_errors if isinstance(error, ApiValidationError) else None
                    ),
                    "errors": body.get("errors"),
                }
            },
        )
        return SubmissionResult(success=False, level=save_level, draft=dict(draft), error=error)

    updated = reconcile_identifiers(draft, response.data)
    logger.info(
        "Project submitted",
        extra={
            "extra_fields": {
                "step": step,
                "level": save_level.value,
                "reference_number": updated.get(Field.REFERENCE_NUMBER),
            }
        },
    )
    return SubmissionResult(success=True, level=save_level, draft=updated, data=response.data)
