import logging
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

from pydantic import BaseModel, Field

from src.core.projects.backend import ProjectBackend
from src.core.projects.constants import (
    MILESTONE_SEQUENCE,
    UNKNOWN_ERROR,
    Field as ProjectField,
)
from src.core.projects.errors import extract_api_error
from src.core.projects.financial_year import financial_year_label, format_month_year
from src.core.projects.session_store import SessionStore

logger = logging.getLogger(__name__)


class EnrichmentOperationResult(BaseModel):
    success: bool
    data: Optional[dict[str, Any]] = Field(
        default=None, description="Enriched data; None leaves the previous data in place."
    )
    error: Optional[str] = Field(default=None, examples=["NETWORK_ERROR"])


class EnrichmentError(BaseModel):
    operation: str = Field(examples=["refresh_benefit_area_download_link"])
    error: str = Field(examples=["NETWORK_ERROR"])


class EnrichmentResult(BaseModel):
    success: bool = Field(description="True only when every operation succeeded.")
    data: dict[str, Any] = Field(description="Output of the last successful operation.")
    error: Optional[EnrichmentError] = Field(default=None, description="First failure, if any.")
    errors: list[EnrichmentError] = Field(default_factory=list)


@dataclass(frozen=True)
class EnrichmentContext:
    journey_id: str
    slug: str
    access_token: Optional[str]
    session_store: SessionStore
    backend: ProjectBackend
    now: datetime


EnrichmentOperation = Callable[[EnrichmentContext, dict[str, Any]], EnrichmentOperationResult]


def _operation_name(operation: EnrichmentOperation) -> str:
    return getattr(operation, "__name__", type(operation).__name__)


def enrich(
    context: EnrichmentContext,
    data: dict[str, Any],
    operations: Sequence[EnrichmentOperation],
) -> EnrichmentResult:
    """Run operations in order; a failing operation is recorded and skipped, never fatal."""
    current = deepcopy(data)
    errors: list[EnrichmentError] = []
    for operation in operations:
        name = _operation_name(operation)
        try:
            result = operation(context, deepcopy(current))
        except Exception as exc:
            logger.exception(
                "Enrichment operation raised",
                extra={"extra_fields": {"operation": name, "slug": context.slug}},
            )
            errors.append(
                EnrichmentError(operation=name, error=getattr(exc, "error_code", None) or str(exc))
            )
            continue
        if not result.success:
            error = result.error or UNKNOWN_ERROR
            logger.warning(
                "Enrichment operation failed",
                extra={"extra_fields": {"operation": name, "slug": context.slug, "error": error}},
            )
            errors.append(EnrichmentError(operation=name, error=error))
            continue
        if result.data is not None:
            current = result.data
    return EnrichmentResult(
        success=not errors,
        data=current,
        error=errors[0] if errors else None,
        errors=errors,
    )


def _parse_expiry(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def download_link_needs_refresh(data: dict[str, Any], now: datetime) -> bool:
    if not data.get(ProjectField.BENEFIT_AREA_FILE_NAME):
        return False
    if not data.get(ProjectField.BENEFIT_AREA_FILE_DOWNLOAD_URL):
        return True
    expiry = _parse_expiry(data.get(ProjectField.BENEFIT_AREA_FILE_DOWNLOAD_EXPIRY))
    return expiry is None or expiry <= now


def refresh_benefit_area_download_link(
    context: EnrichmentContext, data: dict[str, Any]
) -> EnrichmentOperationResult:
    if not download_link_needs_refresh(data, context.now):
        return EnrichmentOperationResult(success=True, data=data)

    response = context.backend.get_benefit_area_download_url(
        slug=context.slug, access_token=context.access_token
    )
    if not response.success:
        return EnrichmentOperationResult(
            success=False, error=extract_api_error(response.body)["error_code"]
        )

    link = {
        ProjectField.BENEFIT_AREA_FILE_DOWNLOAD_URL: response.data.get("download_url"),
        ProjectField.BENEFIT_AREA_FILE_DOWNLOAD_EXPIRY: response.data.get("expires_at"),
    }
    draft = context.session_store.get(context.journey_id) or {}
    draft.update(link)
    context.session_store.set(context.journey_id, draft)
    data.update(link)
    return EnrichmentOperationResult(success=True, data=data)


def attach_display_labels(
    context: EnrichmentContext, data: dict[str, Any]
) -> EnrichmentOperationResult:
    labels: dict[str, Optional[str]] = {}
    for name in (ProjectField.FINANCIAL_START_YEAR, ProjectField.FINANCIAL_END_YEAR):
        year = data.get(name)
        labels[name] = financial_year_label(int(year)) if year not in (None, "") else None
    milestones = (
        *MILESTONE_SEQUENCE,
        (ProjectField.EARLIEST_WITH_GIA_MONTH, ProjectField.EARLIEST_WITH_GIA_YEAR),
    )
    for month_field, year_field in milestones:
        labels[month_field.removesuffix("_month")] = format_month_year(
            data.get(month_field), data.get(year_field)
        )
    data["display"] = labels
    return EnrichmentOperationResult(success=True, data=data)


OVERVIEW_ENRICHMENT_OPERATIONS: tuple[EnrichmentOperation, ...] = (
    refresh_benefit_area_download_link,
    attach_display_labels,
)
