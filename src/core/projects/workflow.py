import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

from src.core.projects.backend import ProjectBackend
from src.core.projects.constants import (
    IS_EDIT,
    PROJECT_NOT_FOUND,
    UNKNOWN_ERROR,
    Field,
    SaveLevel,
)
from src.core.projects.edit_session import initialize_edit_session, is_editing, merge_answers
from src.core.projects.errors import (
    ApiError,
    ApiValidationError,
    ProjectConfigurationError,
    ProjectNotFoundError,
    extract_api_error,
)
from src.core.projects.financial_year import current_fiscal_year, is_year_beyond_range
from src.core.projects.navigation import resolve_transition, step_path
from src.core.projects.steps import OVERVIEW, Step, get_step
from src.core.projects.submission import submit_project
from src.core.projects.validation import ValidationContext
from src.core.projects.view_models import financial_year_floor

logger = logging.getLogger(__name__)

_MANUAL_VARIANTS = {
    Step.FINANCIAL_START_YEAR: (Step.FINANCIAL_START_YEAR_MANUAL, Field.FINANCIAL_START_YEAR),
    Step.FINANCIAL_END_YEAR: (Step.FINANCIAL_END_YEAR_MANUAL, Field.FINANCIAL_END_YEAR),
}


@dataclass(frozen=True)
class StepOutcome:
    draft: dict[str, Any]
    target: Optional[str] = None
    redirect_path: Optional[str] = None
    form_data: dict[str, Any] = field(default_factory=dict)
    field_errors: dict[str, str] = field(default_factory=dict)
    error_code: Optional[str] = None
    support_code: Optional[str] = None
    submitted_level: Optional[SaveLevel] = None

    @property
    def success(self) -> bool:
        return self.redirect_path is not None


def ensure_step_available(step: str, is_edit: bool) -> None:
    if not get_step(step).available_in(is_edit):
        raise ProjectConfigurationError("STEP_NOT_AVAILABLE")


def manual_step_redirect(step: str, draft: Mapping[str, Any], today: date) -> Optional[str]:
    """Stored years outside the offered options are shown on the free-text variant."""
    if step not in _MANUAL_VARIANTS:
        return None
    manual_step, name = _MANUAL_VARIANTS[step]
    if step == Step.FINANCIAL_END_YEAR:
        first_offered = financial_year_floor(draft, today)
    else:
        first_offered = current_fiscal_year(today)
    if is_year_beyond_range(draft.get(name), first_offered):
        return manual_step
    return None


def process_step_submission(
    *,
    step: str,
    form: Mapping[str, Any],
    draft: Mapping[str, Any],
    access_token: Optional[str],
    backend: ProjectBackend,
    today: date,
) -> StepOutcome:
    descriptor = get_step(step)
    is_edit = draft.get(IS_EDIT) is True
    ensure_step_available(step, is_edit)

    answers = {name: form.get(name) for name in descriptor.fields}
    merged = merge_answers(draft, answers)
    if descriptor.prepare is not None:
        descriptor.prepare(merged)

    outcome = descriptor.validator.validate(merged, ValidationContext(today=today))
    if not outcome.is_valid:
        logger.info(
            "Project step validation failed",
            extra={"extra_fields": {"step": step, "field_errors": outcome.errors}},
        )
        return StepOutcome(draft=dict(draft), form_data=answers, field_errors=outcome.errors)
    merged.update(outcome.values)

    transition = resolve_transition(step, merged, is_edit)
    if transition.save_level is not None:
        result = submit_project(
            draft=merged,
            level=transition.save_level,
            access_token=access_token,
            backend=backend,
            step=step,
        )
        if not result.success:
            error = result.error
            if isinstance(error, ApiValidationError):
                return StepOutcome(draft=merged, form_data=answers, field_errors=error.field_errors)
            return StepOutcome(
                draft=merged,
                form_data=answers,
                error_code=error.error_code if error is not None else None,
                support_code=error.support_code if isinstance(error, ApiError) else None,
            )
        merged = result.draft
        if transition.target == OVERVIEW and not merged.get(Field.SLUG):
            logger.error(
                "Project saved without identifiers",
                extra={"extra_fields": {"step": step, "level": transition.save_level.value}},
            )
            return StepOutcome(draft=merged, form_data=answers, error_code=UNKNOWN_ERROR)

    return StepOutcome(
        draft=merged,
        target=transition.target,
        redirect_path=step_path(transition.target, merged.get(Field.SLUG), is_edit),
        submitted_level=transition.save_level,
    )


def fetch_project(*, slug: str, backend: ProjectBackend, access_token: Optional[str]) -> dict:
    response = backend.get_project(slug=slug, access_token=access_token)
    if response.success:
        return response.data
    if response.status_code == 404:
        raise ProjectNotFoundError(PROJECT_NOT_FOUND)
    detail = extract_api_error(response.body)
    raise ApiError(
        detail["error_code"],
        warning_code=detail["warning_code"],
        support_code=detail["support_code"],
    )


def load_edit_draft(
    *,
    slug: str,
    draft: Optional[Mapping[str, Any]],
    backend: ProjectBackend,
    access_token: Optional[str],
) -> dict[str, Any]:
    """Reuse the journey's edit draft for this project, otherwise start one from the backend."""
    if is_editing(draft, slug):
        return dict(draft)
    edit_draft = initialize_edit_session(
        fetch_project(slug=slug, backend=backend, access_token=access_token)
    )
    edit_draft.setdefault(Field.SLUG, slug)
    return edit_draft
