from datetime import date
from typing import Any, Mapping, Optional

from src.core.projects.constants import (
    INTERVENTION_TYPES_BY_PROJECT_TYPE,
    IS_EDIT,
    Field,
    ProjectType,
)
from src.core.projects.financial_year import (
    after_march_year,
    current_fiscal_year,
    financial_year_label,
    financial_year_options,
    format_month_year,
)
from src.core.projects.models import ProjectStepView
from src.core.projects.navigation import resolve_back_link, step_path
from src.core.projects.steps import Step, StepDescriptor
from src.core.projects.validation import previous_milestone


def _options(descriptor: StepDescriptor, draft: Mapping[str, Any], today: date) -> list[dict]:
    if descriptor.step == Step.TYPE:
        return [{"value": item.value} for item in ProjectType]
    if descriptor.step == Step.INTERVENTION_TYPE:
        allowed = INTERVENTION_TYPES_BY_PROJECT_TYPE.get(draft.get(Field.PROJECT_TYPE), ())
        return [{"value": value} for value in allowed]
    if descriptor.step == Step.PRIMARY_INTERVENTION_TYPE:
        return [{"value": value} for value in draft.get(Field.PROJECT_INTERVENTION_TYPES) or []]
    if descriptor.step == Step.FINANCIAL_START_YEAR:
        return financial_year_options(current_fiscal_year(today))
    if descriptor.step == Step.FINANCIAL_END_YEAR:
        return financial_year_options(financial_year_floor(draft, today))
    if descriptor.step == Step.COULD_START_EARLY:
        return [{"value": True}, {"value": False}]
    return []


def financial_year_floor(draft: Mapping[str, Any], today: date) -> int:
    floor = current_fiscal_year(today)
    start = draft.get(Field.FINANCIAL_START_YEAR)
    if isinstance(start, int) and start > floor:
        return start
    return floor


def _hints(descriptor: StepDescriptor, draft: Mapping[str, Any], today: date) -> dict[str, Any]:
    hints: dict[str, Any] = {}
    if descriptor.view.startswith("financial-year"):
        if descriptor.step.startswith(Step.FINANCIAL_END_YEAR):
            options_start = financial_year_floor(draft, today)
        else:
            options_start = current_fiscal_year(today)
        hints["after_march_year"] = after_march_year(options_start)
    if descriptor.view == "important-date":
        month_field = descriptor.fields[0]
        previous = previous_milestone(month_field)
        if previous is not None:
            hints["previous_stage"] = format_month_year(
                draft.get(previous[0]), draft.get(previous[1])
            )
        for name in (Field.FINANCIAL_START_YEAR, Field.FINANCIAL_END_YEAR):
            year = draft.get(name)
            hints[f"{name}_label"] = financial_year_label(year) if isinstance(year, int) else None
    return hints


def build_step_view(
    descriptor: StepDescriptor,
    draft: Mapping[str, Any],
    *,
    today: date,
    form_data: Optional[Mapping[str, Any]] = None,
    field_errors: Optional[Mapping[str, str]] = None,
    error_code: Optional[str] = None,
    support_code: Optional[str] = None,
) -> ProjectStepView:
    is_edit = draft.get(IS_EDIT) is True
    slug = draft.get(Field.SLUG)
    source = form_data if form_data is not None else draft
    back_target = resolve_back_link(descriptor.step, draft, is_edit)
    return ProjectStepView(
        step=descriptor.step,
        view=descriptor.view,
        mode="edit" if is_edit else "create",
        slug=slug,
        back_link=step_path(back_target, slug, is_edit) if back_target else None,
        values={name: source.get(name) for name in descriptor.fields},
        field_errors=dict(field_errors or {}),
        error_code=error_code,
        support_code=support_code,
        options=_options(descriptor, draft, today),
        hints=_hints(descriptor, draft, today),
    )
