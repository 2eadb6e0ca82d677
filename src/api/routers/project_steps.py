from datetime import date
from typing import Annotated, Any, Optional, Union

from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from src.api.dependencies import (
    get_access_token,
    get_backend,
    get_journey_id,
    get_session_store,
    get_today,
)
from src.api.http_status import rerender_status_code
from src.api.routers.project_http_errors import raise_project_http_exception
from src.core.projects import (
    ApiError,
    NetworkError,
    ProjectBackend,
    ProjectConfigurationError,
    ProjectNotFoundError,
    ProjectStepView,
    SessionStore,
    Step,
    process_step_submission,
    step_path,
)
from src.core.projects.constants import IS_EDIT, Field
from src.core.projects.edit_session import is_completed_create, reset_draft
from src.core.projects.steps import get_step
from src.core.projects.view_models import build_step_view
from src.core.projects.workflow import (
    ensure_step_available,
    load_edit_draft,
    manual_step_redirect,
)

router = APIRouter(tags=["Project Proposal Steps"])

StepPath = Annotated[
    str,
    Path(description="Step identifier.", examples=["intervention-type"]),
]
SlugPath = Annotated[
    str,
    Path(description="URL-safe project reference.", examples=["rms-24-0001"]),
]


async def get_form_answers(request: Request) -> dict[str, Any]:
    """Form fields by name; repeated keys (checkbox groups) become lists."""
    form = await request.form()
    answers: dict[str, Any] = {}
    for key in form.keys():
        values = [value for value in form.getlist(key) if isinstance(value, str)]
        if values:
            answers[key] = values if len(values) > 1 else values[0]
    return answers


def see_other(path: str) -> RedirectResponse:
    return RedirectResponse(url=path, status_code=status.HTTP_303_SEE_OTHER)


def _render_step(
    step: str, draft: dict[str, Any], today: date
) -> Union[ProjectStepView, RedirectResponse]:
    is_edit = draft.get(IS_EDIT) is True
    try:
        ensure_step_available(step, is_edit)
    except ProjectConfigurationError as exc:
        raise_project_http_exception(exc)
    manual_step = manual_step_redirect(step, draft, today)
    if manual_step is not None:
        return see_other(step_path(manual_step, draft.get(Field.SLUG), is_edit))
    return build_step_view(get_step(step), draft, today=today)


def _submit_step(
    *,
    step: str,
    form: dict[str, Any],
    draft: dict[str, Any],
    journey_id: str,
    store: SessionStore,
    backend: ProjectBackend,
    access_token: Optional[str],
    today: date,
) -> Union[JSONResponse, RedirectResponse]:
    try:
        outcome = process_step_submission(
            step=step,
            form=form,
            draft=draft,
            access_token=access_token,
            backend=backend,
            today=today,
        )
    except ProjectConfigurationError as exc:
        raise_project_http_exception(exc)
    store.set(journey_id, outcome.draft)
    if outcome.success:
        return see_other(outcome.redirect_path)

    view = build_step_view(
        get_step(step),
        outcome.draft,
        today=today,
        form_data=outcome.form_data,
        field_errors=outcome.field_errors,
        error_code=outcome.error_code,
        support_code=outcome.support_code,
    )
    return JSONResponse(
        status_code=rerender_status_code(outcome.field_errors),
        content=view.model_dump(mode="json"),
    )


def _create_draft(step: str, journey_id: str, store: SessionStore) -> Optional[dict[str, Any]]:
    draft = store.get(journey_id)
    if draft is not None and draft.get(IS_EDIT) is not True and not is_completed_create(draft):
        return draft
    if step != Step.NAME:
        return None
    draft = reset_draft()
    store.set(journey_id, draft)
    return draft


def resolve_edit_draft(
    *,
    slug: str,
    journey_id: str,
    store: SessionStore,
    backend: ProjectBackend,
    access_token: Optional[str],
) -> dict[str, Any]:
    try:
        draft = load_edit_draft(
            slug=slug,
            draft=store.get(journey_id),
            backend=backend,
            access_token=access_token,
        )
    except (ProjectNotFoundError, ApiError, NetworkError) as exc:
        raise_project_http_exception(exc)
    store.set(journey_id, draft)
    return draft


@router.get(
    "/project/start",
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Start Project Proposal Journey",
    description="Discards any draft held for this journey and redirects to the first step.",
)
def start_project_journey(
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> RedirectResponse:
    store.set(journey_id, reset_draft())
    return see_other(step_path(Step.NAME))


@router.get(
    "/project/{step}",
    response_model=ProjectStepView,
    summary="Get Project Create Step",
    description=(
        "Returns the view model for a create-journey step, prefilled from the draft. "
        "Stored financial years outside the offered options redirect to the manual variant."
    ),
)
def get_create_step(
    step: StepPath,
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    today: Annotated[date, Depends(get_today)],
) -> Union[ProjectStepView, RedirectResponse]:
    draft = _create_draft(step, journey_id, store)
    if draft is None:
        return see_other("/project/start")
    return _render_step(step, draft, today)


@router.post(
    "/project/{step}",
    status_code=status.HTTP_303_SEE_OTHER,
    response_model=None,
    summary="Submit Project Create Step",
    description=(
        "Validates the form, merges it into the draft and redirects to the next step. "
        "The final financial-year step creates the project at the INITIAL_SAVE level."
    ),
    responses={422: {"model": ProjectStepView}, 502: {"model": ProjectStepView}},
)
def post_create_step(
    step: StepPath,
    form: Annotated[dict[str, Any], Depends(get_form_answers)],
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    backend: Annotated[ProjectBackend, Depends(get_backend)],
    access_token: Annotated[Optional[str], Depends(get_access_token)],
    today: Annotated[date, Depends(get_today)],
) -> Union[JSONResponse, RedirectResponse]:
    draft = _create_draft(step, journey_id, store)
    if draft is None:
        return see_other("/project/start")
    return _submit_step(
        step=step,
        form=form,
        draft=draft,
        journey_id=journey_id,
        store=store,
        backend=backend,
        access_token=access_token,
        today=today,
    )


@router.get(
    "/project/{slug}/edit/{step}",
    response_model=ProjectStepView,
    summary="Get Project Edit Step",
    description="Returns the view model for an edit step, loading the project when needed.",
)
def get_edit_step(
    slug: SlugPath,
    step: StepPath,
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    backend: Annotated[ProjectBackend, Depends(get_backend)],
    access_token: Annotated[Optional[str], Depends(get_access_token)],
    today: Annotated[date, Depends(get_today)],
) -> Union[ProjectStepView, RedirectResponse]:
    draft = resolve_edit_draft(
        slug=slug,
        journey_id=journey_id,
        store=store,
        backend=backend,
        access_token=access_token,
    )
    return _render_step(step, draft, today)


@router.post(
    "/project/{slug}/edit/{step}",
    status_code=status.HTTP_303_SEE_OTHER,
    response_model=None,
    summary="Submit Project Edit Step",
    description=(
        "Validates the form and, where the step carries a save level, submits it to the "
        "backend before redirecting to the next step or the overview."
    ),
    responses={422: {"model": ProjectStepView}, 502: {"model": ProjectStepView}},
)
def post_edit_step(
    slug: SlugPath,
    step: StepPath,
    form: Annotated[dict[str, Any], Depends(get_form_answers)],
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    backend: Annotated[ProjectBackend, Depends(get_backend)],
    access_token: Annotated[Optional[str], Depends(get_access_token)],
    today: Annotated[date, Depends(get_today)],
) -> Union[JSONResponse, RedirectResponse]:
    draft = resolve_edit_draft(
        slug=slug,
        journey_id=journey_id,
        store=store,
        backend=backend,
        access_token=access_token,
    )
    return _submit_step(
        step=step,
        form=form,
        draft=draft,
        journey_id=journey_id,
        store=store,
        backend=backend,
        access_token=access_token,
        today=today,
    )
