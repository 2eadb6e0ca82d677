from datetime import datetime
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends

from src.api.dependencies import (
    get_access_token,
    get_backend,
    get_current_time,
    get_journey_id,
    get_session_store,
)
from src.api.routers.project_http_errors import raise_project_http_exception
from src.api.routers.project_steps import SlugPath
from src.core.projects import (
    OVERVIEW_ENRICHMENT_OPERATIONS,
    ApiError,
    EnrichmentContext,
    NetworkError,
    ProjectBackend,
    ProjectNotFoundError,
    ProjectOverviewView,
    SessionStore,
    Step,
    enrich,
    step_path,
)
from src.core.projects.constants import Field
from src.core.projects.edit_session import detect_changes, initialize_edit_session, is_editing
from src.core.projects.workflow import fetch_project

router = APIRouter(tags=["Project Proposal Overview"])

EDITABLE_STEPS = (
    Step.NAME,
    Step.TYPE,
    Step.FINANCIAL_START_YEAR,
    Step.FINANCIAL_END_YEAR,
    Step.START_OUTLINE_BUSINESS_CASE,
    Step.COMPLETE_OUTLINE_BUSINESS_CASE,
    Step.AWARD_MAIN_CONTRACT,
    Step.START_WORK,
    Step.START_BENEFITS,
    Step.COULD_START_EARLY,
)

# Held in the journey draft when the backend record does not carry them yet.
_SESSION_BACKED_FIELDS = (
    Field.BENEFIT_AREA_FILE_NAME,
    Field.BENEFIT_AREA_FILE_DOWNLOAD_URL,
    Field.BENEFIT_AREA_FILE_DOWNLOAD_EXPIRY,
)


def _overview_data(project: dict[str, Any], draft: dict[str, Any]) -> dict[str, Any]:
    data = dict(project)
    for name in _SESSION_BACKED_FIELDS:
        if not data.get(name) and draft.get(name):
            data[name] = draft[name]
    return data


@router.get(
    "/project/{slug}/overview",
    response_model=ProjectOverviewView,
    summary="Get Project Overview",
    description=(
        "Fetches the project, opens an edit session for this journey when none is active, "
        "and runs the overview enrichments. Enrichment failures are reported on the view "
        "model instead of failing the request."
    ),
)
def get_project_overview(
    slug: SlugPath,
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    backend: Annotated[ProjectBackend, Depends(get_backend)],
    access_token: Annotated[Optional[str], Depends(get_access_token)],
    now: Annotated[datetime, Depends(get_current_time)],
) -> ProjectOverviewView:
    try:
        project = fetch_project(slug=slug, backend=backend, access_token=access_token)
    except (ProjectNotFoundError, ApiError, NetworkError) as exc:
        raise_project_http_exception(exc)

    draft = store.get(journey_id)
    if not is_editing(draft, slug):
        draft = initialize_edit_session(project)
        draft.setdefault(Field.SLUG, slug)
        store.set(journey_id, draft)

    context = EnrichmentContext(
        journey_id=journey_id,
        slug=slug,
        access_token=access_token,
        session_store=store,
        backend=backend,
        now=now,
    )
    result = enrich(context, _overview_data(project, draft), OVERVIEW_ENRICHMENT_OPERATIONS)
    changes = detect_changes(store.get(journey_id) or draft)

    return ProjectOverviewView(
        slug=slug,
        reference_number=result.data.get(Field.REFERENCE_NUMBER),
        project=result.data,
        has_changes=changes.has_changes,
        changed_fields=list(changes.changed_fields),
        enrichment_error_code=result.error.error if result.error is not None else None,
        enrichment_errors=result.errors,
        edit_links={
            **{step: step_path(step, slug, is_edit=True) for step in EDITABLE_STEPS},
            "benefit-area": f"/project/{slug}/benefit-area",
        },
    )
