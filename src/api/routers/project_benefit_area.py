import logging
from typing import Annotated, Any, Optional, Union

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, RedirectResponse

from src.api.dependencies import (
    get_access_token,
    get_backend,
    get_journey_id,
    get_session_store,
    get_upload_poller,
)
from src.api.routers.project_steps import SlugPath, resolve_edit_draft, see_other
from src.core.projects import (
    OVERVIEW,
    BenefitAreaView,
    NetworkError,
    ProjectBackend,
    SessionStore,
    UploadInitiateRequest,
    UploadRejectedError,
    UploadStatusPoller,
    UploadTimeoutError,
    step_path,
)
from src.core.projects.constants import (
    BENEFIT_AREA_FIELDS,
    DELETE_FAILED,
    UNKNOWN_ERROR,
    UPLOAD_ENTITY_TYPE,
    UPLOAD_INITIATION_FAILED,
    Field,
)
from src.core.projects.errors import extract_api_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Project Benefit Area"])


def _benefit_area_path(slug: str) -> str:
    return f"/project/{slug}/benefit-area"


def _error_view(view: BenefitAreaView) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY, content=view.model_dump(mode="json")
    )


def _api_error_code(body: dict[str, Any], fallback: str) -> str:
    error_code = extract_api_error(body)["error_code"]
    return fallback if error_code == UNKNOWN_ERROR else error_code


@router.get(
    "/project/{slug}/benefit-area",
    response_model=BenefitAreaView,
    summary="Get Benefit Area Upload Page",
    description=(
        "Initiates a benefit-area file upload and returns the upload handle. Redirects to the "
        "overview when a file is already attached."
    ),
)
def get_benefit_area(
    slug: SlugPath,
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    backend: Annotated[ProjectBackend, Depends(get_backend)],
    access_token: Annotated[Optional[str], Depends(get_access_token)],
    error: Annotated[
        Optional[str],
        Query(
            description="Error code carried from the upload-status redirect.",
            examples=["UPLOAD_TIMEOUT"],
        ),
    ] = None,
) -> Union[BenefitAreaView, RedirectResponse, JSONResponse]:
    draft = resolve_edit_draft(
        slug=slug,
        journey_id=journey_id,
        store=store,
        backend=backend,
        access_token=access_token,
    )
    if draft.get(Field.BENEFIT_AREA_FILE_NAME):
        return see_other(step_path(OVERVIEW, slug))

    upload_errors = draft.pop(Field.BENEFIT_AREA_UPLOAD_ERRORS, None) or []
    request = UploadInitiateRequest(
        entity_type=UPLOAD_ENTITY_TYPE,
        entity_id=draft.get(Field.REFERENCE_NUMBER),
        reference=slug,
        redirect_path=f"{_benefit_area_path(slug)}/upload-status",
        metadata={"step": "benefit_area"},
    )
    view = BenefitAreaView(
        slug=slug,
        upload_errors=upload_errors,
        error_code=error,
        back_link=step_path(OVERVIEW, slug),
    )
    try:
        response = backend.initiate_upload(request=request, access_token=access_token)
    except NetworkError as exc:
        logger.warning(
            "Benefit area upload initiation failed",
            extra={"extra_fields": {"slug": slug, "error": exc.detail}},
        )
        store.set(journey_id, draft)
        return _error_view(view.model_copy(update={"error_code": UPLOAD_INITIATION_FAILED}))
    if not response.success:
        error_code = _api_error_code(response.body, UPLOAD_INITIATION_FAILED)
        logger.warning(
            "Benefit area upload initiation rejected",
            extra={"extra_fields": {"slug": slug, "error_code": error_code}},
        )
        store.set(journey_id, draft)
        return _error_view(view.model_copy(update={"error_code": error_code}))

    draft[Field.BENEFIT_AREA_UPLOAD_ID] = response.data.get("upload_id")
    draft[Field.BENEFIT_AREA_UPLOAD_URL] = response.data.get("upload_url")
    store.set(journey_id, draft)
    return view.model_copy(
        update={
            "upload_id": draft[Field.BENEFIT_AREA_UPLOAD_ID],
            "upload_url": draft[Field.BENEFIT_AREA_UPLOAD_URL],
        }
    )


@router.get(
    "/project/{slug}/benefit-area/upload-status",
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Await Benefit Area Upload Processing",
    description=(
        "Polls the file-upload service until the upload is processed, rejected, or the "
        "attempts run out, then redirects to the overview or back to the upload page "
        "with an error code."
    ),
)
def get_benefit_area_upload_status(
    slug: SlugPath,
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    backend: Annotated[ProjectBackend, Depends(get_backend)],
    access_token: Annotated[Optional[str], Depends(get_access_token)],
    poller: Annotated[UploadStatusPoller, Depends(get_upload_poller)],
) -> RedirectResponse:
    draft = resolve_edit_draft(
        slug=slug,
        journey_id=journey_id,
        store=store,
        backend=backend,
        access_token=access_token,
    )
    upload_id = draft.get(Field.BENEFIT_AREA_UPLOAD_ID)
    if not upload_id:
        return see_other(_benefit_area_path(slug))

    result = poller.poll(upload_id)
    try:
        result.raise_for_outcome()
    except (UploadRejectedError, UploadTimeoutError) as exc:
        logger.warning(
            "Benefit area upload did not complete",
            extra={
                "extra_fields": {
                    "slug": slug,
                    "upload_id": upload_id,
                    "outcome": result.outcome,
                    "attempts": result.attempts,
                }
            },
        )
        draft[Field.BENEFIT_AREA_UPLOAD_ERRORS] = [result.reason]
        draft[Field.BENEFIT_AREA_UPLOAD_ID] = None
        draft[Field.BENEFIT_AREA_FILE_NAME] = None
        store.set(journey_id, draft)
        return see_other(f"{_benefit_area_path(slug)}?error={exc}")

    draft[Field.BENEFIT_AREA_FILE_NAME] = result.filename
    for name in (
        Field.BENEFIT_AREA_UPLOAD_ID,
        Field.BENEFIT_AREA_UPLOAD_URL,
        Field.BENEFIT_AREA_UPLOAD_ERRORS,
        Field.BENEFIT_AREA_FILE_DOWNLOAD_URL,
        Field.BENEFIT_AREA_FILE_DOWNLOAD_EXPIRY,
    ):
        draft.pop(name, None)
    store.set(journey_id, draft)
    return see_other(step_path(OVERVIEW, slug))


@router.get(
    "/project/{slug}/benefit-area/delete",
    response_model=BenefitAreaView,
    summary="Confirm Benefit Area File Deletion",
)
def get_benefit_area_delete(
    slug: SlugPath,
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    backend: Annotated[ProjectBackend, Depends(get_backend)],
    access_token: Annotated[Optional[str], Depends(get_access_token)],
) -> Union[BenefitAreaView, RedirectResponse]:
    draft = resolve_edit_draft(
        slug=slug,
        journey_id=journey_id,
        store=store,
        backend=backend,
        access_token=access_token,
    )
    if not draft.get(Field.BENEFIT_AREA_FILE_NAME):
        return see_other(step_path(OVERVIEW, slug))
    return BenefitAreaView(
        slug=slug,
        file_name=draft[Field.BENEFIT_AREA_FILE_NAME],
        back_link=step_path(OVERVIEW, slug),
    )


@router.post(
    "/project/{slug}/benefit-area/delete",
    status_code=status.HTTP_303_SEE_OTHER,
    response_model=None,
    summary="Delete Benefit Area File",
    responses={502: {"model": BenefitAreaView}},
)
def post_benefit_area_delete(
    slug: SlugPath,
    journey_id: Annotated[str, Depends(get_journey_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    backend: Annotated[ProjectBackend, Depends(get_backend)],
    access_token: Annotated[Optional[str], Depends(get_access_token)],
) -> Union[RedirectResponse, JSONResponse]:
    draft = resolve_edit_draft(
        slug=slug,
        journey_id=journey_id,
        store=store,
        backend=backend,
        access_token=access_token,
    )
    view = BenefitAreaView(
        slug=slug,
        file_name=draft.get(Field.BENEFIT_AREA_FILE_NAME),
        back_link=step_path(OVERVIEW, slug),
    )
    try:
        response = backend.delete_benefit_area_file(slug=slug, access_token=access_token)
    except NetworkError as exc:
        logger.warning(
            "Benefit area file deletion failed",
            extra={"extra_fields": {"slug": slug, "error": exc.detail}},
        )
        return _error_view(view.model_copy(update={"error_code": DELETE_FAILED}))
    if not response.success:
        error_code = _api_error_code(response.body, DELETE_FAILED)
        logger.warning(
            "Benefit area file deletion rejected",
            extra={"extra_fields": {"slug": slug, "error_code": error_code}},
        )
        return _error_view(view.model_copy(update={"error_code": error_code}))

    for name in BENEFIT_AREA_FIELDS:
        draft.pop(name, None)
    store.set(journey_id, draft)
    return see_other(step_path(OVERVIEW, slug))
