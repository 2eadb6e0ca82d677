from datetime import UTC, date, datetime
from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from src.api.routers.projects_config import (
    ProjectServiceSettings,
    build_backend_client,
    load_project_settings,
)
from src.core.projects.backend import ApiResponse, ProjectBackend
from src.core.projects.financial_year import Clock, system_clock
from src.core.projects.session_store import SessionStore
from src.core.projects.upload_polling import UploadStatusPoller
from src.infrastructure.projects import InMemorySessionStore

_SESSION_STORE: SessionStore = InMemorySessionStore()
_SETTINGS: Optional[ProjectServiceSettings] = None
_BACKEND: Optional[ProjectBackend] = None


def get_project_settings() -> ProjectServiceSettings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = load_project_settings()
    return _SETTINGS


def get_session_store() -> SessionStore:
    return _SESSION_STORE


def get_backend() -> ProjectBackend:
    global _BACKEND
    if _BACKEND is None:
        _BACKEND = build_backend_client(get_project_settings())
    return _BACKEND


def reset_project_dependencies_for_tests() -> None:
    global _SESSION_STORE
    global _SETTINGS
    global _BACKEND
    _SESSION_STORE = InMemorySessionStore()
    _SETTINGS = None
    _BACKEND = None


def get_clock() -> Clock:
    return system_clock


def get_today(clock: Annotated[Clock, Depends(get_clock)]) -> date:
    return clock()


def get_current_time() -> datetime:
    return datetime.now(UTC)


def get_access_token(
    authorization: Annotated[
        Optional[str],
        Header(
            alias="Authorization",
            description="Caller's bearer credential, passed through to the backend.",
            examples=["Bearer eyJhbGciOi..."],
        ),
    ] = None,
) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_journey_id(request: Request) -> str:
    return request.state.journey_id


def get_upload_poller(
    backend: Annotated[ProjectBackend, Depends(get_backend)],
    access_token: Annotated[Optional[str], Depends(get_access_token)],
    settings: Annotated[ProjectServiceSettings, Depends(get_project_settings)],
) -> UploadStatusPoller:
    def fetch_status(upload_id: str) -> ApiResponse:
        return backend.get_upload_status(upload_id=upload_id, access_token=access_token)

    return UploadStatusPoller(
        fetch_status,
        max_attempts=settings.upload_poll_max_attempts,
        interval_seconds=settings.upload_poll_interval_seconds,
    )


def close_backend() -> None:
    global _BACKEND
    close = getattr(_BACKEND, "close", None)
    if close is not None:
        close()
    _BACKEND = None
