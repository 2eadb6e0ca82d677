from typing import NoReturn

from fastapi import HTTPException, status

from src.core.projects import (
    ApiError,
    NetworkError,
    ProjectConfigurationError,
    ProjectNotFoundError,
)

ROUTABLE_CONFIGURATION_ERRORS = {"UNKNOWN_PROJECT_STEP", "STEP_NOT_AVAILABLE"}


def raise_project_http_exception(exc: Exception) -> NoReturn:
    if isinstance(exc, ProjectNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ProjectConfigurationError) and str(exc) in ROUTABLE_CONFIGURATION_ERRORS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, (ApiError, NetworkError)):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.error_code) from exc
    raise exc
