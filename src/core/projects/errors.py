from typing import Any, Mapping, Optional

from src.core.projects.constants import (
    NETWORK_ERROR,
    UNKNOWN_ERROR,
    UPLOAD_REJECTED,
    UPLOAD_TIMEOUT,
)


class ProjectWorkflowError(Exception):
    pass


class ProjectConfigurationError(ProjectWorkflowError):
    pass


class ProjectNotFoundError(ProjectWorkflowError):
    pass


class ProjectApiResponseError(ProjectWorkflowError):
    """A well-formed backend response that reported `success: false`."""

    def __init__(self, body: Optional[Mapping[str, Any]], status_code: Optional[int] = None):
        super().__init__("PROJECT_API_RESPONSE_UNSUCCESSFUL")
        self.body: dict[str, Any] = dict(body or {})
        self.status_code = status_code


class ProjectSubmissionError(ProjectWorkflowError):
    def __init__(self, error_code: str) -> None:
        super().__init__(error_code)
        self.error_code = error_code


class ApiValidationError(ProjectSubmissionError):
    def __init__(self, field_errors: Mapping[str, str]) -> None:
        super().__init__("API_VALIDATION_ERROR")
        self.field_errors = dict(field_errors)


class ApiError(ProjectSubmissionError):
    def __init__(
        self,
        error_code: str,
        *,
        warning_code: Optional[str] = None,
        support_code: Optional[str] = None,
    ) -> None:
        super().__init__(error_code)
        self.warning_code = warning_code
        self.support_code = support_code


class NetworkError(ProjectSubmissionError):
    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(NETWORK_ERROR)
        self.detail = detail


class UploadTimeoutError(ProjectWorkflowError):
    def __init__(self) -> None:
        super().__init__(UPLOAD_TIMEOUT)


class UploadRejectedError(ProjectWorkflowError):
    def __init__(self, reason: str) -> None:
        super().__init__(UPLOAD_REJECTED)
        self.reason = reason


def extract_api_error(body: Optional[Mapping[str, Any]]) -> dict[str, Optional[str]]:
    errors = (body or {}).get("errors") or []
    if not errors or not isinstance(errors[0], Mapping):
        return {"error_code": UNKNOWN_ERROR, "warning_code": None, "support_code": None}
    first = errors[0]
    return {
        "error_code": first.get("error_code") or UNKNOWN_ERROR,
        "warning_code": first.get("warning_code"),
        "support_code": first.get("support_code"),
    }


def extract_api_validation_errors(body: Optional[Mapping[str, Any]]) -> dict[str, str]:
    field_errors: dict[str, str] = {}
    for item in (body or {}).get("validation_errors") or []:
        if not isinstance(item, Mapping):
            continue
        field = item.get("field")
        error_code = item.get("error_code")
        if field and error_code and field not in field_errors:
            field_errors[str(field)] = str(error_code)
    return field_errors


def classify_submission_error(exc: Exception) -> ProjectSubmissionError:
    """Map a failed backend call onto the error shape the pages render."""
    if isinstance(exc, ProjectSubmissionError):
        return exc
    if isinstance(exc, ProjectApiResponseError):
        field_errors = extract_api_validation_errors(exc.body)
        if field_errors:
            return ApiValidationError(field_errors)
        errors = exc.body.get("errors") or []
        if errors and isinstance(errors[0], Mapping):
            detail = extract_api_error(exc.body)
            return ApiError(
                errors[0].get("error_code") or NETWORK_ERROR,
                warning_code=detail["warning_code"],
                support_code=detail["support_code"],
            )
    return NetworkError(str(exc))
