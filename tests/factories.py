from datetime import date, datetime, timezone
from typing import Any, Iterable, Optional

from src.core.projects import ApiResponse, NetworkError, UploadInitiateRequest

FIXED_TODAY = date(2026, 5, 15)
FIXED_NOW = datetime(2026, 5, 15, 9, 30, tzinfo=timezone.utc)


def ok(data: Optional[dict[str, Any]] = None, status_code: int = 200) -> ApiResponse:
    return ApiResponse(
        success=True, status_code=status_code, body={"success": True, "data": data or {}}
    )


def api_failure(
    *,
    status_code: int = 400,
    validation_errors: Iterable[tuple[str, str]] = (),
    error_code: Optional[str] = None,
    support_code: Optional[str] = None,
) -> ApiResponse:
    body: dict[str, Any] = {"success": False}
    if validation_errors:
        body["validation_errors"] = [
            {"field": field, "error_code": code} for field, code in validation_errors
        ]
    if error_code is not None:
        body["errors"] = [
            {"error_code": error_code, "warning_code": None, "support_code": support_code}
        ]
    return ApiResponse(success=False, status_code=status_code, body=body)


def upload_status(status: str, **extra: Any) -> ApiResponse:
    return ok({"upload_status": status, **extra})


def project_record(slug: str = "rms-26-0001", **overrides: Any) -> dict[str, Any]:
    record = {
        "reference_number": slug.upper().replace("-", "/"),
        "slug": slug,
        "name": "Thames Barrier Upgrade",
        "area_id": 12,
        "project_type": "DEF",
        "project_intervention_types": ["NFM", "SUDS"],
        "main_intervention_type": "NFM",
        "financial_start_year": 2026,
        "financial_end_year": 2028,
    }
    record.update(overrides)
    return record


class FakeProjectBackend:
    """In-process stand-in for the project and file-upload APIs."""

    def __init__(self) -> None:
        self.projects: dict[str, dict[str, Any]] = {}
        self.upsert_calls: list[dict[str, Any]] = []
        self.upsert_responses: list[ApiResponse] = []
        self.status_responses: list[ApiResponse] = []
        self.status_calls: list[str] = []
        self.initiate_calls: list[UploadInitiateRequest] = []
        self.download_calls: list[str] = []
        self.download_response: Optional[ApiResponse] = None
        self.delete_response: Optional[ApiResponse] = None
        self.network_down: set[str] = set()
        self.access_tokens: list[Optional[str]] = []
        self._sequence = 0

    def add_project(self, record: dict[str, Any]) -> dict[str, Any]:
        self.projects[record["slug"]] = dict(record)
        return record

    def _check_network(self, operation: str) -> None:
        if operation in self.network_down:
            raise NetworkError(f"{operation} unreachable")

    def upsert_project(
        self, *, level: str, payload: dict[str, Any], access_token: Optional[str]
    ) -> ApiResponse:
        self._check_network("upsert_project")
        self.upsert_calls.append({"level": level, "payload": dict(payload)})
        self.access_tokens.append(access_token)
        if self.upsert_responses:
            return self.upsert_responses.pop(0)

        reference_number = payload.get("reference_number")
        if reference_number is None:
            self._sequence += 1
            slug = f"rms-26-{self._sequence:04d}"
            record = {**payload, "reference_number": f"RMS/26/{self._sequence:04d}", "slug": slug}
            self.projects[slug] = record
            return ok(record)

        for record in self.projects.values():
            if record["reference_number"] == reference_number:
                record.update(payload)
                return ok(record)
        return api_failure(status_code=404, error_code="PROJECT_NOT_FOUND")

    def get_project(self, *, slug: str, access_token: Optional[str]) -> ApiResponse:
        self._check_network("get_project")
        record = self.projects.get(slug)
        if record is None:
            return api_failure(status_code=404, error_code="PROJECT_NOT_FOUND")
        return ok(dict(record))

    def get_benefit_area_download_url(
        self, *, slug: str, access_token: Optional[str]
    ) -> ApiResponse:
        self._check_network("get_benefit_area_download_url")
        self.download_calls.append(slug)
        if self.download_response is not None:
            return self.download_response
        return ok(
            {
                "download_url": f"https://files.example/{slug}/benefit-area.zip",
                "expires_at": "2026-05-15T10:30:00Z",
            }
        )

    def delete_benefit_area_file(self, *, slug: str, access_token: Optional[str]) -> ApiResponse:
        self._check_network("delete_benefit_area_file")
        if self.delete_response is not None:
            return self.delete_response
        self.projects.get(slug, {}).pop("benefit_area_file_name", None)
        return ok({})

    def initiate_upload(
        self, *, request: UploadInitiateRequest, access_token: Optional[str]
    ) -> ApiResponse:
        self._check_network("initiate_upload")
        self.initiate_calls.append(request)
        number = len(self.initiate_calls)
        return ok(
            {
                "upload_id": f"upl_{number:04d}",
                "upload_url": f"https://uploads.example/upl_{number:04d}",
            }
        )

    def get_upload_status(self, *, upload_id: str, access_token: Optional[str]) -> ApiResponse:
        self.status_calls.append(upload_id)
        self._check_network("get_upload_status")
        if self.status_responses:
            return self.status_responses.pop(0)
        return upload_status("PROCESSING")
