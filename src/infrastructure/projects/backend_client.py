import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from src.core.projects.backend import ApiResponse, ProjectBackend, UploadInitiateRequest
from src.core.projects.errors import NetworkError

logger = logging.getLogger(__name__)


def _decode_body(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {"data": body}


class BackendApiClient(ProjectBackend):
    """Thin httpx client for the project and file-upload APIs.

    Non-2xx answers come back as unsuccessful `ApiResponse`s with their decoded body;
    any httpx request failure, including an undecodable body, raises `NetworkError`
    once the configured retries are spent.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 10.0,
        retries: int = 2,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._retries = max(retries, 0)
        self._client = httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: Optional[str],
        json: Optional[dict[str, Any]] = None,
        retries: Optional[int] = None,
    ) -> ApiResponse:
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        attempts = (self._retries if retries is None else retries) + 1
        last_error: Optional[httpx.RequestError] = None
        for attempt in range(1, attempts + 1):
            try:
                response = self._client.request(method, path, json=json, headers=headers)
            except httpx.RequestError as exc:
                last_error = exc
                logger.warning(
                    "Backend request failed",
                    extra={
                        "extra_fields": {
                            "http_method": method,
                            "endpoint": path,
                            "attempt": attempt,
                            "error": str(exc),
                        }
                    },
                )
                continue
            body = _decode_body(response)
            return ApiResponse(
                success=response.is_success and body.get("success") is not False,
                status_code=response.status_code,
                body=body,
            )
        raise NetworkError(str(last_error)) from last_error

    def upsert_project(
        self, *, level: str, payload: dict[str, Any], access_token: Optional[str]
    ) -> ApiResponse:
        return self._request(
            "POST",
            "/api/v1/project/upsert",
            access_token=access_token,
            json={"level": level, "payload": payload},
        )

    def get_project(self, *, slug: str, access_token: Optional[str]) -> ApiResponse:
        return self._request(
            "GET", f"/api/v1/project/{quote(slug, safe='')}", access_token=access_token
        )

    def get_benefit_area_download_url(
        self, *, slug: str, access_token: Optional[str]
    ) -> ApiResponse:
        return self._request(
            "GET",
            f"/api/v1/project/{quote(slug, safe='')}/benefit-area-file/download",
            access_token=access_token,
        )

    def delete_benefit_area_file(self, *, slug: str, access_token: Optional[str]) -> ApiResponse:
        return self._request(
            "DELETE",
            f"/api/v1/project/{quote(slug, safe='')}/benefit-area-file",
            access_token=access_token,
        )

    def initiate_upload(
        self, *, request: UploadInitiateRequest, access_token: Optional[str]
    ) -> ApiResponse:
        return self._request(
            "POST",
            "/api/v1/file-uploads/initiate",
            access_token=access_token,
            json=request.model_dump(),
        )

    def get_upload_status(self, *, upload_id: str, access_token: Optional[str]) -> ApiResponse:
        return self._request(
            "GET",
            f"/api/v1/file-uploads/{quote(upload_id, safe='')}/status",
            access_token=access_token,
            retries=0,
        )
