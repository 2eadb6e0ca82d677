from typing import Any, Optional, Protocol

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    success: bool = Field(description="True when the backend accepted the request.")
    status_code: int = Field(description="HTTP status returned by the backend.", examples=[200])
    body: dict[str, Any] = Field(
        default_factory=dict,
        description="Decoded JSON body; empty when the backend returned no JSON.",
        examples=[{"success": True, "data": {"reference_number": "RMS/24/0001"}}],
    )

    @property
    def data(self) -> dict[str, Any]:
        data = self.body.get("data")
        return data if isinstance(data, dict) else {}


class UploadInitiateRequest(BaseModel):
    entity_type: str = Field(examples=["project_benefit_area"])
    entity_id: Optional[str] = Field(default=None, examples=["RMS/24/0001"])
    reference: str = Field(examples=["rms-24-0001"])
    redirect_path: str = Field(examples=["/project/rms-24-0001/benefit-area/upload-status"])
    metadata: dict[str, Any] = Field(default_factory=dict, examples=[{"step": "benefit_area"}])


class ProjectBackend(Protocol):
    def upsert_project(
        self, *, level: str, payload: dict[str, Any], access_token: Optional[str]
    ) -> ApiResponse: ...

    def get_project(self, *, slug: str, access_token: Optional[str]) -> ApiResponse: ...

    def get_benefit_area_download_url(
        self, *, slug: str, access_token: Optional[str]
    ) -> ApiResponse: ...

    def delete_benefit_area_file(
        self, *, slug: str, access_token: Optional[str]
    ) -> ApiResponse: ...

    def initiate_upload(
        self, *, request: UploadInitiateRequest, access_token: Optional[str]
    ) -> ApiResponse: ...

    def get_upload_status(self, *, upload_id: str, access_token: Optional[str]) -> ApiResponse: ...
