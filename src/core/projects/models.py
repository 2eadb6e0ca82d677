from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from src.core.projects.enrichment import EnrichmentError

JourneyMode = Literal["create", "edit"]


class ProjectStepView(BaseModel):
    step: str = Field(description="Step identifier.", examples=["intervention-type"])
    view: str = Field(description="Page template family.", examples=["intervention-type"])
    mode: JourneyMode = Field(examples=["create"])
    slug: Optional[str] = Field(default=None, examples=["rms-24-0001"])
    back_link: Optional[str] = Field(
        default=None,
        description="Path of the page the back link points to.",
        examples=["/project/type"],
    )
    values: dict[str, Any] = Field(
        default_factory=dict,
        description="Current answers for the fields this step owns, or the entered form values.",
    )
    field_errors: dict[str, str] = Field(
        default_factory=dict,
        description="Inline error codes keyed by field.",
        examples=[{"name": "NAME_REQUIRED"}],
    )
    error_code: Optional[str] = Field(
        default=None,
        description="Page-level error banner code.",
        examples=["NETWORK_ERROR"],
    )
    support_code: Optional[str] = Field(default=None, examples=["SUP-1234"])
    options: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Choices offered by radio or checkbox steps.",
    )
    hints: dict[str, Any] = Field(
        default_factory=dict,
        description="Supplementary labels, e.g. the previous milestone or financial year range.",
    )


class ProjectOverviewView(BaseModel):
    slug: str = Field(examples=["rms-24-0001"])
    reference_number: Optional[str] = Field(default=None, examples=["RMS/24/0001"])
    project: dict[str, Any] = Field(description="Enriched project record.")
    has_changes: bool = Field(
        default=False, description="True when the draft differs from the loaded record."
    )
    changed_fields: list[str] = Field(default_factory=list)
    enrichment_error_code: Optional[str] = Field(
        default=None,
        description="Set when an enrichment failed; the page still renders.",
        examples=["NETWORK_ERROR"],
    )
    enrichment_errors: list[EnrichmentError] = Field(default_factory=list)
    edit_links: dict[str, str] = Field(default_factory=dict)


class BenefitAreaView(BaseModel):
    slug: str = Field(examples=["rms-24-0001"])
    upload_id: Optional[str] = Field(default=None, examples=["upl_0001"])
    upload_url: Optional[str] = Field(default=None, examples=["https://uploads.example/upl_0001"])
    file_name: Optional[str] = Field(default=None, examples=["benefit-area.zip"])
    upload_errors: list[str] = Field(default_factory=list)
    error_code: Optional[str] = Field(default=None, examples=["UPLOAD_TIMEOUT"])
    back_link: str = Field(examples=["/project/rms-24-0001/overview"])
