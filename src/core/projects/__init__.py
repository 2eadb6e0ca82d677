from src.core.projects.backend import ApiResponse, ProjectBackend, UploadInitiateRequest
from src.core.projects.constants import Field, InterventionType, ProjectType, SaveLevel
from src.core.projects.enrichment import (
    OVERVIEW_ENRICHMENT_OPERATIONS,
    EnrichmentContext,
    EnrichmentOperationResult,
    EnrichmentResult,
    enrich,
)
from src.core.projects.errors import (
    ApiError,
    ApiValidationError,
    NetworkError,
    ProjectApiResponseError,
    ProjectConfigurationError,
    ProjectNotFoundError,
    ProjectSubmissionError,
    ProjectWorkflowError,
    UploadRejectedError,
    UploadTimeoutError,
)
from src.core.projects.models import BenefitAreaView, ProjectOverviewView, ProjectStepView
from src.core.projects.navigation import resolve_back_link, resolve_transition, step_path
from src.core.projects.payload import build_payload
from src.core.projects.session_store import SessionStore
from src.core.projects.steps import OVERVIEW, STEP_REGISTRY, Step, StepDescriptor
from src.core.projects.submission import SubmissionResult, submit_project
from src.core.projects.upload_polling import PollResult, UploadStatusPoller
from src.core.projects.workflow import StepOutcome, process_step_submission

__all__ = [
    "ApiError",
    "ApiResponse",
    "ApiValidationError",
    "BenefitAreaView",
    "EnrichmentContext",
    "EnrichmentOperationResult",
    "EnrichmentResult",
    "Field",
    "InterventionType",
    "NetworkError",
    "OVERVIEW",
    "OVERVIEW_ENRICHMENT_OPERATIONS",
    "PollResult",
    "ProjectApiResponseError",
    "ProjectBackend",
    "ProjectConfigurationError",
    "ProjectNotFoundError",
    "ProjectOverviewView",
    "ProjectStepView",
    "ProjectSubmissionError",
    "ProjectType",
    "ProjectWorkflowError",
    "STEP_REGISTRY",
    "SaveLevel",
    "SessionStore",
    "Step",
    "StepDescriptor",
    "StepOutcome",
    "SubmissionResult",
    "UploadInitiateRequest",
    "UploadRejectedError",
    "UploadStatusPoller",
    "UploadTimeoutError",
    "build_payload",
    "enrich",
    "process_step_submission",
    "resolve_back_link",
    "resolve_transition",
    "step_path",
    "submit_project",
]
