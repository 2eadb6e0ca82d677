import logging
import time
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, Field

from src.core.projects.backend import ApiResponse
from src.core.projects.constants import (
    UPLOAD_FAILED_REASON,
    UPLOAD_FAILURE_STATUSES,
    UPLOAD_SUCCESS_STATUSES,
    UPLOAD_TIMEOUT_REASON,
)
from src.core.projects.errors import NetworkError, UploadRejectedError, UploadTimeoutError

logger = logging.getLogger(__name__)

PollOutcome = Literal["PENDING", "SUCCESS", "FAILURE", "TIMEOUT"]

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_INTERVAL_SECONDS = 2.0


class PollResult(BaseModel):
    outcome: PollOutcome = Field(description="Terminal (or, per attempt, pending) poll state.")
    filename: Optional[str] = Field(default=None, examples=["benefit-area.zip"])
    reason: Optional[str] = Field(default=None, examples=["Upload failed"])
    attempts: int = Field(default=0, description="Status calls issued before terminating.")

    def raise_for_outcome(self) -> None:
        if self.outcome == "FAILURE":
            raise UploadRejectedError(self.reason or UPLOAD_FAILED_REASON)
        if self.outcome != "SUCCESS":
            raise UploadTimeoutError()


def classify_upload_status(data: dict[str, Any]) -> PollResult:
    status = str(data.get("upload_status") or "").upper()
    if status in UPLOAD_SUCCESS_STATUSES:
        return PollResult(outcome="SUCCESS", filename=data.get("filename"))
    if status in UPLOAD_FAILURE_STATUSES:
        return PollResult(
            outcome="FAILURE", reason=data.get("rejection_reason") or UPLOAD_FAILED_REASON
        )
    return PollResult(outcome="PENDING")


class UploadStatusPoller:
    """Blocking, bounded status poll: at most `max_attempts` calls, spaced by `interval_seconds`."""

    def __init__(
        self,
        fetch_status: Callable[[str], ApiResponse],
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("UPLOAD_POLL_MAX_ATTEMPTS_INVALID")
        self._fetch_status = fetch_status
        self._max_attempts = max_attempts
        self._interval_seconds = interval_seconds
        self._sleep = sleep

    def poll(self, upload_id: str) -> PollResult:
        for attempt in range(1, self._max_attempts + 1):
            result = self._check_once(upload_id, attempt)
            if result.outcome != "PENDING":
                return result.model_copy(update={"attempts": attempt})
            if attempt < self._max_attempts:
                self._sleep(self._interval_seconds)
        logger.warning(
            "Upload status polling timed out",
            extra={"extra_fields": {"upload_id": upload_id, "attempts": self._max_attempts}},
        )
        return PollResult(
            outcome="TIMEOUT", reason=UPLOAD_TIMEOUT_REASON, attempts=self._max_attempts
        )

    def _check_once(self, upload_id: str, attempt: int) -> PollResult:
        try:
            response = self._fetch_status(upload_id)
        except NetworkError as exc:
            logger.warning(
                "Upload status check failed",
                extra={
                    "extra_fields": {
                        "upload_id": upload_id,
                        "attempt": attempt,
                        "error": exc.detail,
                    }
                },
            )
            return PollResult(outcome="PENDING")
        if not response.success:
            return PollResult(outcome="PENDING")
        return classify_upload_status(response.data)
