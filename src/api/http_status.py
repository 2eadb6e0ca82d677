from typing import Mapping

from fastapi import status

HTTP_422_UNPROCESSABLE = getattr(
    status,
    "HTTP_422_UNPROCESSABLE_CONTENT",
    status.HTTP_422_UNPROCESSABLE_ENTITY,
)


def rerender_status_code(field_errors: Mapping[str, str]) -> int:
    """Status for a step page shown again after a failed POST."""
    if field_errors:
        return HTTP_422_UNPROCESSABLE
    return status.HTTP_502_BAD_GATEWAY
