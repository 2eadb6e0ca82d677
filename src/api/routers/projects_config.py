import os
from dataclasses import dataclass

from src.infrastructure.projects import BackendApiClient


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 1 else default


def env_non_negative_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def env_non_negative_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


@dataclass(frozen=True)
class ProjectServiceSettings:
    backend_api_url: str
    backend_api_timeout_seconds: float
    backend_api_retries: int
    upload_poll_max_attempts: int
    upload_poll_interval_seconds: float
    journey_cookie_secure: bool


def load_project_settings() -> ProjectServiceSettings:
    return ProjectServiceSettings(
        backend_api_url=os.getenv("BACKEND_API_URL", "http://localhost:8085").strip().rstrip("/"),
        backend_api_timeout_seconds=env_non_negative_float("BACKEND_API_TIMEOUT_SECONDS", 10.0),
        backend_api_retries=env_non_negative_int("BACKEND_API_RETRIES", 2),
        upload_poll_max_attempts=env_int("UPLOAD_POLL_MAX_ATTEMPTS", 10),
        upload_poll_interval_seconds=env_non_negative_float("UPLOAD_POLL_INTERVAL_SECONDS", 2.0),
        journey_cookie_secure=env_flag("PROJECT_JOURNEY_COOKIE_SECURE", False),
    )


def build_backend_client(settings: ProjectServiceSettings) -> BackendApiClient:
    return BackendApiClient(
        base_url=settings.backend_api_url,
        timeout_seconds=settings.backend_api_timeout_seconds,
        retries=settings.backend_api_retries,
    )
