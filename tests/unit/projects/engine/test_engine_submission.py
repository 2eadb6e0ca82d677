import pytest

from src.core.projects import (
    ApiError,
    ApiResponse,
    ApiValidationError,
    NetworkError,
    ProjectApiResponseError,
    SaveLevel,
    submit_project,
)
from src.core.projects.errors import (
    classify_submission_error,
    extract_api_error,
    extract_api_validation_errors,
)
from src.core.projects.submission import reconcile_identifiers
from tests.factories import FakeProjectBackend, api_failure, ok


def _create_draft():
    return {
        "journey_started": True,
        "is_edit": False,
        "name": "Harbour Wall",
        "area_id": 12,
        "project_type": "STR",
        "financial_start_year": 2026,
        "financial_end_year": 2027,
    }


def test_initial_save_assigns_identifiers_once():
    backend = FakeProjectBackend()

    result = submit_project(
        draft=_create_draft(),
        level=SaveLevel.INITIAL_SAVE,
        access_token="token-1",
        backend=backend,
    )

    assert result.success is True
    assert result.draft["reference_number"] == "RMS/26/0001"
    assert result.draft["slug"] == "rms-26-0001"
    assert backend.upsert_calls[0]["level"] == "INITIAL_SAVE"
    assert "reference_number" not in backend.upsert_calls[0]["payload"]
    assert backend.access_tokens == ["token-1"]


def test_existing_identifiers_are_not_overwritten():
    draft = {"reference_number": "RMS/26/0007", "slug": "rms-26-0007"}

    updated = reconcile_identifiers(draft, {"reference_number": "RMS/99/9999", "slug": "other"})

    assert updated == draft


def test_partial_identifiers_are_not_copied():
    draft = _create_draft()

    updated = reconcile_identifiers(draft, {"reference_number": "RMS/26/0001", "slug": None})

    assert "reference_number" not in updated
    assert "slug" not in updated


def test_api_validation_errors_map_to_fields():
    backend = FakeProjectBackend()
    backend.upsert_responses.append(
        api_failure(validation_errors=[("name", "NAME_DUPLICATE"), ("name", "IGNORED")])
    )

    result = submit_project(
        draft=_create_draft(), level="INITIAL_SAVE", access_token=None, backend=backend
    )

    assert result.success is False
    assert isinstance(result.error, ApiValidationError)
    assert result.error.field_errors == {"name": "NAME_DUPLICATE"}
    assert "reference_number" not in result.draft


def test_api_error_carries_codes():
    backend = FakeProjectBackend()
    backend.upsert_responses.append(
        api_failure(status_code=409, error_code="PROJECT_LOCKED", support_code="SUP-1234")
    )

    result = submit_project(
        draft=_create_draft(), level=SaveLevel.INITIAL_SAVE, access_token=None, backend=backend
    )

    assert isinstance(result.error, ApiError)
    assert result.error.error_code == "PROJECT_LOCKED"
    assert result.error.support_code == "SUP-1234"


def test_success_false_in_2xx_body_is_a_failure():
    backend = FakeProjectBackend()
    backend.upsert_responses.append(
        ApiResponse(success=True, status_code=200, body={"success": False})
    )

    result = submit_project(
        draft=_create_draft(), level=SaveLevel.INITIAL_SAVE, access_token=None, backend=backend
    )

    assert result.success is False
    assert isinstance(result.error, NetworkError)
    assert result.error.error_code == "NETWORK_ERROR"


def test_network_failure_is_reported_not_raised():
    backend = FakeProjectBackend()
    backend.network_down.add("upsert_project")

    result = submit_project(
        draft=_create_draft(), level=SaveLevel.INITIAL_SAVE, access_token=None, backend=backend
    )

    assert result.success is False
    assert result.error.error_code == "NETWORK_ERROR"


def test_successful_update_returns_response_data():
    backend = FakeProjectBackend()
    backend.upsert_responses.append(ok({"reference_number": "RMS/26/0003", "name": "Renamed"}))
    draft = {"reference_number": "RMS/26/0003", "slug": "rms-26-0003", "name": "Renamed"}

    result = submit_project(
        draft=draft, level=SaveLevel.PROJECT_NAME, access_token=None, backend=backend
    )

    assert result.success is True
    assert result.data["name"] == "Renamed"
    assert backend.upsert_calls[0]["payload"] == {
        "reference_number": "RMS/26/0003",
        "name": "Renamed",
    }


@pytest.mark.parametrize(
    "body,expected_type,expected_code",
    [
        ({"validation_errors": [{"field": "name", "error_code": "X"}]}, ApiValidationError, None),
        ({"errors": [{"error_code": "LOCKED"}]}, ApiError, "LOCKED"),
        ({"errors": [{"support_code": "SUP-1"}]}, ApiError, "NETWORK_ERROR"),
        ({}, NetworkError, "NETWORK_ERROR"),
        (None, NetworkError, "NETWORK_ERROR"),
    ],
)
def test_classify_submission_error(body, expected_type, expected_code):
    error = classify_submission_error(ProjectApiResponseError(body, status_code=400))

    assert isinstance(error, expected_type)
    if expected_code is not None:
        assert error.error_code == expected_code


def test_classify_passes_through_submission_errors():
    original = NetworkError("timeout")

    assert classify_submission_error(original) is original
    assert isinstance(classify_submission_error(RuntimeError("boom")), NetworkError)


def test_extract_helpers_tolerate_malformed_bodies():
    assert extract_api_error({"errors": ["oops"]})["error_code"] == "UNKNOWN_ERROR"
    assert extract_api_error(None) == {
        "error_code": "UNKNOWN_ERROR",
        "warning_code": None,
        "support_code": None,
    }
    assert extract_api_validation_errors({"validation_errors": ["oops", {"field": "x"}]}) == {}
