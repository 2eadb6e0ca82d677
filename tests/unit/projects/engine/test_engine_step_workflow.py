import pytest

from src.core.projects import (
    ApiError,
    ProjectConfigurationError,
    ProjectNotFoundError,
    SaveLevel,
    Step,
    process_step_submission,
)
from src.core.projects.edit_session import initialize_edit_session, reset_draft
from src.core.projects.workflow import fetch_project, load_edit_draft, manual_step_redirect
from tests.factories import FIXED_TODAY, FakeProjectBackend, api_failure, ok, project_record


def _submit(step, form, draft, backend=None):
    return process_step_submission(
        step=step,
        form=form,
        draft=draft,
        access_token="token-1",
        backend=backend or FakeProjectBackend(),
        today=FIXED_TODAY,
    )


def _create_draft(**answers):
    draft = reset_draft()
    draft.update(answers)
    return draft


def test_valid_create_step_merges_and_redirects_without_submitting():
    backend = FakeProjectBackend()

    outcome = _submit(Step.NAME, {"name": " Harbour Wall "}, _create_draft(), backend)

    assert outcome.success is True
    assert outcome.redirect_path == "/project/area"
    assert outcome.draft["name"] == "Harbour Wall"
    assert outcome.submitted_level is None
    assert backend.upsert_calls == []


def test_invalid_step_keeps_draft_and_echoes_form():
    draft = _create_draft(name="Harbour Wall")

    outcome = _submit(Step.AREA, {"area_id": "abc"}, draft)

    assert outcome.success is False
    assert outcome.field_errors == {"area_id": "AREA_ID_INVALID"}
    assert outcome.form_data == {"area_id": "abc"}
    assert outcome.draft == draft


def test_changing_to_type_without_interventions_clears_them():
    draft = _create_draft(
        project_type="DEF", project_intervention_types=["NFM"], main_intervention_type="NFM"
    )

    outcome = _submit(Step.TYPE, {"project_type": "STU"}, draft)

    assert outcome.redirect_path == "/project/financial-start-year"
    assert outcome.draft["project_intervention_types"] == []
    assert outcome.draft["main_intervention_type"] is None


def test_single_intervention_becomes_main_intervention():
    draft = _create_draft(project_type="DEF")

    outcome = _submit(Step.INTERVENTION_TYPE, {"project_intervention_types": "SUDS"}, draft)

    assert outcome.draft["project_intervention_types"] == ["SUDS"]
    assert outcome.draft["main_intervention_type"] == "SUDS"
    assert outcome.redirect_path == "/project/financial-start-year"


def test_stale_main_intervention_is_cleared():
    draft = _create_draft(project_type="DEF", main_intervention_type="PFR")

    outcome = _submit(
        Step.INTERVENTION_TYPE, {"project_intervention_types": ["NFM", "SUDS"]}, draft
    )

    assert outcome.draft["main_intervention_type"] is None
    assert outcome.redirect_path == "/project/primary-intervention-type"


def test_final_create_step_saves_and_redirects_to_overview():
    backend = FakeProjectBackend()
    draft = _create_draft(
        name="Harbour Wall", area_id=12, project_type="STR", financial_start_year=2026
    )

    outcome = _submit(Step.FINANCIAL_END_YEAR, {"financial_end_year": "2028"}, draft, backend)

    assert outcome.submitted_level == SaveLevel.INITIAL_SAVE
    assert outcome.redirect_path == "/project/rms-26-0001/overview"
    assert outcome.draft["reference_number"] == "RMS/26/0001"
    assert backend.upsert_calls[0]["payload"]["financial_end_year"] == 2028


def test_initial_save_without_slug_is_reported_not_redirected():
    backend = FakeProjectBackend()
    backend.upsert_responses.append(ok({"reference_number": "RMS/26/0001"}))
    draft = _create_draft(
        name="Harbour Wall", area_id=12, project_type="STR", financial_start_year=2026
    )

    outcome = _submit(Step.FINANCIAL_END_YEAR, {"financial_end_year": "2028"}, draft, backend)

    assert outcome.success is False
    assert outcome.error_code == "UNKNOWN_ERROR"
    assert "reference_number" not in outcome.draft


def test_edit_step_submits_and_returns_to_overview():
    backend = FakeProjectBackend()
    backend.add_project(project_record())
    draft = initialize_edit_session(project_record())

    outcome = _submit(Step.NAME, {"name": "Renamed Wall"}, draft, backend)

    assert outcome.submitted_level == SaveLevel.PROJECT_NAME
    assert outcome.redirect_path == "/project/rms-26-0001/overview"
    assert backend.upsert_calls == [
        {
            "level": "PROJECT_NAME",
            "payload": {"reference_number": "RMS/26/0001", "name": "Renamed Wall"},
        }
    ]


def test_edit_intervention_with_several_selections_defers_submission():
    backend = FakeProjectBackend()
    draft = initialize_edit_session(project_record())

    outcome = _submit(
        Step.INTERVENTION_TYPE, {"project_intervention_types": ["NFM", "PFR"]}, draft, backend
    )

    assert outcome.redirect_path == "/project/rms-26-0001/edit/primary-intervention-type"
    assert backend.upsert_calls == []


def test_api_validation_errors_are_returned_as_field_errors():
    backend = FakeProjectBackend()
    backend.upsert_responses.append(api_failure(validation_errors=[("name", "NAME_DUPLICATE")]))
    draft = initialize_edit_session(project_record())

    outcome = _submit(Step.NAME, {"name": "Taken Name"}, draft, backend)

    assert outcome.success is False
    assert outcome.field_errors == {"name": "NAME_DUPLICATE"}
    assert outcome.draft["name"] == "Taken Name"


def test_api_error_is_returned_as_page_error():
    backend = FakeProjectBackend()
    backend.upsert_responses.append(
        api_failure(status_code=500, error_code="BACKEND_DOWN", support_code="SUP-9")
    )
    draft = initialize_edit_session(project_record())

    outcome = _submit(Step.NAME, {"name": "Renamed"}, draft, backend)

    assert outcome.success is False
    assert outcome.error_code == "BACKEND_DOWN"
    assert outcome.support_code == "SUP-9"


def test_network_error_is_returned_as_page_error():
    backend = FakeProjectBackend()
    backend.network_down.add("upsert_project")
    draft = initialize_edit_session(project_record())

    outcome = _submit(Step.NAME, {"name": "Renamed"}, draft, backend)

    assert outcome.error_code == "NETWORK_ERROR"
    assert outcome.support_code is None


def test_form_cannot_override_identifiers():
    backend = FakeProjectBackend()
    backend.add_project(project_record())
    draft = initialize_edit_session(project_record())

    outcome = _submit(
        Step.NAME, {"name": "Renamed", "reference_number": "RMS/99/9999"}, draft, backend
    )

    assert outcome.draft["reference_number"] == "RMS/26/0001"
    assert backend.upsert_calls[0]["payload"]["reference_number"] == "RMS/26/0001"


@pytest.mark.parametrize(
    "step,is_edit", [(Step.AREA, True), (Step.START_WORK, False), (Step.COULD_START_EARLY, False)]
)
def test_steps_outside_their_mode_are_unavailable(step, is_edit):
    draft = initialize_edit_session(project_record()) if is_edit else _create_draft()

    with pytest.raises(ProjectConfigurationError, match="STEP_NOT_AVAILABLE"):
        _submit(step, {}, draft)


def test_manual_step_redirect_for_years_outside_options():
    def redirect(step, **draft):
        return manual_step_redirect(step, draft, FIXED_TODAY)

    assert redirect(Step.FINANCIAL_START_YEAR, financial_start_year=2032) == (
        Step.FINANCIAL_START_YEAR_MANUAL
    )
    assert redirect(Step.FINANCIAL_START_YEAR, financial_start_year=2031) is None
    end_years = {"financial_start_year": 2030}
    assert redirect(Step.FINANCIAL_END_YEAR, **end_years, financial_end_year=2035) is None
    assert redirect(Step.FINANCIAL_END_YEAR, **end_years, financial_end_year=2036) == (
        Step.FINANCIAL_END_YEAR_MANUAL
    )
    assert redirect(Step.NAME) is None


def test_fetch_project_errors():
    backend = FakeProjectBackend()
    with pytest.raises(ProjectNotFoundError, match="PROJECT_NOT_FOUND"):
        fetch_project(slug="rms-26-0404", backend=backend, access_token=None)

    backend.get_project = lambda **kwargs: api_failure(status_code=500, error_code="DB_DOWN")
    with pytest.raises(ApiError, match="DB_DOWN"):
        fetch_project(slug="rms-26-0001", backend=backend, access_token=None)


def test_load_edit_draft_reuses_matching_session():
    backend = FakeProjectBackend()
    backend.add_project(project_record())
    existing = initialize_edit_session(project_record())
    existing["name"] = "Unsaved rename"

    reused = load_edit_draft(
        slug="rms-26-0001", draft=existing, backend=backend, access_token=None
    )
    fresh = load_edit_draft(
        slug="rms-26-0001", draft=reset_draft(), backend=backend, access_token=None
    )

    assert reused["name"] == "Unsaved rename"
    assert fresh["name"] == "Thames Barrier Upgrade"
    assert fresh["is_edit"] is True
