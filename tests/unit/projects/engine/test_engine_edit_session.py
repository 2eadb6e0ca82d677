from src.core.projects.edit_session import (
    detect_changes,
    initialize_edit_session,
    is_completed_create,
    is_editing,
    merge_answers,
    reset_draft,
)
from tests.factories import project_record


def test_initialize_edit_session_snapshots_original():
    record = project_record()

    draft = initialize_edit_session(record)
    draft["project_intervention_types"].append("PFR")

    assert draft["is_edit"] is True
    assert draft["journey_started"] is True
    assert draft["original_data"]["project_intervention_types"] == ["NFM", "SUDS"]
    assert record["project_intervention_types"] == ["NFM", "SUDS"]


def test_is_editing_requires_matching_slug():
    draft = initialize_edit_session(project_record())

    assert is_editing(draft, "rms-26-0001") is True
    assert is_editing(draft, "rms-26-0002") is False
    assert is_editing(reset_draft(), "rms-26-0001") is False
    assert is_editing(None, "rms-26-0001") is False


def test_merge_answers_ignores_protected_keys():
    draft = initialize_edit_session(project_record())

    merged = merge_answers(
        draft,
        {
            "name": "Renamed",
            "reference_number": "RMS/99/9999",
            "slug": "hijacked",
            "is_edit": False,
            "original_data": {},
        },
    )

    assert merged["name"] == "Renamed"
    assert merged["reference_number"] == "RMS/26/0001"
    assert merged["slug"] == "rms-26-0001"
    assert merged["is_edit"] is True
    assert merged["original_data"]["name"] == "Thames Barrier Upgrade"
    assert draft["name"] == "Thames Barrier Upgrade"


def test_detect_changes_reports_changed_fields():
    draft = initialize_edit_session(project_record())
    draft["name"] = "Thames Barrier Upgrade "
    draft["financial_end_year"] = 2029

    changes = detect_changes(draft)

    assert changes.has_changes is True
    assert changes.changed_fields == ("financial_end_year",)


def test_detect_changes_ignores_session_and_file_fields():
    draft = initialize_edit_session(project_record())
    draft["benefit_area_file_download_url"] = "https://files.example/a"
    draft["benefit_area_upload_errors"] = ["Upload failed"]

    assert detect_changes(draft).has_changes is False


def test_detect_changes_limited_to_requested_fields():
    draft = initialize_edit_session(project_record())
    draft["name"] = "Renamed"

    assert detect_changes(draft, ["project_type"]).has_changes is False
    assert detect_changes(draft, ["name"]).changed_fields == ("name",)


def test_reset_draft():
    assert reset_draft() == {"journey_started": True, "is_edit": False}


def test_saved_create_draft_is_completed():
    saved = {**reset_draft(), "reference_number": "RMS/26/0001", "slug": "rms-26-0001"}

    assert is_completed_create(saved) is True
    assert is_completed_create(reset_draft()) is False
    assert is_completed_create(initialize_edit_session(project_record())) is False
    assert is_completed_create(None) is False
