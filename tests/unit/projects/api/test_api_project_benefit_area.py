from tests.factories import api_failure, project_record, upload_status

SLUG = "rms-26-0001"
BENEFIT_AREA = f"/project/{SLUG}/benefit-area"


def test_benefit_area_page_initiates_upload(client, fake_backend):
    fake_backend.add_project(project_record())

    response = client.get(BENEFIT_AREA)

    assert response.status_code == 200
    body = response.json()
    assert body["upload_id"] == "upl_0001"
    assert body["upload_url"] == "https://uploads.example/upl_0001"
    assert body["back_link"] == f"/project/{SLUG}/overview"
    request = fake_backend.initiate_calls[0]
    assert request.entity_type == "project_benefit_area"
    assert request.entity_id == "RMS/26/0001"
    assert request.redirect_path == f"{BENEFIT_AREA}/upload-status"


def test_benefit_area_page_redirects_when_file_exists(client, fake_backend):
    fake_backend.add_project(project_record(benefit_area_file_name="area.zip"))

    response = client.get(BENEFIT_AREA)

    assert response.status_code == 303
    assert response.headers["location"] == f"/project/{SLUG}/overview"
    assert fake_backend.initiate_calls == []


def test_upload_initiation_network_failure(client, fake_backend):
    fake_backend.add_project(project_record())
    fake_backend.network_down.add("initiate_upload")

    response = client.get(BENEFIT_AREA)

    assert response.status_code == 502
    assert response.json()["error_code"] == "UPLOAD_INITIATION_FAILED"


def test_upload_status_without_pending_upload_returns_to_upload_page(client, fake_backend):
    fake_backend.add_project(project_record())

    response = client.get(f"{BENEFIT_AREA}/upload-status")

    assert response.status_code == 303
    assert response.headers["location"] == BENEFIT_AREA
    assert fake_backend.status_calls == []


def test_successful_upload_attaches_file_and_returns_to_overview(client, fake_backend):
    fake_backend.add_project(project_record())
    client.get(BENEFIT_AREA)
    fake_backend.status_responses.extend(
        [upload_status("PROCESSING"), upload_status("READY", filename="area.zip")]
    )

    response = client.get(f"{BENEFIT_AREA}/upload-status")

    assert response.status_code == 303
    assert response.headers["location"] == f"/project/{SLUG}/overview"
    assert fake_backend.status_calls == ["upl_0001", "upl_0001"]
    overview = client.get(f"/project/{SLUG}/overview").json()
    assert overview["project"]["benefit_area_file_name"] == "area.zip"
    assert overview["has_changes"] is False


def test_upload_timeout_redirects_with_error(client, fake_backend):
    fake_backend.add_project(project_record())
    client.get(BENEFIT_AREA)

    response = client.get(f"{BENEFIT_AREA}/upload-status")

    assert response.status_code == 303
    assert response.headers["location"] == f"{BENEFIT_AREA}?error=UPLOAD_TIMEOUT"
    assert len(fake_backend.status_calls) == 3
    page = client.get(response.headers["location"]).json()
    assert page["error_code"] == "UPLOAD_TIMEOUT"
    assert page["upload_errors"] == ["Upload processing timeout - please try again"]
    assert page["upload_id"] == "upl_0002"


def test_rejected_upload_redirects_with_reason(client, fake_backend):
    fake_backend.add_project(project_record())
    client.get(BENEFIT_AREA)
    fake_backend.status_responses.append(
        upload_status("REJECTED", rejection_reason="File is not a shapefile")
    )

    response = client.get(f"{BENEFIT_AREA}/upload-status")

    assert response.headers["location"] == f"{BENEFIT_AREA}?error=UPLOAD_REJECTED"
    page = client.get(BENEFIT_AREA).json()
    assert page["upload_errors"] == ["File is not a shapefile"]
    assert client.get(BENEFIT_AREA).json()["upload_errors"] == []


def test_delete_confirmation_and_deletion(client, fake_backend):
    fake_backend.add_project(project_record(benefit_area_file_name="area.zip"))

    confirm = client.get(f"{BENEFIT_AREA}/delete")
    deleted = client.post(f"{BENEFIT_AREA}/delete")

    assert confirm.status_code == 200
    assert confirm.json()["file_name"] == "area.zip"
    assert deleted.status_code == 303
    assert deleted.headers["location"] == f"/project/{SLUG}/overview"
    assert "benefit_area_file_name" not in fake_backend.projects[SLUG]
    assert client.get(f"{BENEFIT_AREA}/delete").status_code == 303


def test_delete_failure_reports_error(client, fake_backend):
    fake_backend.add_project(project_record(benefit_area_file_name="area.zip"))
    fake_backend.delete_response = api_failure(status_code=500, error_code="FILE_LOCKED")

    response = client.post(f"{BENEFIT_AREA}/delete")

    assert response.status_code == 502
    assert response.json()["error_code"] == "FILE_LOCKED"
    assert response.json()["file_name"] == "area.zip"


def test_delete_network_failure_uses_default_code(client, fake_backend):
    fake_backend.add_project(project_record(benefit_area_file_name="area.zip"))
    fake_backend.network_down.add("delete_benefit_area_file")

    response = client.post(f"{BENEFIT_AREA}/delete")

    assert response.json()["error_code"] == "DELETE_FAILED"
