from conftest import SECONDARY_NATIONAL_ID, login

COMPLETE_APPLICATION = {
    "personalInfo": {
        "fullName": "Jean Baptiste Ndayisenga",
        "dateOfBirth": "1990-05-15",
        "address": "Avenue de la Révolution, Bujumbura, Burundi",
    },
    "documents": {
        "nationalIdPhoto": "https://example.com/id.jpg",
        "medicalCertificate": "https://example.com/medical.jpg",
    },
    "emergencyContact": {"name": "Marie Claire Uwimana", "phone": "+257 78 234 567", "relationship": "Sister"},
}


def test_create_application(client, auth_headers):
    response = client.post("/api/applications", headers=auth_headers, json=COMPLETE_APPLICATION)
    assert response.status_code == 201
    payload = response.json()
    assert payload["applicationId"].startswith("DLV")
    assert payload["application"]["status"] == "PENDING"
    assert payload["application"]["licenseType"] == "STANDARD"
    assert payload["application"]["submittedAt"].endswith("Z")

    detail = client.get(f"/api/applications/{payload['applicationId']}", headers=auth_headers)
    assert detail.status_code == 200
    application = detail.json()["application"]
    assert application["emergencyContact"]["relationship"] == "Sister"
    assert application["reviewNotes"] is None

    status_response = client.get(f"/api/applications/{payload['applicationId']}/status", headers=auth_headers)
    assert status_response.json()["application"]["status"] == "PENDING"
    assert "lastUpdated" in status_response.json()["application"]


def test_second_active_application_is_rejected(client, auth_headers):
    first = client.post("/api/applications", headers=auth_headers, json=COMPLETE_APPLICATION).json()

    second = client.post("/api/applications", headers=auth_headers, json=COMPLETE_APPLICATION)
    assert second.status_code == 400
    assert second.json()["error"] == "EXISTING_APPLICATION"
    assert second.json()["existingApplicationId"] == first["applicationId"]


def test_incomplete_applications(client, auth_headers):
    missing_personal = {**COMPLETE_APPLICATION, "personalInfo": {"fullName": "Jean"}}
    response = client.post("/api/applications", headers=auth_headers, json=missing_personal)
    assert response.status_code == 400
    assert response.json()["error"] == "INCOMPLETE_PERSONAL_INFO"

    missing_docs = {**COMPLETE_APPLICATION, "documents": {"nationalIdPhoto": "https://example.com/id.jpg"}}
    assert client.post("/api/applications", headers=auth_headers, json=missing_docs).json()["error"] == "MISSING_DOCUMENTS"

    missing_contact = {**COMPLETE_APPLICATION, "emergencyContact": None}
    assert (
        client.post("/api/applications", headers=auth_headers, json=missing_contact).json()["error"]
        == "MISSING_EMERGENCY_CONTACT"
    )


def test_draft_can_be_edited_then_submitted(client, auth_headers):
    created = client.post(
        "/api/applications",
        headers=auth_headers,
        json={"personalInfo": COMPLETE_APPLICATION["personalInfo"], "saveAsDraft": True},
    )
    assert created.status_code == 201
    application_id = created.json()["applicationId"]
    assert created.json()["application"]["status"] == "DRAFT"
    assert created.json()["application"]["submittedAt"] is None

    early = client.post(f"/api/applications/{application_id}/submit", headers=auth_headers)
    assert early.status_code == 400
    assert early.json()["error"] == "MISSING_DOCUMENTS"

    updated = client.put(
        f"/api/applications/{application_id}",
        headers=auth_headers,
        json={
            "documents": COMPLETE_APPLICATION["documents"],
            "emergencyContact": COMPLETE_APPLICATION["emergencyContact"],
        },
    )
    assert updated.status_code == 200
    assert updated.json()["application"]["documents"]["medicalCertificate"] == "https://example.com/medical.jpg"

    submitted = client.post(f"/api/applications/{application_id}/submit", headers=auth_headers)
    assert submitted.status_code == 200
    assert submitted.json()["application"]["status"] == "PENDING"

    locked = client.put(f"/api/applications/{application_id}", headers=auth_headers, json={"documents": {}})
    assert locked.status_code == 400
    assert locked.json()["error"] == "APPLICATION_NOT_EDITABLE"

    resubmit = client.post(f"/api/applications/{application_id}/submit", headers=auth_headers)
    assert resubmit.status_code == 404
    assert resubmit.json()["error"] == "APPLICATION_SUBMISSION_FAILED"


def test_draft_submission_blocked_by_active_application(client, auth_headers):
    client.post("/api/applications", headers=auth_headers, json=COMPLETE_APPLICATION)
    draft = client.post("/api/applications", headers=auth_headers, json={**COMPLETE_APPLICATION, "saveAsDraft": True})
    assert draft.status_code == 201

    response = client.post(f"/api/applications/{draft.json()['applicationId']}/submit", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "EXISTING_APPLICATION"


def test_applications_are_private_to_their_owner(client, auth_headers):
    application_id = client.post("/api/applications", headers=auth_headers, json=COMPLETE_APPLICATION).json()[
        "applicationId"
    ]
    other_headers = {"Authorization": f"Bearer {login(client, SECONDARY_NATIONAL_ID)}"}

    for path in (f"/api/applications/{application_id}", f"/api/applications/{application_id}/status"):
        response = client.get(path, headers=other_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "APPLICATION_NOT_FOUND"


def test_applications_require_auth(client, citizens):
    response = client.post("/api/applications", json=COMPLETE_APPLICATION)
    assert response.status_code == 401
    assert response.json()["error"] == "MISSING_TOKEN"
