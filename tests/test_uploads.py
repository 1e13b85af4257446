import pytest
from starlette.datastructures import UploadFile

from conftest import PRIMARY_NATIONAL_ID

from dlv_api.config import settings
from dlv_api.models.citizen import Citizen
from dlv_api.models.license_application import LicenseApplication
from dlv_api.services import storage_service

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture()
def fake_storage(monkeypatch):
    stored = {}

    def _upload(data, folder, original_name, content_type=None):
        key = f"{folder}/stored-{len(stored)}.png"
        stored[key] = (data, content_type)
        return {
            "path": key,
            "url": f"https://storage.test/{key}",
            "fileName": original_name,
            "size": len(data),
            "mimeType": content_type,
        }

    def _download(key):
        if key not in stored:
            raise storage_service.StoredObjectNotFound(key)
        return stored[key]

    monkeypatch.setattr(storage_service, "upload_file", _upload)
    monkeypatch.setattr(storage_service, "download_file", _download)
    monkeypatch.setattr(storage_service, "delete_file", lambda key: stored.pop(key, None))
    return stored


def test_profile_photo_upload_sets_photo_url(client, auth_headers, fake_storage, db_session):
    response = client.post(
        "/api/uploads/profile-photo",
        headers=auth_headers,
        files={"photo": ("me.png", PNG_BYTES, "image/png")},
    )
    assert response.status_code == 200
    photo = response.json()["photo"]
    assert photo["url"] == "https://storage.test/profile-photos/stored-0.png"
    assert photo["size"] == len(PNG_BYTES)

    citizen = db_session.query(Citizen).filter(Citizen.national_id == PRIMARY_NATIONAL_ID).first()
    assert citizen.photo_url == photo["url"]


def test_upload_rejects_bad_files(client, auth_headers, fake_storage, monkeypatch):
    missing = client.post("/api/uploads/profile-photo", headers=auth_headers)
    assert missing.status_code == 400
    assert missing.json()["error"] == "MISSING_FILE"

    text = client.post(
        "/api/uploads/profile-photo",
        headers=auth_headers,
        files={"photo": ("notes.txt", b"hello", "text/plain")},
    )
    assert text.status_code == 400
    assert text.json()["error"] == "INVALID_FILE_TYPE"

    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 16)
    large = client.post(
        "/api/uploads/profile-photo",
        headers=auth_headers,
        files={"photo": ("big.png", PNG_BYTES, "image/png")},
    )
    assert large.status_code == 413
    assert large.json()["error"] == "FILE_TOO_LARGE"
    assert fake_storage == {}


def test_document_upload_attaches_to_application(client, auth_headers, fake_storage, db_session):
    application_id = client.post(
        "/api/applications", headers=auth_headers, json={"saveAsDraft": True}
    ).json()["applicationId"]

    response = client.post(
        "/api/uploads/application-document",
        headers=auth_headers,
        data={"documentType": "medicalCertificate", "applicationId": application_id},
        files={"document": ("medical.jpg", b"jpeg-bytes", "image/jpeg")},
    )
    assert response.status_code == 200
    document = response.json()["document"]
    assert document["type"] == "medicalCertificate"
    assert document["path"].startswith("documents/medicalCertificate/")

    application = db_session.get(LicenseApplication, application_id)
    assert application.documents == {"medicalCertificate": document["url"]}


def test_document_upload_requires_type(client, auth_headers, fake_storage):
    response = client.post(
        "/api/uploads/application-document",
        headers=auth_headers,
        files={"document": ("medical.jpg", b"jpeg-bytes", "image/jpeg")},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "MISSING_DOCUMENT_TYPE"


def test_download_and_delete(client, auth_headers, fake_storage):
    fake_storage["profile-photos/a.png"] = (PNG_BYTES, "image/png")

    # Downloads work without a token
    response = client.get("/api/uploads/file/profile-photos/a.png")
    assert response.status_code == 200
    assert response.content == PNG_BYTES
    assert response.headers["content-type"] == "image/png"

    missing = client.get("/api/uploads/file/profile-photos/b.png")
    assert missing.status_code == 404
    assert missing.json()["error"] == "FILE_NOT_FOUND"

    anonymous_delete = client.delete("/api/uploads/file/profile-photos/a.png")
    assert anonymous_delete.status_code == 401

    deleted = client.delete("/api/uploads/file/profile-photos/a.png", headers=auth_headers)
    assert deleted.status_code == 200
    assert "profile-photos/a.png" not in fake_storage


def test_storage_key_and_public_url(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", "https://project.supabase.co/")
    key = storage_service.build_key("/documents/medical/", "Scan.JPG")
    assert key.startswith("documents/medical/")
    assert key.endswith(".jpg")
    assert storage_service.public_url(key) == (
        f"https://project.supabase.co/storage/v1/object/public/{settings.SUPABASE_STORAGE_BUCKET}/{key}"
    )


def test_upload_reads_at_most_one_byte_past_limit(client, auth_headers, fake_storage, monkeypatch):
    requested_sizes = []
    original_read = UploadFile.read

    async def _recording_read(self, size=-1):
        requested_sizes.append(size)
        return await original_read(self, size)

    monkeypatch.setattr(UploadFile, "read", _recording_read)
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", len(PNG_BYTES))

    at_limit = client.post(
        "/api/uploads/profile-photo",
        headers=auth_headers,
        files={"photo": ("me.png", PNG_BYTES, "image/png")},
    )
    assert at_limit.status_code == 200
    assert at_limit.json()["photo"]["size"] == len(PNG_BYTES)

    over_limit = client.post(
        "/api/uploads/profile-photo",
        headers=auth_headers,
        files={"photo": ("big.png", PNG_BYTES * 4, "image/png")},
    )
    assert over_limit.status_code == 413
    assert requested_sizes.count(len(PNG_BYTES) + 1) == 2
    assert -1 not in requested_sizes
