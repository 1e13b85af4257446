import logging

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session

from dlv_api.config import settings
from dlv_api.database import get_db
from dlv_api.models.citizen import Citizen
from dlv_api.models.license_application import LicenseApplication
from dlv_api.services import storage_service
from dlv_api.services.auth_middleware import get_current_citizen, get_optional_citizen
from dlv_api.utils.response import ApiError, create_response, handle_exception
from dlv_api.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/uploads", tags=["Uploads"])


async def _read_image(file: UploadFile | None) -> bytes:
    if file is None or not file.filename:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "No file provided", "MISSING_FILE")
    if not (file.content_type or "").startswith("image/"):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Only image files are allowed", "INVALID_FILE_TYPE")

    # At most one byte past the limit is read
    contents = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        raise ApiError(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"File exceeds the {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit",
            "FILE_TOO_LARGE",
        )
    return contents


@router.post("/profile-photo")
async def upload_profile_photo(
    photo: UploadFile | None = File(None),
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        contents = await _read_image(photo)
        result = storage_service.upload_file(contents, "profile-photos", photo.filename, photo.content_type)

        citizen = db.query(Citizen).filter(Citizen.id == current_citizen.id).first()
        citizen.photo_url = result["url"]
        citizen.updated_at = utcnow()
        db.commit()

        return create_response(
            "Profile photo uploaded successfully",
            {"photo": {"url": result["url"], "fileName": result["fileName"], "size": result["size"]}},
        )
    except ApiError as exc:
        return handle_exception(exc)
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to upload photo", "PHOTO_UPLOAD_FAILED")


@router.post("/application-document")
async def upload_application_document(
    document: UploadFile | None = File(None),
    documentType: str | None = Form(None),
    applicationId: str | None = Form(None),
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        contents = await _read_image(document)
        if not documentType:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "Document type is required", "MISSING_DOCUMENT_TYPE")

        result = storage_service.upload_file(
            contents, f"documents/{documentType}", document.filename, document.content_type
        )

        if applicationId:
            application = (
                db.query(LicenseApplication)
                .filter(
                    LicenseApplication.id == applicationId,
                    LicenseApplication.citizen_id == current_citizen.id,
                )
                .first()
            )
            if application:
                # Reassign so the JSON column registers the change
                application.documents = {**(application.documents or {}), documentType: result["url"]}
                application.updated_at = utcnow()
                db.commit()
            else:
                logger.info("Upload for unknown application %s left unattached", applicationId)

        return create_response(
            "Document uploaded successfully",
            {
                "document": {
                    "type": documentType,
                    "url": result["url"],
                    "path": result["path"],
                    "fileName": result["fileName"],
                    "size": result["size"],
                }
            },
        )
    except ApiError as exc:
        return handle_exception(exc)
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to upload document", "DOCUMENT_UPLOAD_FAILED")


@router.get("/file/{file_path:path}")
def download_file(file_path: str, current_citizen: Citizen | None = Depends(get_optional_citizen)):
    try:
        try:
            contents, content_type = storage_service.download_file(file_path)
        except storage_service.StoredObjectNotFound:
            raise ApiError(status.HTTP_404_NOT_FOUND, "File not found", "FILE_NOT_FOUND")
        logger.debug(
            "Serving %s to %s", file_path, f"citizen_id={current_citizen.id}" if current_citizen else "anonymous"
        )
        return Response(content=contents, media_type=content_type)
    except Exception as exc:
        return handle_exception(exc, "Failed to download file", "FILE_DOWNLOAD_FAILED")


@router.delete("/file/{file_path:path}")
def delete_file(file_path: str, current_citizen: Citizen = Depends(get_current_citizen)):
    try:
        storage_service.delete_file(file_path)
        logger.info("citizen_id=%s deleted %s", current_citizen.id, file_path)
        return create_response("File deleted successfully")
    except Exception as exc:
        return handle_exception(exc, "Failed to delete file", "FILE_DELETION_FAILED")
