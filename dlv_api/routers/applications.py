import logging
import uuid
from time import time

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from dlv_api.database import get_db
from dlv_api.models.citizen import Citizen
from dlv_api.models.license_application import (
    ACTIVE_APPLICATION_STATUSES,
    ApplicationStatus,
    LicenseApplication,
)
from dlv_api.schemas.application import (
    ApplicationCreate,
    ApplicationUpdate,
    application_payload,
    application_status_payload,
    dump_section,
)
from dlv_api.services.auth_middleware import get_current_citizen
from dlv_api.utils.response import ApiError, create_response, handle_exception
from dlv_api.utils.timeutils import to_iso, utcnow
from dlv_api.utils.validators import validate_license_application

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["Applications"])


def generate_application_id() -> str:
    return f"DLV{int(time() * 1000)}{uuid.uuid4().hex[:4].upper()}"


def _ensure_no_active_application(db: Session, citizen_id: int) -> None:
    existing = (
        db.query(LicenseApplication)
        .filter(
            LicenseApplication.citizen_id == citizen_id,
            LicenseApplication.status.in_(ACTIVE_APPLICATION_STATUSES),
        )
        .first()
    )
    if existing:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            f"You already have a {existing.status.lower().replace('_', ' ')} application",
            "EXISTING_APPLICATION",
            existingApplicationId=existing.id,
        )


def _owned_application(db: Session, application_id: str, citizen_id: int) -> LicenseApplication:
    application = (
        db.query(LicenseApplication)
        .filter(LicenseApplication.id == application_id, LicenseApplication.citizen_id == citizen_id)
        .first()
    )
    if not application:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Application not found", "APPLICATION_NOT_FOUND")
    return application


@router.post("")
def create_application(
    body: ApplicationCreate,
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        if not body.saveAsDraft:
            validate_license_application(body.personalInfo, body.documents, body.emergencyContact)
            _ensure_no_active_application(db, current_citizen.id)

        now = utcnow()
        application = LicenseApplication(
            id=generate_application_id(),
            citizen_id=current_citizen.id,
            license_type=body.licenseType or "STANDARD",
            status=ApplicationStatus.DRAFT.value if body.saveAsDraft else ApplicationStatus.PENDING.value,
            personal_info=dump_section(body.personalInfo),
            documents=dump_section(body.documents),
            emergency_contact=dump_section(body.emergencyContact),
            submitted_at=None if body.saveAsDraft else now,
            created_at=now,
            updated_at=now,
        )
        db.add(application)
        db.commit()
        db.refresh(application)
        logger.info("Application %s created as %s for citizen_id=%s", application.id, application.status, current_citizen.id)

        message = "Draft application saved successfully" if body.saveAsDraft else "License application submitted successfully"
        return create_response(
            message,
            {"applicationId": application.id, "application": application_payload(application, detailed=False)},
            status.HTTP_201_CREATED,
        )
    except ApiError as exc:
        return handle_exception(exc)
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to submit application", "APPLICATION_SUBMISSION_FAILED")


@router.get("/{application_id}")
def get_application(
    application_id: str,
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        application = _owned_application(db, application_id, current_citizen.id)
        return create_response(data={"application": application_payload(application)})
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch application", "APPLICATION_FETCH_FAILED")


@router.put("/{application_id}")
def update_application(
    application_id: str,
    body: ApplicationUpdate,
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        application = _owned_application(db, application_id, current_citizen.id)
        if application.status != ApplicationStatus.DRAFT.value:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                "Cannot update application in current status",
                "APPLICATION_NOT_EDITABLE",
            )

        if body.personalInfo is not None:
            application.personal_info = dump_section(body.personalInfo)
        if body.documents is not None:
            application.documents = dump_section(body.documents)
        if body.emergencyContact is not None:
            application.emergency_contact = dump_section(body.emergencyContact)
        application.updated_at = utcnow()

        db.commit()
        db.refresh(application)
        return create_response(
            "Application updated successfully",
            {"application": application_payload(application, detailed=False)},
        )
    except ApiError as exc:
        return handle_exception(exc)
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to update application", "APPLICATION_UPDATE_FAILED")


@router.post("/{application_id}/submit")
def submit_application(
    application_id: str,
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        application = (
            db.query(LicenseApplication)
            .filter(
                LicenseApplication.id == application_id,
                LicenseApplication.citizen_id == current_citizen.id,
                LicenseApplication.status == ApplicationStatus.DRAFT.value,
            )
            .first()
        )
        if not application:
            raise ApiError(
                status.HTTP_404_NOT_FOUND,
                "Application not found or cannot be submitted",
                "APPLICATION_SUBMISSION_FAILED",
            )

        validate_license_application(application.personal_info, application.documents, application.emergency_contact)
        _ensure_no_active_application(db, current_citizen.id)

        now = utcnow()
        application.status = ApplicationStatus.PENDING.value
        application.submitted_at = now
        application.updated_at = now
        db.commit()
        db.refresh(application)
        logger.info("Application %s submitted", application.id)

        return create_response(
            "Application submitted successfully",
            {
                "application": {
                    "id": application.id,
                    "status": application.status,
                    "submittedAt": to_iso(application.submitted_at),
                }
            },
        )
    except ApiError as exc:
        return handle_exception(exc)
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to submit application", "APPLICATION_SUBMISSION_FAILED")


@router.get("/{application_id}/status")
def application_status(
    application_id: str,
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        application = _owned_application(db, application_id, current_citizen.id)
        return create_response(data={"application": application_status_payload(application)})
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch application status", "STATUS_FETCH_FAILED")
