from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from dlv_api.database import get_db
from dlv_api.models.citizen import Citizen
from dlv_api.models.license_application import LicenseApplication
from dlv_api.schemas.application import application_payload
from dlv_api.schemas.citizen import ProfileUpdate, profile_payload
from dlv_api.services.auth_middleware import get_current_citizen
from dlv_api.utils.response import ApiError, create_response, handle_exception

router = APIRouter(prefix="/api/citizens", tags=["Citizens"])


def _load_citizen(db: Session, citizen_id: int) -> Citizen:
    citizen = db.query(Citizen).filter(Citizen.id == citizen_id).first()
    if not citizen:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Citizen profile not found", "PROFILE_NOT_FOUND")
    return citizen


@router.get("/profile")
def get_profile(
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        citizen = _load_citizen(db, current_citizen.id)
        return create_response(data={"profile": profile_payload(citizen)})
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch profile", "PROFILE_FETCH_FAILED")


@router.put("/profile")
def update_profile(
    update: ProfileUpdate,
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        citizen = _load_citizen(db, current_citizen.id)

        # Identity fields come from the national registry and stay read-only
        field_map = {"phoneNumber": "phone_number", "email": "email", "address": "address"}
        update_data = update.model_dump(exclude_none=True)
        for field, value in update_data.items():
            if value == "":
                continue
            setattr(citizen, field_map[field], str(value))

        db.commit()
        db.refresh(citizen)

        return create_response("Profile updated successfully", {"profile": profile_payload(citizen)})
    except HTTPException as exc:
        return handle_exception(exc)
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to update profile", "PROFILE_UPDATE_FAILED")


@router.get("/applications")
def list_applications(
    current_citizen: Citizen = Depends(get_current_citizen),
    db: Session = Depends(get_db),
):
    try:
        applications = (
            db.query(LicenseApplication)
            .filter(LicenseApplication.citizen_id == current_citizen.id)
            .order_by(LicenseApplication.created_at.desc())
            .all()
        )
        return create_response(
            data={"applications": [application_payload(application) for application in applications]}
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch applications", "APPLICATIONS_FETCH_FAILED")
