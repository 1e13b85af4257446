import re

from fastapi import status

from dlv_api.schemas.application import ApplicationDocuments, EmergencyContact, PersonalInfo
from dlv_api.utils.response import ApiError

NATIONAL_ID_MIN_LENGTH = 8
OTP_PATTERN = re.compile(r"[0-9]{6}")


def _bad_request(message: str, error: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, message, error)


def validate_national_id(national_id) -> str:
    if not national_id or (isinstance(national_id, str) and not national_id.strip()):
        raise _bad_request("National ID is required", "MISSING_NATIONAL_ID")
    if not isinstance(national_id, str):
        raise _bad_request("Invalid National ID format", "INVALID_NATIONAL_ID_FORMAT")
    national_id = national_id.strip()
    if len(national_id) < NATIONAL_ID_MIN_LENGTH:
        raise _bad_request("Invalid National ID format", "INVALID_NATIONAL_ID_FORMAT")
    return national_id


def validate_transaction_id(transaction_id: str | None) -> str:
    if not transaction_id or not transaction_id.strip():
        raise _bad_request("Transaction ID is required", "MISSING_TRANSACTION_ID")
    return transaction_id.strip()


def validate_otp(otp: str | None) -> str:
    if not otp:
        raise _bad_request("OTP is required", "MISSING_OTP")
    if not OTP_PATTERN.fullmatch(otp):
        raise _bad_request("OTP must be 6 digits", "INVALID_OTP_FORMAT")
    return otp


def validate_license_application(
    personal_info: PersonalInfo | dict | None,
    documents: ApplicationDocuments | dict | None,
    emergency_contact: EmergencyContact | dict | None,
) -> None:
    """Completeness rules a submitted (non-draft) application must satisfy."""

    def _get(section, field):
        if section is None:
            return None
        if isinstance(section, dict):
            return section.get(field)
        return getattr(section, field, None)

    if not _get(personal_info, "fullName") or not _get(personal_info, "dateOfBirth"):
        raise _bad_request("Personal information is incomplete", "INCOMPLETE_PERSONAL_INFO")

    if not _get(documents, "nationalIdPhoto") or not _get(documents, "medicalCertificate"):
        raise _bad_request("Required documents are missing", "MISSING_DOCUMENTS")

    if not _get(emergency_contact, "name") or not _get(emergency_contact, "phone"):
        raise _bad_request("Emergency contact information is required", "MISSING_EMERGENCY_CONTACT")
