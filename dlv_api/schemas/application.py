from pydantic import BaseModel, ConfigDict

from dlv_api.utils.timeutils import to_iso


class PersonalInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    fullName: str | None = None
    dateOfBirth: str | None = None
    address: str | None = None
    phoneNumber: str | None = None
    email: str | None = None


class ApplicationDocuments(BaseModel):
    model_config = ConfigDict(extra="allow")

    nationalIdPhoto: str | None = None
    medicalCertificate: str | None = None
    applicationPhoto: str | None = None


class EmergencyContact(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    phone: str | None = None
    relationship: str | None = None


class ApplicationCreate(BaseModel):
    personalInfo: PersonalInfo | None = None
    documents: ApplicationDocuments | None = None
    emergencyContact: EmergencyContact | None = None
    licenseType: str = "STANDARD"
    saveAsDraft: bool = False


class ApplicationUpdate(BaseModel):
    personalInfo: PersonalInfo | None = None
    documents: ApplicationDocuments | None = None
    emergencyContact: EmergencyContact | None = None


def dump_section(section: BaseModel | None) -> dict | None:
    if section is None:
        return None
    return section.model_dump(exclude_none=True)


def application_payload(application, detailed: bool = True) -> dict:
    payload = {
        "id": application.id,
        "status": application.status,
        "licenseType": application.license_type,
        "submittedAt": to_iso(application.submitted_at),
        "updatedAt": to_iso(application.updated_at),
        "personalInfo": application.personal_info,
        "documents": application.documents,
        "emergencyContact": application.emergency_contact,
    }
    if detailed:
        payload.update(
            {
                "createdAt": to_iso(application.created_at),
                "reviewNotes": application.review_notes,
                "approvedAt": to_iso(application.approved_at),
                "rejectedAt": to_iso(application.rejected_at),
            }
        )
    return payload


def application_status_payload(application) -> dict:
    return {
        "id": application.id,
        "status": application.status,
        "submittedAt": to_iso(application.submitted_at),
        "lastUpdated": to_iso(application.updated_at),
        "reviewNotes": application.review_notes,
    }
