from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ProfileUpdate(BaseModel):
    phoneNumber: str | None = None
    email: EmailStr | None = None
    address: str | None = None


class CitizenProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    nationalId: str = Field(validation_alias="national_id")
    fullName: str = Field(validation_alias="full_name")
    dateOfBirth: str | None = Field(default=None, validation_alias="date_of_birth")
    address: str | None = None
    phoneNumber: str | None = Field(default=None, validation_alias="phone_number")
    email: str | None = None
    photoUrl: str | None = Field(default=None, validation_alias="photo_url")


def profile_payload(citizen) -> dict:
    return CitizenProfile.model_validate(citizen).model_dump()
