from typing import Any

from pydantic import BaseModel


# Fields are optional so missing values surface as the portal's MISSING_* codes
class InitiateAuth(BaseModel):
    # Raw value; non-strings are reported as INVALID_NATIONAL_ID_FORMAT
    nationalId: Any = None


class SendOtp(BaseModel):
    transactionId: str | None = None


class VerifyOtp(BaseModel):
    transactionId: str | None = None
    otp: str | None = None
