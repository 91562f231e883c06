from pydantic import BaseModel, Field
from typing import Any, Optional

REASON_INVALID_OR_EXPIRED = "invalid_or_expired"
REASON_INVALID_CODE = "invalid_code"

REASON_MESSAGES = {
    REASON_INVALID_OR_EXPIRED: "Invalid or expired code",
    REASON_INVALID_CODE: "Invalid code",
}


# Fields are typed loosely; the OTP service checks them so failures carry the
# offending field and the usual error shape
class SendOtpRequest(BaseModel):
    email: Optional[Any] = None
    full_name: Optional[Any] = Field(None, alias="fullName")

    class Config:
        validate_by_name = True


class ResendOtpRequest(BaseModel):
    email: Optional[Any] = None


class VerifyOtpRequest(BaseModel):
    email: Optional[Any] = None
    code: Optional[Any] = None


class VerificationResult(BaseModel):
    valid: bool
    reason: Optional[str] = None
    full_name: Optional[str] = None


class SendOtpResponse(BaseModel):
    success: bool = True


class VerifyOtpResponse(BaseModel):
    valid: bool
    full_name: Optional[str] = Field(None, alias="fullName")
    error: Optional[str] = None
    reason: Optional[str] = None
    signup_token: Optional[str] = Field(None, alias="signupToken")

    class Config:
        validate_by_name = True
