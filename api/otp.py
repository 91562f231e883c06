from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import get_db
from schemas.otp import (
    SendOtpRequest,
    ResendOtpRequest,
    VerifyOtpRequest,
    VerifyOtpResponse,
    REASON_MESSAGES,
)
from services.otp_service import (
    issue_code,
    resend_code,
    verify_code,
    normalize_email,
    ValidationError,
    StorageError,
    DeliveryError,
)
from utils.jwt_auth import create_signup_token
from utils.logger_factory import new_logger, mask_email

router = APIRouter(prefix="/otp", tags=["otp"])


def _error_response(error: Exception, log) -> JSONResponse:
    if isinstance(error, ValidationError):
        log.info(f"Rejected request, invalid {error.field}: {error.message}")
        return JSONResponse(status_code=400, content={"error": error.message, "field": error.field})
    if isinstance(error, StorageError):
        return JSONResponse(status_code=503, content={"error": str(error)})
    # DeliveryError: the stored code is still live, the client may resend
    return JSONResponse(status_code=502, content={"error": str(error)})


@router.post("/send")
def send_otp(payload: SendOtpRequest, db: Session = Depends(get_db)):
    log = new_logger("send_otp")
    log.info(f"Sending OTP to {mask_email(payload.email)}")
    try:
        message_id = issue_code(db, payload.email, payload.full_name)
    except (ValidationError, StorageError, DeliveryError) as e:
        return _error_response(e, log)
    log.info(f"OTP email sent to {mask_email(payload.email)} [{message_id}]")
    return {"success": True}


@router.post("/resend")
def resend_otp(payload: ResendOtpRequest, db: Session = Depends(get_db)):
    log = new_logger("resend_otp")
    log.info(f"Resending OTP to {mask_email(payload.email)}")
    try:
        resend_code(db, payload.email)
    except (ValidationError, StorageError, DeliveryError) as e:
        return _error_response(e, log)
    return {"success": True}


@router.post("/verify")
def verify_otp(payload: VerifyOtpRequest, db: Session = Depends(get_db)):
    log = new_logger("verify_otp")
    log.info(f"Verifying OTP for {mask_email(payload.email)}")

    if payload.email in (None, "") or payload.code in (None, ""):
        return JSONResponse(
            status_code=400,
            content={"valid": False, "error": "Email and code are required"},
        )

    try:
        result = verify_code(db, payload.email, payload.code)
    except StorageError as e:
        return JSONResponse(status_code=503, content={"valid": False, "error": str(e)})

    if not result.valid:
        response = VerifyOtpResponse(valid=False, reason=result.reason, error=REASON_MESSAGES[result.reason])
    else:
        response = VerifyOtpResponse(
            valid=True,
            full_name=result.full_name,
            signup_token=create_signup_token(normalize_email(payload.email), result.full_name),
        )
    return response.model_dump(by_alias=True, exclude_none=True)
