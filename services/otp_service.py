"""
One-time passcode issuance and verification for email sign-up.

Only the most recently issued code for an email is ever acceptable: issuing
a new code marks every older unused code for that address as used in the
same transaction that inserts the new one.
"""
import secrets
from datetime import timedelta
from typing import Optional

from email_validator import validate_email, EmailNotValidError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.otp_code import OtpCode
from schemas.otp import VerificationResult, REASON_INVALID_CODE, REASON_INVALID_OR_EXPIRED
from services import email_service
from utils.logger_factory import new_logger, mask_email
from utils.time_utils import utc_now

OTP_EXPIRY_MINUTES = 10
FULL_NAME_MIN_LENGTH = 2
FULL_NAME_MAX_LENGTH = 100


class OtpError(Exception):
    """Base class for failures scoped to a single OTP request."""


class ValidationError(OtpError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class StorageError(OtpError):
    pass


class DeliveryError(OtpError):
    pass


def generate_code() -> str:
    """Six random digits, uniform over 100000-999999."""
    return f"{100000 + secrets.randbelow(900000):06d}"


def normalize_email(email) -> str:
    """Trimmed, lower-cased address. Anything that is not a string normalizes to ""."""
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def validate_email_address(email) -> str:
    normalized = normalize_email(email)
    if not normalized:
        raise ValidationError("email", "Valid email is required")
    try:
        validate_email(normalized, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError("email", f"Valid email is required: {e}") from e
    return normalized


def validate_full_name(full_name) -> str:
    if full_name is not None and not isinstance(full_name, str):
        raise ValidationError("fullName", "Name must be text")
    name = (full_name or "").strip()
    if len(name) < FULL_NAME_MIN_LENGTH:
        raise ValidationError("fullName", "Name must be at least 2 characters")
    if len(name) > FULL_NAME_MAX_LENGTH:
        raise ValidationError("fullName", "Name must be at most 100 characters")
    return name


def find_live_code(db: Session, email: str, now=None) -> Optional[OtpCode]:
    """Newest unused, unexpired code for `email`, or None."""
    now = now or utc_now()
    return (
        db.query(OtpCode)
        .filter(OtpCode.email == email, OtpCode.used == False, OtpCode.expires_at > now)  # noqa: E712
        .order_by(OtpCode.created_at.desc(), OtpCode.id.desc())
        .first()
    )


def issue_code(db: Session, email: str, full_name: str) -> str:
    """
    Invalidate older codes for `email`, store a fresh one and email it.

    Returns the delivery message id. Raises ValidationError before touching
    storage, StorageError if the code could not be stored (nothing is sent),
    and DeliveryError if sending failed after the code was stored.
    """
    log = new_logger("issue_code")
    email = validate_email_address(email)
    full_name = validate_full_name(full_name)

    code = generate_code()
    now = utc_now()
    otp = OtpCode(
        email=email,
        full_name=full_name,
        code=code,
        created_at=now,
        expires_at=now + timedelta(minutes=OTP_EXPIRY_MINUTES),
        used=False,
    )
    try:
        invalidated = (
            db.query(OtpCode)
            .filter(OtpCode.email == email, OtpCode.used == False)  # noqa: E712
            .update({"used": True}, synchronize_session=False)
        )
        db.add(otp)
        db.commit()
        db.refresh(otp)
    except SQLAlchemyError as e:
        db.rollback()
        log.exception(f"Failed to store OTP code for {mask_email(email)}")
        raise StorageError("Failed to store OTP code") from e
    log.info(f"OTP code {otp.id} issued for {mask_email(email)}, {invalidated} earlier code(s) invalidated")

    try:
        message_id = email_service.send_otp_email(email, full_name, code, OTP_EXPIRY_MINUTES)
    except email_service.EmailDeliveryFailed as e:
        log.error(f"OTP email to {mask_email(email)} failed, stored code stays valid: {e}")
        raise DeliveryError(str(e) or "Failed to send email") from e
    return message_id


def resend_code(db: Session, email: str) -> str:
    """Send the current live code for `email` again without issuing a new one."""
    log = new_logger("resend_code")
    email = validate_email_address(email)
    try:
        otp = find_live_code(db, email)
    except SQLAlchemyError as e:
        db.rollback()
        log.exception(f"Failed to look up OTP code for {mask_email(email)}")
        raise StorageError("Failed to look up OTP code") from e
    if otp is None:
        log.info(f"No live OTP code to resend for {mask_email(email)}")
        raise ValidationError("email", "No active code for this email, request a new one")

    remaining = max(1, int((otp.expires_at - utc_now()).total_seconds() // 60))
    try:
        message_id = email_service.send_otp_email(email, otp.full_name, otp.code, remaining)
    except email_service.EmailDeliveryFailed as e:
        raise DeliveryError(str(e) or "Failed to send email") from e
    log.info(f"OTP code {otp.id} resent to {mask_email(email)}")
    return message_id


def verify_code(db: Session, email, code) -> VerificationResult:
    """
    Check `code` against the live code for `email`.

    A mismatch leaves the live code untouched so the user can retry until it
    expires. A match marks it used; if that update fails the verification
    still counts. The code is compared exactly as given; a value that is not
    a string never matches.
    """
    log = new_logger("verify_code")
    email = normalize_email(email)
    if not isinstance(code, str):
        code = ""
    try:
        otp = find_live_code(db, email)
    except SQLAlchemyError as e:
        db.rollback()
        log.exception(f"Failed to look up OTP code for {mask_email(email)}")
        raise StorageError("Failed to look up OTP code") from e

    if otp is None:
        log.info(f"No valid OTP found for {mask_email(email)}")
        return VerificationResult(valid=False, reason=REASON_INVALID_OR_EXPIRED)

    if not secrets.compare_digest(otp.code.encode("utf-8"), code.encode("utf-8")):
        log.info(f"OTP code mismatch for {mask_email(email)}")
        return VerificationResult(valid=False, reason=REASON_INVALID_CODE)

    # Read before commit, a rollback would expire the instance
    otp_id, full_name = otp.id, otp.full_name
    otp.used = True
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.exception(f"Failed to mark OTP code {otp_id} as used")

    log.info(f"OTP verified for {mask_email(email)}")
    return VerificationResult(valid=True, full_name=full_name)
