import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type, before_sleep_log

from database import get_db
from models.profile import Profile
from schemas.auth import CreatePasswordRequest, SignInRequest, AuthResponse, ProfileDTO
from services.otp_service import validate_email_address, ValidationError
from services.password_service import hash_password, verify_password
from utils.jwt_auth import create_access_token, require_roles, PRE_SIGNUP_ROLE
from utils.logger_factory import new_logger, mask_email
from utils.short_id import generate_unique_public_id

router = APIRouter(prefix="/auth", tags=["auth"])

profile_retry_logger = new_logger("fetch_profile_retry")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=before_sleep_log(profile_retry_logger, logging.WARNING)
)
def fetch_profile(db: Session, **filters):
    try:
        return db.query(Profile).filter_by(**filters).first()
    except OperationalError:
        db.rollback()
        raise


def _auth_response(profile: Profile) -> AuthResponse:
    return AuthResponse(
        access_token=create_access_token(profile.public_id, profile.role, profile.email),
        user=ProfileDTO.model_validate(profile),
    )


@router.post("/create_password", response_model=AuthResponse)
def create_password(
    payload: CreatePasswordRequest,
    db: Session = Depends(get_db),
    current_user=Depends(require_roles(PRE_SIGNUP_ROLE)),
):
    """
    Finish sign-up: exchange a verified-email signup token and a password
    for a registered account.
    """
    log = new_logger("create_password")
    email = current_user["email"]
    log.info(f"Creating account for verified email {mask_email(email)}")

    if fetch_profile(db, email=email):
        log.info(f"Account already exists for {mask_email(email)}")
        raise HTTPException(status_code=409, detail="An account with this email already exists.")

    profile = Profile(
        public_id=generate_unique_public_id(db, Profile),
        email=email,
        full_name=current_user.get("full_name"),
        country=payload.country,
        password_hash=hash_password(payload.password),
        role="USER",
    )
    try:
        db.add(profile)
        db.commit()
        db.refresh(profile)
    except IntegrityError:
        db.rollback()
        log.info(f"Concurrent sign-up already created {mask_email(email)}")
        raise HTTPException(status_code=409, detail="An account with this email already exists.")
    except SQLAlchemyError:
        db.rollback()
        log.exception("Database commit failed in create_password.")
        raise HTTPException(status_code=500, detail="Database error. Please try again later.")

    log.info(f"Account {profile.public_id} created for {mask_email(email)}")
    return _auth_response(profile)


@router.post("/sign_in", response_model=AuthResponse)
def sign_in(payload: SignInRequest, db: Session = Depends(get_db)):
    log = new_logger("sign_in")
    try:
        email = validate_email_address(payload.email)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)

    profile = fetch_profile(db, email=email)
    if not profile or not verify_password(payload.password, profile.password_hash):
        log.info(f"Failed sign-in for {mask_email(email)}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    log.info(f"Signed in {profile.public_id} ({profile.role})")
    return _auth_response(profile)


@router.get("/me", response_model=ProfileDTO)
def me(db: Session = Depends(get_db), current_user=Depends(require_roles("USER", "ADMIN"))):
    profile = fetch_profile(db, public_id=current_user["user_id"])
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return ProfileDTO.model_validate(profile)
