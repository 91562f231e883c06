from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from database import get_db
from models.housing_application import (
    HousingApplication,
    GOVERNORATES,
    HOUSING_TYPES,
    EMPLOYMENT_STATUSES,
)
from schemas.housing_application import HousingApplicationCreate, HousingApplicationDTO, ApplicationOptions
from api.auth import fetch_profile
from utils.jwt_auth import require_roles
from utils.logger_factory import new_logger

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("/options", response_model=ApplicationOptions)
def application_options():
    """Choices offered by the housing application form."""
    return ApplicationOptions(
        governorates=GOVERNORATES,
        housing_types=HOUSING_TYPES,
        employment_statuses=EMPLOYMENT_STATUSES,
    )


def _current_profile(db: Session, current_user: dict, log):
    profile = fetch_profile(db, public_id=current_user["user_id"])
    if not profile:
        log.warning(f"No profile for token subject {current_user['user_id']}")
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@router.post("/", response_model=HousingApplicationDTO)
def submit_application(
    payload: HousingApplicationCreate,
    db: Session = Depends(get_db),
    current_user=Depends(require_roles("USER", "ADMIN")),
):
    log = new_logger("submit_application")
    profile = _current_profile(db, current_user, log)
    log.info(f"Housing application from {profile.public_id} for {payload.governorate} / {payload.housing_type}")

    application = HousingApplication(
        profile_id=profile.id,
        full_name=payload.full_name,
        email=payload.email,
        phone=payload.phone,
        governorate=payload.governorate,
        housing_type=payload.housing_type,
        family_size=payload.family_size,
        employment_status=payload.employment_status,
        message=payload.message,
        status="pending",
    )
    try:
        db.add(application)
        db.commit()
        db.refresh(application)
    except SQLAlchemyError:
        db.rollback()
        log.exception("Database commit failed in submit_application.")
        raise HTTPException(status_code=500, detail="Database error. Please try again later.")

    log.info(f"Housing application stored [{application.id}]")
    return HousingApplicationDTO.model_validate(application)


@router.get("/mine", response_model=List[HousingApplicationDTO])
def my_applications(db: Session = Depends(get_db), current_user=Depends(require_roles("USER", "ADMIN"))):
    log = new_logger("my_applications")
    profile = _current_profile(db, current_user, log)
    applications = (
        db.query(HousingApplication)
        .filter(HousingApplication.profile_id == profile.id)
        .order_by(HousingApplication.created_at.desc(), HousingApplication.id.desc())
        .all()
    )
    return [HousingApplicationDTO.model_validate(a) for a in applications]
