import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type, before_sleep_log

from database import get_db
from models.housing_application import HousingApplication
from models.profile import Profile
from schemas.auth import ProfileDTO
from schemas.housing_application import HousingApplicationDTO, ApplicationStatusUpdate, DashboardStats
from utils.jwt_auth import require_roles
from utils.logger_factory import new_logger

router = APIRouter(prefix="/admin", tags=["admin"])

admin_retry_logger = new_logger("admin_query_retry")

admin_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=before_sleep_log(admin_retry_logger, logging.WARNING)
)


@admin_retry
def fetch_applications(db: Session):
    try:
        return (
            db.query(HousingApplication)
            .order_by(HousingApplication.created_at.desc(), HousingApplication.id.desc())
            .all()
        )
    except OperationalError:
        db.rollback()
        raise


@admin_retry
def fetch_profiles(db: Session):
    try:
        return db.query(Profile).order_by(Profile.created_at.desc(), Profile.id.desc()).all()
    except OperationalError:
        db.rollback()
        raise


@admin_retry
def fetch_stats(db: Session) -> DashboardStats:
    try:
        return DashboardStats(
            total_applications=db.query(HousingApplication).count(),
            registered_users=db.query(Profile).count(),
            pending_applications=db.query(HousingApplication).filter(HousingApplication.status == "pending").count(),
        )
    except OperationalError:
        db.rollback()
        raise


@router.get("/applications", response_model=List[HousingApplicationDTO])
def list_applications(db: Session = Depends(get_db), current_user=Depends(require_roles("ADMIN"))):
    log = new_logger("list_applications")
    applications = fetch_applications(db)
    log.info(f"Admin {current_user['user_id']} listed {len(applications)} applications")
    return [HousingApplicationDTO.model_validate(a) for a in applications]


@router.get("/users", response_model=List[ProfileDTO])
def list_users(db: Session = Depends(get_db), current_user=Depends(require_roles("ADMIN"))):
    log = new_logger("list_users")
    profiles = fetch_profiles(db)
    log.info(f"Admin {current_user['user_id']} listed {len(profiles)} users")
    return [ProfileDTO.model_validate(p) for p in profiles]


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db), current_user=Depends(require_roles("ADMIN"))):
    return fetch_stats(db)


@router.patch("/applications/{application_id}/status", response_model=HousingApplicationDTO)
def update_application_status(
    application_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(require_roles("ADMIN")),
):
    log = new_logger("update_application_status")
    application = db.query(HousingApplication).filter_by(id=application_id).first()
    if not application:
        log.info(f"Application {application_id} not found")
        raise HTTPException(status_code=404, detail="Application not found")

    previous = application.status
    application.status = payload.status
    try:
        db.commit()
        db.refresh(application)
    except SQLAlchemyError:
        db.rollback()
        log.exception("Database commit failed in update_application_status.")
        raise HTTPException(status_code=500, detail="Database error. Please try again later.")

    log.info(f"Admin {current_user['user_id']} moved application {application_id} from {previous} to {payload.status}")
    return HousingApplicationDTO.model_validate(application)
