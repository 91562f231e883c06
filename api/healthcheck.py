"""
Liveness endpoint for uptime monitors.

Besides a bare `SELECT 1`, it touches the tables sign-up depends on, so a
database that is up but missing migrations reports as degraded instead of
healthy.
"""
from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import select, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type, before_sleep_log
import logging
from database import get_db
from models.otp_code import OtpCode
from models.profile import Profile
from models.housing_application import HousingApplication
from utils.logger_factory import new_logger

health_retry_logger = new_logger("health_check_retry")

router = APIRouter()

SIGNUP_TABLES = (OtpCode.__table__, Profile.__table__, HousingApplication.__table__)


def table_status(db: Session, table) -> str:
    """'ok' if a one-row read from `table` succeeds, otherwise 'unavailable'."""
    try:
        db.execute(select(table).limit(1)).fetchall()
    except SQLAlchemyError as e:
        db.rollback()
        new_logger("table_status").error(f"Table {table.name} unavailable: {e}")
        return "unavailable"
    return "ok"


@router.get("/health")
@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=before_sleep_log(health_retry_logger, logging.WARNING)
)
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
        200: database reachable and every sign-up table readable
        503: database reachable but a sign-up table is not (status "degraded")
        500: database unreachable or returned something unexpected
    """
    log = new_logger("health_check")

    try:
        row = db.execute(text("SELECT 1 as health_check")).fetchone()
    except OperationalError:
        # Retried by the decorator
        raise
    except Exception as e:
        log.error(f"Health check failed with non-retryable exception: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail={"status": "unhealthy", "database": "disconnected", "error": str(e)}
        )

    if not row or row[0] != 1:
        log.error("Health check failed - unexpected database response")
        raise HTTPException(status_code=500, detail={"status": "unhealthy", "database": "error"})

    tables = {table.name: table_status(db, table) for table in SIGNUP_TABLES}
    if any(state != "ok" for state in tables.values()):
        log.warning(f"Health check degraded: {tables}")
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "database": "connected", "tables": tables},
        )
    return {"status": "healthy", "database": "connected", "tables": tables}
