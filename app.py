import os
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from database import Base, engine, get_db  # noqa: F401  get_db is overridden in tests
from utils.logger_factory import new_logger

import models  # noqa: F401  registers the tables on Base.metadata

app = FastAPI(title="SHIFT Portal API")

# Bodies of these routes carry passcodes and passwords
_SENSITIVE_PATH_PREFIXES = ("/api/otp", "/api/auth")


@app.middleware("http")
async def log_request(request: Request, call_next):
    log = new_logger("log_request")
    if request.method != "OPTIONS":  # Skip CORS preflight
        log.info(f"INCOMING REQUEST: {request.method} {request.url.path}")
        if not request.url.path.startswith(_SENSITIVE_PATH_PREFIXES):
            body = await request.body()
            if body:
                log.info(f"Request body ({request.method} {request.url.path}): {body[:1000]!r}")
    response = await call_next(request)
    return response


def _first_error(exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return "body", "Invalid request body"
    error = errors[0]
    message = str(error.get("msg") or "Invalid value")
    # pydantic prefixes messages raised from field validators
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    loc = [part for part in error.get("loc", ()) if part != "body"]
    field = str(loc[-1]) if loc else "body"
    return field, message


@app.exception_handler(RequestValidationError)
async def request_validation_failed(request: Request, exc: RequestValidationError):
    """
    Flatten pydantic errors to the first message.

    OTP routes keep their own error shapes: verify answers with a negative
    verification, send and resend with `{error, field}`. Every other route
    answers 422 `{"detail": message}`.
    """
    log = new_logger("request_validation_failed")
    field, message = _first_error(exc)
    path = request.url.path
    log.info(f"Rejected {request.method} {path}, invalid {field}: {message}")
    if path.startswith("/api/otp/verify"):
        return JSONResponse(status_code=400, content={"valid": False, "error": message})
    if path.startswith("/api/otp"):
        return JSONResponse(status_code=400, content={"error": message, "field": field})
    return JSONResponse(status_code=422, content={"detail": message})


def _allowed_origins():
    raw = os.getenv("CORS_ALLOW_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def create_tables():
    # Alembic owns the schema in deployed environments; this only fills gaps locally
    if str(engine.url).startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/")
def root():
    return {"message": "SHIFT Portal API deployed."}


from api.otp import router as otp_router
from api.auth import router as auth_router
from api.applications import router as applications_router
from api.admin import router as admin_router
from api.healthcheck import router as health_router

app.include_router(otp_router, prefix="/api")
app.include_router(auth_router, prefix="/api")
app.include_router(applications_router, prefix="/api")
app.include_router(admin_router, prefix="/api")
app.include_router(health_router, prefix="/api")
