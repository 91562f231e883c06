from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException, status
from fastapi.security.api_key import APIKeyHeader
from jose import JWTError, jwt
import os
from dotenv import load_dotenv
from utils.logger_factory import new_logger

load_dotenv()

SECRET_KEY = os.environ.get("JWT_SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("JWT_SECRET_KEY environment variable must be set for JWT authentication.")

ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))
SIGNUP_TOKEN_EXPIRE_MINUTES = int(os.environ.get("SIGNUP_TOKEN_EXPIRE_MINUTES", 15))

PRE_SIGNUP_ROLE = "PRE_SIGNUP"

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


def _encode(claims: dict, expires_minutes: int) -> str:
    now = datetime.now(timezone.utc)
    payload = dict(claims)
    payload["iat"] = int(now.timestamp())
    payload["exp"] = int((now + timedelta(minutes=expires_minutes)).timestamp())
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(public_id: str, role: str, email: str) -> str:
    return _encode({"sub": public_id, "role": role, "email": email}, ACCESS_TOKEN_EXPIRE_MINUTES)


def create_signup_token(email: str, full_name: str) -> str:
    """Short-lived token proving `email` passed OTP verification."""
    return _encode(
        {"sub": email, "role": PRE_SIGNUP_ROLE, "email": email, "full_name": full_name},
        SIGNUP_TOKEN_EXPIRE_MINUTES,
    )


def get_current_user(api_key: str = Depends(api_key_header)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    log = new_logger("get_current_user")

    if not api_key:
        log.info("Authorization header missing.")
        raise credentials_exception
    if not api_key.startswith("Bearer "):
        log.warning("Authorization header malformed or missing 'Bearer '")
        raise credentials_exception
    token = api_key[len("Bearer "):]
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        log.warning(f"JWT decoding failed: {str(e)}")
        raise credentials_exception
    user_id = payload.get("sub")
    role = payload.get("role")
    if user_id is None or role is None:
        log.error("Invalid JWT: missing subject or role")
        raise credentials_exception
    return {
        "user_id": user_id,
        "role": role,
        "email": payload.get("email"),
        "full_name": payload.get("full_name"),
    }


def require_roles(*roles):
    """
    Dependency for FastAPI endpoints to require one or more roles.
    Usage: current_user=Depends(require_roles('ADMIN', 'USER'))
    """
    def role_checker(user=Depends(get_current_user)):
        log = new_logger("require_roles")
        if user["role"] not in roles:
            log.warning(
                f"Authorization failed: user_id={user.get('user_id')}, role={user.get('role')}, required_roles={roles}"
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user
    return role_checker
