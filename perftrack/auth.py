# perftrack/auth.py
from datetime import datetime, timedelta, timezone
import uuid
from typing import Optional

from fastapi import Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from perftrack.errors import Unauthenticated
from perftrack.settings import Settings

ROLES = ("ADMIN", "COACH", "ATHLETE")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# --- password utils ----------------------------------------------------------
def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# --- JWT helpers -------------------------------------------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(settings: Settings, sub: str, role: str, object_id: Optional[str] = None,
                        expires_delta: Optional[timedelta] = None) -> str:
    iat = _now_utc()
    exp = iat + (expires_delta or timedelta(minutes=settings.access_token_expire_min))
    payload = {
        "sub": sub,
        "role": role,
        "oid": object_id,
        "type": "access",
        "jti": str(uuid.uuid4()),
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_alg)


def decode_token(settings: Settings, raw: str) -> dict:
    try:
        return jwt.decode(raw, settings.secret_key, algorithms=[settings.jwt_alg])
    except JWTError:
        raise Unauthenticated("Invalid or expired token")


def _token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return request.cookies.get("token")


# --- dependency used by the routers ------------------------------------------
def get_current_user(request: Request) -> dict:
    """
    Pull token from Authorization header (Bearer) OR from 'token' cookie.

    The token is verified by signature alone, so a rejected request never
    reaches either database.
    """
    token = _token_from_request(request)
    if not token:
        raise Unauthenticated("Missing authentication token")

    payload = decode_token(request.app.state.settings, token)
    if payload.get("type") != "access":
        raise Unauthenticated("Wrong token type")
    if not payload.get("sub") or payload.get("role") not in ROLES:
        raise Unauthenticated("Invalid subject")

    user = {
        "user_id": payload["sub"],
        "role": payload["role"],
        "object_id": payload.get("oid"),
    }
    request.state.actor = user
    return user
