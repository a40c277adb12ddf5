# storefront/auth.py
import hmac
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from jose import JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from .config import Settings
from .errors import AuthError
from .schemas import AdminLogin, SessionStatus, SessionToken

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

# 🔑 Hashing and JWT
# Argon2 for new hashes, bcrypt kept so older hashes still verify.
pwd_context = CryptContext(schemes=["argon2", "bcrypt"], deprecated="auto")
ALGORITHM = "HS256"
SESSION_COOKIE = "storefront_admin"
SESSION_SUBJECT = "admin"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# 🔐 Utilities
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except UnknownHashError:
        # unrecognised hash format -> treat as authentication failure
        return False
    except ValueError:
        return False


def secrets_match(supplied: Optional[str], expected: Optional[str]) -> bool:
    # an unset secret never matches anything
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def check_admin_password(password: str, settings: Settings) -> bool:
    if settings.admin_password_hash:
        return verify_password(password, settings.admin_password_hash)
    return secrets_match(password, settings.admin_password)


def create_session_token(settings: Settings, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.session_expire_minutes)
    return jwt.encode({"sub": SESSION_SUBJECT, "iat": now, "exp": expire}, settings.session_secret, algorithm=ALGORITHM)


def decode_session_token(token: str, settings: Settings) -> Optional[dict]:
    try:
        payload = jwt.decode(token, settings.session_secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("sub") != SESSION_SUBJECT:
        return None
    return payload


def bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth.split(None, 1)[1].strip()
    return None


def _session_payload(request: Request, settings: Settings) -> Optional[dict]:
    """Admin session from the bearer header or the session cookie, if valid."""
    for token in (bearer_token(request), request.cookies.get(SESSION_COOKIE)):
        if token:
            payload = decode_session_token(token, settings)
            if payload is not None:
                return payload
    return None


def _require(request: Request, settings: Settings, secret: Optional[str]) -> None:
    if secrets_match(bearer_token(request), secret):
        return
    if _session_payload(request, settings) is not None:
        return
    logger.warning("Rejected unauthenticated %s %s", request.method, request.url.path)
    raise AuthError()


async def require_product_admin(request: Request, settings: Settings = Depends(get_settings)) -> None:
    _require(request, settings, settings.admin_api_key)


async def require_upload_admin(request: Request, settings: Settings = Depends(get_settings)) -> None:
    _require(request, settings, settings.admin_upload_key)


# ✅ Admin login
@router.post("/login", response_model=SessionToken)
async def login(payload: AdminLogin, response: Response, settings: Settings = Depends(get_settings)):
    if not check_admin_password(payload.password, settings):
        logger.warning("Failed admin login attempt")
        raise AuthError("Invalid password")

    token = create_session_token(settings)
    max_age = settings.session_expire_minutes * 60
    response.set_cookie(SESSION_COOKIE, token, max_age=max_age, path="/", httponly=True, samesite="lax")
    return SessionToken(access_token=token, expires_in=max_age)


@router.get("/session", response_model=SessionStatus)
async def session_status(request: Request, settings: Settings = Depends(get_settings)):
    payload = _session_payload(request, settings)
    if payload is None:
        return SessionStatus(authenticated=False)
    return SessionStatus(authenticated=True, expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc))


@router.post("/logout", status_code=204)
async def logout():
    response = Response(status_code=204)
    response.delete_cookie(SESSION_COOKIE, path="/")
    return response


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python -m storefront.auth <password>")
        sys.exit(2)
    print(hash_password(sys.argv[1]))
