import datetime
import logging
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.settings import Settings, settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    author_id: str,
    role: str,
    current_settings: Optional[Settings] = None,
    expires_delta: Optional[datetime.timedelta] = None,
) -> str:
    current_settings = current_settings or settings
    expire = datetime.datetime.now(datetime.timezone.utc) + (
        expires_delta or datetime.timedelta(minutes=current_settings.TOKEN_TTL_MINUTES)
    )
    claims = {"sub": author_id, "role": role, "exp": expire}
    return jwt.encode(
        claims, current_settings.JWT_SECRET, algorithm=current_settings.JWT_ALGORITHM
    )


def decode_access_token(token: str, current_settings: Settings) -> Optional[str]:
    """Return the author id carried by ``token``, or None if it is not valid."""
    try:
        payload = jwt.decode(
            token,
            current_settings.JWT_SECRET,
            algorithms=[current_settings.JWT_ALGORITHM],
        )
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        return None
    return payload.get("sub")


def get_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    current_settings: Settings = Depends(get_settings),
) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(current_settings.COOKIE_NAME)
