from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import requests
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from studymate_shared import Settings

from .db.models import User
from .dependencies import get_settings_dep
from .services.persistence import get_user_by_google_id

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/google")


class InvalidGoogleToken(Exception):
    """Raised when Google rejects an ID token."""


def create_access_token(*, data: dict, settings: Settings) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=settings.jwt_access_token_expires_minutes)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return encoded_jwt


async def verify_google_token(token_id: str, settings: Settings) -> Dict[str, Any]:
    """Validate a Google ID token with the tokeninfo endpoint and return its claims."""

    def _fetch() -> Dict[str, Any]:
        try:
            response = requests.get(settings.google_tokeninfo_url, params={"id_token": token_id}, timeout=10)
        except requests.RequestException as exc:
            raise InvalidGoogleToken("Could not reach Google") from exc
        if response.status_code != 200:
            raise InvalidGoogleToken("Invalid token")
        return response.json()

    claims = await asyncio.to_thread(_fetch)
    if not claims.get("sub"):
        raise InvalidGoogleToken("Invalid token")
    return claims


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings_dep),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:  # pragma: no cover
        raise credentials_exception from exc
    google_id: Optional[str] = payload.get("sub")
    if google_id is None:
        raise credentials_exception

    user = await get_user_by_google_id(google_id)
    if user is None:
        raise credentials_exception
    return user


async def get_owner_id(current_user: User = Depends(get_current_user)) -> str:
    """The opaque owner identity every document call is scoped by."""

    return current_user.google_id
