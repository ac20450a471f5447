from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from studymate_shared import Settings

from ..db.models import User
from ..dependencies import get_settings_dep
from ..models import GoogleAuthRequest, TokenResponse, UserResponse
from ..security import InvalidGoogleToken, create_access_token, get_current_user, verify_google_token
from ..services.persistence import upsert_google_user

router = APIRouter(prefix="/v1/auth", tags=["auth"])


def _to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        google_id=user.google_id,
        email=user.email,
        name=user.name,
        created_at=user.created_at,
    )


@router.post("/google", response_model=TokenResponse)
async def google_signin(request: GoogleAuthRequest, settings: Settings = Depends(get_settings_dep)):
    try:
        claims = await verify_google_token(request.token_id, settings)
    except InvalidGoogleToken as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token") from exc

    user = await upsert_google_user(
        google_id=claims["sub"],
        email=claims.get("email"),
        name=claims.get("name"),
    )
    token = create_access_token(data={"sub": user.google_id}, settings=settings)
    return TokenResponse(access_token=token, user=_to_user_response(user))


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return _to_user_response(current_user)
