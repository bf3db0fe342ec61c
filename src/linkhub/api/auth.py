from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from linkhub.api.deps import get_current_user, get_session_token
from linkhub.core.config import settings
from linkhub.db.models import Profile, User
from linkhub.db.session import get_db
from linkhub.schemas.auth import CurrentUserResponse, LoginRequest, RegisterRequest, SessionResponse
from linkhub.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _current_user_payload(db: Session, user: User) -> CurrentUserResponse:
    profile = db.scalar(select(Profile).where(Profile.user_id == user.id))
    return CurrentUserResponse(
        id=user.id,
        email=user.email,
        username=profile.username if profile else None,
        display_name=profile.display_name if profile else None,
    )


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        samesite="strict",
        secure=settings.app_env != "dev",
    )


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def register(req: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    user, _, token = auth_service.register(db, req.model_dump())
    _set_session_cookie(response, token)
    return SessionResponse(token=token, user=_current_user_payload(db, user))


@router.post("/login", response_model=SessionResponse)
def login(req: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user, token = auth_service.login(db, req.email, req.password)
    _set_session_cookie(response, token)
    return SessionResponse(token=token, user=_current_user_payload(db, user))


@router.post("/logout")
def logout(
    response: Response,
    token: str | None = Depends(get_session_token),
    db: Session = Depends(get_db),
):
    auth_service.logout(db, token)
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True}


@router.get("/me", response_model=CurrentUserResponse)
def me(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _current_user_payload(db, user)
