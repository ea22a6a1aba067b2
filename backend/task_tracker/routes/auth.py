# task_tracker/routes/auth.py
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from task_tracker.core.database import get_db
from task_tracker.core.rate_limit import auth_rate_limit, limiter
from task_tracker.core.tokens import TokenPayload
from task_tracker.dependencies.auth import require_principal
from task_tracker.schemas.auth import AccessTokenOut, LoginIn, LoginOut, MessageOut, RegisterIn
from task_tracker.schemas.user import UserEnvelope
from task_tracker.services import auth as auth_service
from task_tracker.services.refresh_cookie import (
    clear_refresh_cookie,
    read_refresh_cookie,
    set_refresh_cookie,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
@limiter.limit(auth_rate_limit)
def register(request: Request, response: Response, payload: RegisterIn, db: Session = Depends(get_db)):
    user = auth_service.register(
        db,
        email=str(payload.email),
        password=payload.password,
        name=payload.name,
    )
    return {"user": user}


@router.post("/login", response_model=LoginOut)
@limiter.limit(auth_rate_limit)
def login(request: Request, response: Response, payload: LoginIn, db: Session = Depends(get_db)):
    result = auth_service.login(db, email=str(payload.email), password=payload.password)

    # The refresh token only ever travels in the HttpOnly cookie.
    set_refresh_cookie(response, result.refresh_token)

    return {"access_token": result.access_token, "user": result.user}


@router.post("/refresh", response_model=AccessTokenOut)
def refresh(request: Request, db: Session = Depends(get_db)):
    """
    Issue a new access token from the refresh cookie.
    The refresh token and its stored record are not rotated.
    """
    access_token = auth_service.refresh(db, read_refresh_cookie(request))
    return {"access_token": access_token}


@router.post("/logout", response_model=MessageOut)
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    """
    Delete the stored refresh token (if any) and clear the cookie. Always succeeds.
    """
    auth_service.logout(db, read_refresh_cookie(request))
    clear_refresh_cookie(response)
    return {"message": "Logout successful"}


@router.get("/me", response_model=UserEnvelope)
def me(principal: TokenPayload = Depends(require_principal), db: Session = Depends(get_db)):
    return {"user": auth_service.get_current_user(db, principal.user_id)}
