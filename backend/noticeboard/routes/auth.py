import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from noticeboard.config import settings
from noticeboard.core.dependencies import get_current_user, get_optional_user, get_session_id
from noticeboard.database.session import get_db
from noticeboard.models.user import User
from noticeboard.models.user_session import UserSession
from noticeboard.schemas.user import LoginRequest, RegisterRequest, UserOut, UserSummary
from noticeboard.services.activity_service import log_activity
from noticeboard.services.admin_service import create_user
from noticeboard.services.session_service import authenticate_user, create_session, revoke_session
from noticeboard.utils.clock import ensure_aware_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

INVALID_CREDENTIALS = "Invalid email or password"


def _set_session_cookie(response: Response, request: Request, session: UserSession) -> None:
    expires_at = ensure_aware_utc(session.expires_at)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.session_id,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
        path="/",
        expires=expires_at,
        max_age=settings.SESSION_TTL_DAYS * 24 * 60 * 60,
    )


@router.post("/register", response_model=UserSummary)
def register(
    data: RegisterRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    try:
        user = create_user(
            db,
            email=data.email,
            username=data.username,
            password=data.password,
            full_name=data.full_name,
            role=data.role,
            department=data.department,
        )
        session = create_session(db, user.id)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email or username already exists")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Registration failed for %s", data.email)
        raise HTTPException(status_code=500, detail="Registration failed")

    _set_session_cookie(response, request, session)
    log_activity(db, request, user_id=user.id, action="register", entity_type="user", entity_id=user.id)
    return user


@router.post("/login", response_model=UserOut)
def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    user = authenticate_user(db, data.email, data.password)
    if not user:
        logger.info("Failed login for %s", data.email.strip().lower())
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    session = create_session(db, user.id)
    _set_session_cookie(response, request, session)
    log_activity(db, request, user_id=user.id, action="login", entity_type="user", entity_id=user.id)
    return user


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    session_id: Optional[str] = Depends(get_session_id),
    current_user: Optional[User] = Depends(get_optional_user),
):
    if session_id:
        user_id = current_user.id if current_user else None
        revoke_session(db, session_id)
        if user_id is not None:
            log_activity(db, request, user_id=user_id, action="logout", entity_type="user", entity_id=user_id)

    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
    return {"success": True}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
