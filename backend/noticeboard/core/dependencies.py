from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from noticeboard.config import settings
from noticeboard.core.permissions import Action, ensure_allowed
from noticeboard.database.session import get_db
from noticeboard.models.user import User
from noticeboard.services.session_service import resolve_session


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_optional_user(
    db: Session = Depends(get_db),
    session_id: Optional[str] = Depends(get_session_id),
) -> Optional[User]:
    return resolve_session(db, session_id)


def get_current_user(
    user: Optional[User] = Depends(get_optional_user),
) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_capability(action: Action):
    def _dependency(current_user: User = Depends(get_current_user)) -> User:
        ensure_allowed(current_user, action)
        return current_user

    return _dependency


get_current_admin = require_capability(Action.MANAGE_USERS)
