"""Session authority: opaque cookie tokens persisted in ``user_sessions``.

A session resolves to a user only while it is unexpired and the user can
still authenticate. Expired rows are inert and are swept by
``purge_expired_sessions`` out of band.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from noticeboard.config import settings
from noticeboard.core.security import dummy_verify, verify_password
from noticeboard.models.user import User
from noticeboard.models.user_session import UserSession
from noticeboard.utils.clock import utcnow
from noticeboard.utils.generator import generate_session_id

logger = logging.getLogger(__name__)


def create_session(db: Session, user_id: int, now: Optional[datetime] = None) -> UserSession:
    now = now or utcnow()
    session = UserSession(
        session_id=generate_session_id(),
        user_id=user_id,
        created_at=now,
        expires_at=now + timedelta(days=settings.SESSION_TTL_DAYS),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def resolve_session(db: Session, session_id: Optional[str], now: Optional[datetime] = None) -> Optional[User]:
    if not session_id:
        return None

    now = now or utcnow()
    row = (
        db.query(UserSession, User)
        .join(User, UserSession.user_id == User.id)
        .filter(
            UserSession.session_id == session_id,
            UserSession.expires_at > now,
        )
        .first()
    )
    if row is None:
        return None

    _, user = row
    if not user.can_authenticate:
        return None
    return user


def revoke_session(db: Session, session_id: Optional[str]) -> None:
    if not session_id:
        return
    db.query(UserSession).filter(UserSession.session_id == session_id).delete(synchronize_session=False)
    db.commit()


def revoke_user_sessions(db: Session, user_id: int) -> int:
    count = db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)
    db.commit()
    return count


def purge_expired_sessions(db: Session, now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    count = db.query(UserSession).filter(UserSession.expires_at <= now).delete(synchronize_session=False)
    db.commit()
    if count:
        logger.info("Purged %d expired sessions", count)
    return count


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user for valid credentials, ``None`` otherwise.

    Unknown email, deleted or inactive account and wrong password are not
    distinguished to the caller.
    """
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None:
        dummy_verify()
        return None

    if not verify_password(password, user.password_hash):
        return None
    if not user.can_authenticate:
        return None
    return user
