from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from noticeboard.models.notice import Notice
from noticeboard.models.user import User


def get_notice_or_404(db: Session, notice_id: int) -> Notice:
    notice = db.query(Notice).filter(Notice.id == notice_id).first()
    if not notice:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notice not found",
        )
    return notice


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def ensure_identity_available(db: Session, email: str, username: str, exclude_user_id: int | None = None) -> None:
    email_query = db.query(User).filter(User.email == email)
    username_query = db.query(User).filter(User.username == username)
    if exclude_user_id is not None:
        email_query = email_query.filter(User.id != exclude_user_id)
        username_query = username_query.filter(User.id != exclude_user_id)

    if email_query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    if username_query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already taken",
        )
