import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from noticeboard.models.notice import Notice
from noticeboard.models.notification import Notification
from noticeboard.models.user import User

logger = logging.getLogger(__name__)


def push_notification(
    db: Session,
    *,
    user_id: int,
    title: str,
    message: str,
    type: str = "system",
    notice_id: Optional[int] = None,
) -> Optional[Notification]:
    notification = Notification(
        user_id=user_id,
        notice_id=notice_id,
        title=title,
        message=message,
        type=type,
        is_read=False,
    )
    try:
        db.add(notification)
        db.commit()
        db.refresh(notification)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store notification for user %s", user_id)
        return None
    return notification


def notify_notice_approved(db: Session, notice: Notice) -> Optional[Notification]:
    return push_notification(
        db,
        user_id=notice.author_id,
        title="Notice approved",
        message=f'Your notice "{notice.title}" has been approved and is now visible.',
        type="notice",
        notice_id=notice.id,
    )


def notify_new_comment(db: Session, notice: Notice, commenter: User) -> Optional[Notification]:
    if commenter.id == notice.author_id:
        return None
    return push_notification(
        db,
        user_id=notice.author_id,
        title="New comment",
        message=f'{commenter.full_name} commented on "{notice.title}".',
        type="comment",
        notice_id=notice.id,
    )
