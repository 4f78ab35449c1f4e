from noticeboard.models.user import User, UserRole
from noticeboard.models.user_session import UserSession
from noticeboard.models.notice import Notice, Attachment, NoticeCategory, NoticeStatus
from noticeboard.models.interaction import Interaction, InteractionType
from noticeboard.models.comment import Comment
from noticeboard.models.activity_log import ActivityLog
from noticeboard.models.notification import Notification

__all__ = [
    "User",
    "UserRole",
    "UserSession",
    "Notice",
    "Attachment",
    "NoticeCategory",
    "NoticeStatus",
    "Interaction",
    "InteractionType",
    "Comment",
    "ActivityLog",
    "Notification",
]
