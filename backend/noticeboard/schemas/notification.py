from typing import Optional

from noticeboard.schemas.common import CamelModel, UTCDateTime


class NotificationOut(CamelModel):
    id: int
    user_id: int
    notice_id: Optional[int] = None
    title: str
    message: str
    type: str
    is_read: bool
    created_at: UTCDateTime
