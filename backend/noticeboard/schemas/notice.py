from typing import Literal, Optional

from pydantic import field_validator

from noticeboard.models.interaction import InteractionType
from noticeboard.models.notice import NoticeCategory
from noticeboard.schemas.common import CamelModel, UTCDateTime

CategoryName = Literal[tuple(category.value for category in NoticeCategory)]

TOGGLE_TYPES = (
    InteractionType.LIKE.value,
    InteractionType.BOOKMARK.value,
    InteractionType.ACKNOWLEDGE.value,
)


def _require_text(value: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError("Title and content are required")
    return cleaned


class NoticeCreate(CamelModel):
    title: str
    content: str
    category: Optional[CategoryName] = None
    department: Optional[str] = None
    publish_at: Optional[UTCDateTime] = None
    expires_at: Optional[UTCDateTime] = None
    is_pinned: bool = False

    @field_validator("title", "content")
    @classmethod
    def validate_non_empty(cls, value: str):
        return _require_text(value)

    @field_validator("department")
    @classmethod
    def normalize_department(cls, value: Optional[str]):
        if value is None:
            return value
        return value.strip() or None


class NoticeUpdate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[CategoryName] = None
    department: Optional[str] = None
    publish_at: Optional[UTCDateTime] = None
    expires_at: Optional[UTCDateTime] = None
    is_pinned: Optional[bool] = None
    is_archived: Optional[bool] = None

    @field_validator("title", "content")
    @classmethod
    def validate_optional_non_empty(cls, value: Optional[str]):
        if value is None:
            return value
        return _require_text(value)


class AuthorOut(CamelModel):
    id: int
    full_name: str
    role: str
    department: Optional[str] = None


class NoticeOut(CamelModel):
    id: int
    title: str
    content: str
    summary: Optional[str] = None
    category: str
    author_id: int
    department: Optional[str] = None
    is_pinned: bool
    is_approved: bool
    is_archived: bool
    status: str
    publish_at: UTCDateTime
    expires_at: Optional[UTCDateTime] = None
    view_count: int
    like_count: int
    comment_count: int
    created_at: UTCDateTime
    updated_at: UTCDateTime


class NoticeListItem(CamelModel):
    notice: NoticeOut
    author: Optional[AuthorOut] = None


class AttachmentOut(CamelModel):
    id: int
    file_name: str
    file_type: str
    file_size: int
    storage_key: str
    uploaded_at: UTCDateTime


class NoticeDetail(NoticeListItem):
    attachments: list[AttachmentOut] = []
    user_interactions: list[str] = []


class InteractionRequest(CamelModel):
    type: str

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str):
        if value not in TOGGLE_TYPES:
            raise ValueError("Invalid interaction type")
        return value


class InteractionResult(CamelModel):
    action: Literal["added", "removed"]


class CommentCreate(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: str):
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("Comment content is required")
        return cleaned


class CommentOut(CamelModel):
    id: int
    notice_id: int
    user_id: int
    content: str
    created_at: UTCDateTime
    updated_at: UTCDateTime


class CommenterOut(CamelModel):
    id: int
    full_name: str
    role: str


class CommentListItem(CamelModel):
    comment: CommentOut
    user: Optional[CommenterOut] = None


class ReconcileResult(CamelModel):
    repaired: int
