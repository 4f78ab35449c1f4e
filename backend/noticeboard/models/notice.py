import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from noticeboard.database.base import Base
from noticeboard.utils.clock import utcnow


class NoticeCategory(str, enum.Enum):
    EXAMS = "exams"
    EVENTS = "events"
    HOLIDAYS = "holidays"
    SPORTS = "sports"
    GENERAL = "general"
    EMERGENCY = "emergency"


class NoticeStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ARCHIVED = "archived"


class Notice(Base):
    __tablename__ = "notices"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    summary = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)

    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # None targets every department
    department = Column(String(100), nullable=True)

    is_pinned = Column(Boolean, default=False, nullable=False, index=True)
    is_approved = Column(Boolean, default=False, nullable=False, index=True)
    is_archived = Column(Boolean, default=False, nullable=False)

    publish_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    view_count = Column(Integer, default=0, nullable=False)
    like_count = Column(Integer, default=0, nullable=False)
    comment_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    author = relationship("User", back_populates="notices")
    attachments = relationship("Attachment", back_populates="notice", cascade="all, delete-orphan", passive_deletes=True)
    interactions = relationship("Interaction", back_populates="notice", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("Comment", back_populates="notice", cascade="all, delete-orphan", passive_deletes=True)
    notifications = relationship("Notification", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def status(self) -> str:
        if self.is_archived:
            return NoticeStatus.ARCHIVED.value
        if self.is_approved:
            return NoticeStatus.APPROVED.value
        return NoticeStatus.PENDING.value


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    notice_id = Column(Integer, ForeignKey("notices.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(20), nullable=False)  # pdf | image | video
    file_size = Column(Integer, nullable=False)
    storage_key = Column(String(512), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    notice = relationship("Notice", back_populates="attachments")
