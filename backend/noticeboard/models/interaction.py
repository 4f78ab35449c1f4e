import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from noticeboard.database.base import Base
from noticeboard.utils.clock import utcnow


class InteractionType(str, enum.Enum):
    VIEW = "view"
    LIKE = "like"
    BOOKMARK = "bookmark"
    ACKNOWLEDGE = "acknowledge"


class Interaction(Base):
    """A per-user toggle on a notice. Row present means "on"."""

    __tablename__ = "interactions"
    __table_args__ = (
        UniqueConstraint("user_id", "notice_id", "type", name="uq_interactions_user_notice_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    notice_id = Column(Integer, ForeignKey("notices.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    notice = relationship("Notice", back_populates="interactions")
