from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey

from noticeboard.database.base import Base
from noticeboard.utils.clock import utcnow


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(64), nullable=False, index=True)  # login | logout | create_notice | delete_user ...
    entity_type = Column(String(32), nullable=True)
    entity_id = Column(String(64), nullable=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", Text, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
