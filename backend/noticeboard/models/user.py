import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from noticeboard.database.base import Base
from noticeboard.utils.clock import utcnow


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    STAFF = "staff"
    STUDENT = "student"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(64), unique=True, index=True, nullable=False)

    # passlib hash string; salt and round count are embedded in it
    password_hash = Column(String, nullable=False)

    full_name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True)  # admin | staff | student
    department = Column(String(100), nullable=True)

    is_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    notices = relationship("Notice", back_populates="author", cascade="all, delete-orphan", passive_deletes=True)
    interactions = relationship("Interaction", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("Comment", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    notifications = relationship("Notification", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def can_authenticate(self) -> bool:
        return bool(self.is_active) and not self.is_deleted
