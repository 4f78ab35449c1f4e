from typing import Optional

from fastapi import HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from noticeboard.core.security import hash_password
from noticeboard.core.validation import ensure_identity_available
from noticeboard.models.activity_log import ActivityLog
from noticeboard.models.comment import Comment
from noticeboard.models.interaction import Interaction
from noticeboard.models.notice import Notice
from noticeboard.models.user import User, UserRole
from noticeboard.services.activity_service import activity_to_payload
from noticeboard.services.notice_service import reconcile_counters
from noticeboard.services.session_service import revoke_user_sessions
from noticeboard.utils.clock import utcnow


def create_user(
    db: Session,
    *,
    email: str,
    username: str,
    password: str,
    full_name: str,
    role: str,
    department: Optional[str] = None,
    is_verified: bool = False,
) -> User:
    ensure_identity_available(db, email, username)

    now = utcnow()
    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password),
        full_name=full_name,
        role=role,
        department=department,
        is_verified=is_verified,
        is_active=True,
        is_deleted=False,
        deleted_at=None,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def list_users(
    db: Session,
    *,
    role: Optional[str] = None,
    search: Optional[str] = None,
    include_deleted: bool = False,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[User], int]:
    query = db.query(User)
    if not include_deleted:
        query = query.filter(User.is_deleted == False)  # noqa: E712
    if role:
        query = query.filter(User.role == role)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                User.full_name.ilike(pattern),
                User.email.ilike(pattern),
                User.username.ilike(pattern),
            )
        )

    total = query.count()
    users = (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return users, total


def update_user(db: Session, user: User, changes: dict) -> User:
    for field in ("full_name", "role", "is_active", "is_verified"):
        if changes.get(field) is not None:
            setattr(user, field, changes[field])
    if "department" in changes:
        user.department = changes["department"]

    user.updated_at = utcnow()
    db.commit()
    db.refresh(user)
    return user


def soft_delete_user(db: Session, user: User) -> User:
    user.is_deleted = True
    user.is_active = False
    user.deleted_at = utcnow()
    db.commit()
    revoke_user_sessions(db, user.id)
    db.refresh(user)
    return user


def restore_user(db: Session, user: User) -> User:
    user.is_deleted = False
    user.is_active = True
    user.deleted_at = None
    db.commit()
    db.refresh(user)
    return user


def purge_user(db: Session, user: User) -> int:
    """Remove a soft-deleted user and everything they own.

    Their likes and comments on other authors' notices disappear with them, so
    the counters of those notices are recomputed. Returns how many were fixed.
    """
    if not user.is_deleted:
        raise HTTPException(status_code=400, detail="User must be soft-deleted first")

    liked = db.query(Interaction.notice_id).filter(Interaction.user_id == user.id)
    commented = db.query(Comment.notice_id).filter(Comment.user_id == user.id)
    touched = {
        notice_id
        for (notice_id,) in liked.union(commented).all()
    }
    own = {notice_id for (notice_id,) in db.query(Notice.id).filter(Notice.author_id == user.id).all()}

    db.delete(user)
    db.commit()

    return reconcile_counters(db, touched - own)


def log_entry_payload(log: ActivityLog, user: Optional[User]) -> dict:
    return {
        "log": activity_to_payload(log),
        "user": {
            "id": user.id,
            "fullName": user.full_name,
            "email": user.email,
            "role": user.role,
        } if user else None,
    }


def _count(db: Session, model, *criteria) -> int:
    return db.query(func.count(model.id)).filter(*criteria).scalar() or 0


def dashboard_stats(db: Session) -> dict:
    recent = (
        db.query(ActivityLog, User)
        .outerjoin(User, ActivityLog.user_id == User.id)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(10)
        .all()
    )

    return {
        "users": {
            "total": _count(db, User),
            "active": _count(db, User, User.is_active == True),  # noqa: E712
            "students": _count(db, User, User.role == UserRole.STUDENT.value),
            "staff": _count(db, User, User.role == UserRole.STAFF.value),
            "admins": _count(db, User, User.role == UserRole.ADMIN.value),
        },
        "notices": {
            "total": _count(db, Notice),
            "approved": _count(db, Notice, Notice.is_approved == True),  # noqa: E712
            "pending": _count(db, Notice, Notice.is_approved == False),  # noqa: E712
            "archived": _count(db, Notice, Notice.is_archived == True),  # noqa: E712
        },
        "recentActivity": [log_entry_payload(log, user) for log, user in recent],
    }
