"""Notice lifecycle, visibility and interaction counters.

Lifecycle: a notice starts approved when an admin writes it and pending
otherwise; only an admin approves. ``is_archived`` is toggled independently of
approval and ``is_pinned`` is orthogonal to both.

Counters: ``like_count`` and ``comment_count`` are a cache of the
``interactions`` and ``comments`` tables. Each mutation commits the row change
and the counter change together. If they ever drift (manual edits in the
database, a purged user), ``reconcile_counters`` recomputes them from the
rows. It is exposed as ``POST /admin/notices/reconcile`` and as
``python -m noticeboard.scripts.reconcile_counters``.

``view_count`` is deliberately *not* part of that cache: it grows on every
detail fetch, while the ``view`` interaction row is stored once per user.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import false, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from noticeboard.models.comment import Comment
from noticeboard.models.interaction import Interaction, InteractionType
from noticeboard.models.notice import Notice
from noticeboard.models.user import User, UserRole
from noticeboard.utils.clock import ensure_aware_utc, utcnow
from noticeboard.utils.notice_text import auto_categorize, generate_summary

logger = logging.getLogger(__name__)

# Interaction types mirrored by a counter column on the notice
COUNTED_INTERACTIONS = {InteractionType.LIKE.value: Notice.like_count}


def initial_approval(role: str) -> bool:
    return role == UserRole.ADMIN.value


# ---------------- LIFECYCLE ----------------

def create_notice(
    db: Session,
    author: User,
    *,
    title: str,
    content: str,
    category: Optional[str] = None,
    department: Optional[str] = None,
    publish_at: Optional[datetime] = None,
    expires_at: Optional[datetime] = None,
    is_pinned: bool = False,
) -> Notice:
    now = utcnow()
    notice = Notice(
        title=title,
        content=content,
        summary=generate_summary(content),
        category=category or auto_categorize(title, content),
        author_id=author.id,
        department=department,
        is_pinned=bool(is_pinned),
        is_approved=initial_approval(author.role),
        is_archived=False,
        publish_at=publish_at or now,
        expires_at=expires_at,
        view_count=0,
        like_count=0,
        comment_count=0,
        created_at=now,
        updated_at=now,
    )
    db.add(notice)
    db.commit()
    db.refresh(notice)
    return notice


def approve_notice(db: Session, notice: Notice) -> bool:
    """Approve a pending notice. Returns False when it was already approved."""
    if notice.is_approved:
        return False
    notice.is_approved = True
    db.commit()
    db.refresh(notice)
    return True


def update_notice(db: Session, notice: Notice, changes: dict) -> Notice:
    if changes.get("title"):
        notice.title = changes["title"]
    if changes.get("content"):
        notice.content = changes["content"]
        notice.summary = generate_summary(notice.content)
    if changes.get("category"):
        notice.category = changes["category"]
    if "department" in changes:
        notice.department = changes["department"]
    if changes.get("publish_at"):
        notice.publish_at = changes["publish_at"]
    if changes.get("expires_at"):
        notice.expires_at = changes["expires_at"]
    if changes.get("is_pinned") is not None:
        notice.is_pinned = changes["is_pinned"]
    if changes.get("is_archived") is not None:
        notice.is_archived = changes["is_archived"]

    notice.updated_at = utcnow()
    db.commit()
    db.refresh(notice)
    return notice


def delete_notice(db: Session, notice: Notice) -> None:
    db.delete(notice)
    db.commit()


# ---------------- VISIBILITY ----------------

def visible_notices(query: Query, user: User, now: Optional[datetime] = None, archived: bool = False) -> Query:
    now = now or utcnow()

    if user.role == UserRole.STUDENT.value:
        if archived:
            return query.filter(false())
        # expired notices are hidden from students as well, on top of the approval
        # and publish-date rules
        return query.filter(
            Notice.is_approved == True,  # noqa: E712
            Notice.is_archived == False,  # noqa: E712
            Notice.publish_at <= now,
            or_(Notice.expires_at == None, Notice.expires_at > now),  # noqa: E711
        )

    if user.role == UserRole.STAFF.value:
        query = query.filter(
            or_(Notice.author_id == user.id, Notice.is_approved == True)  # noqa: E712
        )
        return query.filter(Notice.is_archived == archived)

    if user.role == UserRole.ADMIN.value:
        if archived:
            query = query.filter(Notice.is_archived == True)  # noqa: E712
        return query

    return query.filter(false())


def can_view(user: User, notice: Notice, now: Optional[datetime] = None) -> bool:
    now = now or utcnow()

    if user.role == UserRole.ADMIN.value:
        return True
    if user.role == UserRole.STAFF.value:
        return notice.author_id == user.id or bool(notice.is_approved)
    if user.role == UserRole.STUDENT.value:
        expires_at = ensure_aware_utc(notice.expires_at)
        return (
            bool(notice.is_approved)
            and not notice.is_archived
            and ensure_aware_utc(notice.publish_at) <= now
            and (expires_at is None or expires_at > now)
        )
    return False


def filter_notices(
    query: Query,
    *,
    category: Optional[str] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
    pinned: bool = False,
) -> Query:
    if category:
        query = query.filter(Notice.category == category)
    if department and department != "all":
        query = query.filter(
            or_(Notice.department == department, Notice.department == None)  # noqa: E711
        )
    if pinned:
        query = query.filter(Notice.is_pinned == True)  # noqa: E712
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Notice.title.ilike(pattern), Notice.content.ilike(pattern)))
    return query


# ---------------- INTERACTIONS ----------------

def _find_interaction(db: Session, *, user_id: int, notice_id: int, interaction_type: str) -> Optional[Interaction]:
    return db.query(Interaction).filter(
        Interaction.user_id == user_id,
        Interaction.notice_id == notice_id,
        Interaction.type == interaction_type,
    ).first()


def toggle_interaction(db: Session, *, user_id: int, notice_id: int, interaction_type: str) -> str:
    """Flip one (user, notice, type) toggle and its counter in a single commit.

    Returns ``"added"`` or ``"removed"``. On a database error the transaction
    is rolled back and the error propagates.
    """
    counter = COUNTED_INTERACTIONS.get(interaction_type)
    existing = _find_interaction(db, user_id=user_id, notice_id=notice_id, interaction_type=interaction_type)

    try:
        if existing:
            # a concurrent unlike may have removed the row since it was read
            deleted = db.query(Interaction).filter(Interaction.id == existing.id).delete(
                synchronize_session=False
            )
            delta = -deleted
            action = "removed"
        else:
            db.add(Interaction(user_id=user_id, notice_id=notice_id, type=interaction_type))
            delta = 1
            action = "added"

        if counter is not None and delta:
            db.query(Notice).filter(Notice.id == notice_id).update(
                {counter: counter + delta}, synchronize_session=False
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    return action


def record_view(db: Session, notice: Notice, user_id: int) -> None:
    db.query(Notice).filter(Notice.id == notice.id).update(
        {Notice.view_count: Notice.view_count + 1}, synchronize_session=False
    )
    db.commit()

    already_viewed = db.query(Interaction.id).filter(
        Interaction.user_id == user_id,
        Interaction.notice_id == notice.id,
        Interaction.type == InteractionType.VIEW.value,
    ).first()
    if already_viewed:
        return

    try:
        db.add(Interaction(user_id=user_id, notice_id=notice.id, type=InteractionType.VIEW.value))
        db.commit()
    except IntegrityError:
        # a concurrent fetch stored the same view row first
        db.rollback()


def user_interaction_types(db: Session, *, user_id: int, notice_id: int) -> list[str]:
    rows = db.query(Interaction.type).filter(
        Interaction.user_id == user_id,
        Interaction.notice_id == notice_id,
    ).order_by(Interaction.id).all()
    return [interaction_type for (interaction_type,) in rows]


# ---------------- COMMENTS ----------------

def add_comment(db: Session, notice: Notice, user: User, content: str) -> Comment:
    now = utcnow()
    comment = Comment(
        notice_id=notice.id,
        user_id=user.id,
        content=content,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(comment)
        db.query(Notice).filter(Notice.id == notice.id).update(
            {Notice.comment_count: Notice.comment_count + 1}, synchronize_session=False
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(comment)
    return comment


# ---------------- REPAIR ----------------

def reconcile_counters(db: Session, notice_ids: Optional[Iterable[int]] = None) -> int:
    """Recompute like and comment counters from their rows.

    Returns the number of notices whose stored counters were wrong. Pass
    ``notice_ids`` to limit the sweep; by default every notice is checked.
    ``view_count`` is left alone.
    """
    likes = (
        db.query(Interaction.notice_id, func.count(Interaction.id).label("total"))
        .filter(Interaction.type == InteractionType.LIKE.value)
        .group_by(Interaction.notice_id)
        .subquery()
    )
    comments = (
        db.query(Comment.notice_id, func.count(Comment.id).label("total"))
        .group_by(Comment.notice_id)
        .subquery()
    )

    query = (
        db.query(Notice, func.coalesce(likes.c.total, 0), func.coalesce(comments.c.total, 0))
        .outerjoin(likes, likes.c.notice_id == Notice.id)
        .outerjoin(comments, comments.c.notice_id == Notice.id)
    )
    if notice_ids is not None:
        ids = list(notice_ids)
        if not ids:
            return 0
        query = query.filter(Notice.id.in_(ids))

    repaired = 0
    for notice, like_total, comment_total in query.all():
        if notice.like_count != like_total or notice.comment_count != comment_total:
            logger.warning(
                "Counter drift on notice %s: likes %s -> %s, comments %s -> %s",
                notice.id, notice.like_count, like_total, notice.comment_count, comment_total,
            )
            notice.like_count = like_total
            notice.comment_count = comment_total
            repaired += 1

    db.commit()
    return repaired
