import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from noticeboard.config import settings
from noticeboard.core.dependencies import get_current_user, require_capability
from noticeboard.core.permissions import Action, ensure_allowed
from noticeboard.core.validation import get_notice_or_404
from noticeboard.database.session import get_db
from noticeboard.models.comment import Comment
from noticeboard.models.notice import Attachment, Notice
from noticeboard.models.user import User
from noticeboard.schemas.common import CreatedResponse, MessageResponse
from noticeboard.schemas.notice import (
    CommentCreate,
    CommentListItem,
    InteractionRequest,
    InteractionResult,
    NoticeCreate,
    NoticeDetail,
    NoticeListItem,
    NoticeUpdate,
)
from noticeboard.services import notice_service
from noticeboard.services.activity_service import log_activity
from noticeboard.services.notification_service import notify_new_comment, notify_notice_approved

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notices", tags=["Notices"])


def _get_visible_notice(db: Session, notice_id: int, user: User) -> Notice:
    notice = get_notice_or_404(db, notice_id)
    if not notice_service.can_view(user, notice):
        raise HTTPException(status_code=404, detail="Notice not found")
    return notice


# -----------------------------
# Staff + Admin: Create Notice
# -----------------------------
@router.post("", response_model=CreatedResponse)
def create_notice(
    data: NoticeCreate,
    request: Request,
    db: Session = Depends(get_db),
    author: User = Depends(require_capability(Action.CREATE_NOTICE)),
):
    try:
        notice = notice_service.create_notice(
            db,
            author,
            title=data.title,
            content=data.content,
            category=data.category,
            department=data.department,
            publish_at=data.publish_at,
            expires_at=data.expires_at,
            is_pinned=data.is_pinned,
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to create notice for user %s", author.id)
        raise HTTPException(status_code=500, detail="Failed to create notice")

    notice_id = notice.id
    log_activity(
        db, request,
        user_id=author.id,
        action="create_notice",
        entity_type="notice",
        entity_id=notice_id,
        metadata={"category": notice.category, "approved": notice.is_approved},
    )
    return {"id": notice_id, "message": "Notice created successfully"}


# -----------------------------
# Everyone: List Notices (role filtered)
# -----------------------------
@router.get("", response_model=List[NoticeListItem])
def list_notices(
    category: Optional[str] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
    pinned: bool = False,
    archived: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Notice, User).outerjoin(User, Notice.author_id == User.id)
    query = notice_service.visible_notices(query, current_user, archived=archived)
    query = notice_service.filter_notices(
        query,
        category=category,
        department=department,
        search=search,
        pinned=pinned,
    )
    rows = (
        query.order_by(Notice.is_pinned.desc(), Notice.publish_at.desc(), Notice.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return [{"notice": notice, "author": author} for notice, author in rows]


# -----------------------------
# Everyone: Notice Detail (counts a view)
# -----------------------------
@router.get("/{notice_id}", response_model=NoticeDetail)
def get_notice(
    notice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notice = _get_visible_notice(db, notice_id, current_user)
    user_id = current_user.id

    notice_service.record_view(db, notice, user_id)

    attachments = (
        db.query(Attachment)
        .filter(Attachment.notice_id == notice_id)
        .order_by(Attachment.id)
        .all()
    )
    return {
        "notice": notice,
        "author": notice.author,
        "attachments": attachments,
        "user_interactions": notice_service.user_interaction_types(db, user_id=user_id, notice_id=notice_id),
    }


# -----------------------------
# Author + Admin: Update Notice
# -----------------------------
@router.put("/{notice_id}", response_model=MessageResponse)
def update_notice(
    notice_id: int,
    data: NoticeUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notice = get_notice_or_404(db, notice_id)
    ensure_allowed(current_user, Action.UPDATE_NOTICE, owner_id=notice.author_id)

    changes = data.model_dump(exclude_unset=True)
    notice_service.update_notice(db, notice, changes)

    log_activity(
        db, request,
        user_id=current_user.id,
        action="update_notice",
        entity_type="notice",
        entity_id=notice_id,
        metadata={"fields": sorted(changes)},
    )
    return {"message": "Notice updated successfully"}


# -----------------------------
# Author + Admin: Delete Notice
# -----------------------------
@router.delete("/{notice_id}", response_model=MessageResponse)
def delete_notice(
    notice_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notice = get_notice_or_404(db, notice_id)
    ensure_allowed(current_user, Action.DELETE_NOTICE, owner_id=notice.author_id)

    title = notice.title
    actor_id = current_user.id
    notice_service.delete_notice(db, notice)

    log_activity(
        db, request,
        user_id=actor_id,
        action="delete_notice",
        entity_type="notice",
        entity_id=notice_id,
        metadata={"title": title},
    )
    return {"message": "Notice deleted successfully"}


# -----------------------------
# Admin: Approve Notice
# -----------------------------
@router.post("/{notice_id}/approve", response_model=MessageResponse)
def approve_notice(
    notice_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_capability(Action.APPROVE_NOTICE)),
):
    notice = get_notice_or_404(db, notice_id)
    admin_id = admin.id

    if notice_service.approve_notice(db, notice):
        notify_notice_approved(db, notice)
        log_activity(
            db, request,
            user_id=admin_id,
            action="approve_notice",
            entity_type="notice",
            entity_id=notice_id,
        )
    return {"message": "Notice approved successfully"}


# -----------------------------
# Everyone: Like / Bookmark / Acknowledge
# -----------------------------
@router.post("/{notice_id}/interact", response_model=InteractionResult)
def interact(
    notice_id: int,
    data: InteractionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _get_visible_notice(db, notice_id, current_user)
    user_id = current_user.id

    try:
        action = notice_service.toggle_interaction(
            db,
            user_id=user_id,
            notice_id=notice_id,
            interaction_type=data.type,
        )
    except SQLAlchemyError:
        logger.exception("Interaction %s failed on notice %s for user %s", data.type, notice_id, user_id)
        raise HTTPException(status_code=500, detail="Failed to process interaction")

    return {"action": action}


# -----------------------------
# Comments
# -----------------------------
@router.get("/{notice_id}/comments", response_model=List[CommentListItem])
def list_comments(
    notice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _get_visible_notice(db, notice_id, current_user)

    rows = (
        db.query(Comment, User)
        .outerjoin(User, Comment.user_id == User.id)
        .filter(Comment.notice_id == notice_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )
    return [{"comment": comment, "user": user} for comment, user in rows]


@router.post("/{notice_id}/comments", response_model=CreatedResponse)
def add_comment(
    notice_id: int,
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notice = _get_visible_notice(db, notice_id, current_user)

    try:
        comment = notice_service.add_comment(db, notice, current_user, data.content)
    except SQLAlchemyError:
        logger.exception("Failed to add comment on notice %s", notice_id)
        raise HTTPException(status_code=500, detail="Failed to add comment")

    comment_id = comment.id
    notify_new_comment(db, notice, current_user)
    return {"id": comment_id, "message": "Comment added successfully"}
