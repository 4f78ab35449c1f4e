import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from noticeboard.core.dependencies import get_current_admin, require_capability
from noticeboard.core.permissions import Action
from noticeboard.core.validation import get_user_or_404
from noticeboard.database.session import get_db
from noticeboard.models.activity_log import ActivityLog
from noticeboard.models.user import User
from noticeboard.schemas.common import CreatedResponse, MessageResponse
from noticeboard.schemas.notice import ReconcileResult
from noticeboard.schemas.user import AdminUserCreate, AdminUserUpdate, UserListResponse
from noticeboard.services import admin_service
from noticeboard.services.activity_service import log_activity
from noticeboard.services.notice_service import reconcile_counters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


# ================= USERS =================
@router.get("/users", response_model=UserListResponse)
def get_users(
    role: Optional[str] = None,
    search: Optional[str] = None,
    include_deleted: bool = Query(default=False, alias="includeDeleted"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    users, total = admin_service.list_users(
        db,
        role=role,
        search=search,
        include_deleted=include_deleted,
        page=page,
        limit=limit,
    )
    return {"users": users, "total": total, "page": page, "limit": limit}


@router.post("/users", response_model=CreatedResponse)
def create_user(
    payload: AdminUserCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    admin_id = admin.id
    try:
        user = admin_service.create_user(
            db,
            email=payload.email,
            username=payload.username,
            password=payload.password,
            full_name=payload.full_name,
            role=payload.role,
            department=payload.department,
            is_verified=True,
        )
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email or username already exists")

    user_id = user.id
    log_activity(
        db, request,
        user_id=admin_id,
        action="create_user",
        entity_type="user",
        entity_id=user_id,
        metadata={"role": payload.role},
    )
    return {"id": user_id, "message": "User created successfully"}


@router.put("/users/{user_id}", response_model=MessageResponse)
def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    admin_id = admin.id
    user = get_user_or_404(db, user_id)
    changes = payload.model_dump(exclude_unset=True)
    admin_service.update_user(db, user, changes)

    log_activity(
        db, request,
        user_id=admin_id,
        action="update_user",
        entity_type="user",
        entity_id=user_id,
        metadata={"fields": sorted(changes)},
    )
    return {"message": "User updated successfully"}


@router.delete("/users/{user_id}", response_model=MessageResponse)
def soft_delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    admin_id = admin.id
    if user_id == admin_id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")

    user = get_user_or_404(db, user_id)
    admin_service.soft_delete_user(db, user)

    log_activity(db, request, user_id=admin_id, action="delete_user", entity_type="user", entity_id=user_id)
    return {"message": "User deleted successfully"}


@router.post("/users/{user_id}/restore", response_model=MessageResponse)
def restore_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    admin_id = admin.id
    user = get_user_or_404(db, user_id)
    admin_service.restore_user(db, user)

    log_activity(db, request, user_id=admin_id, action="restore_user", entity_type="user", entity_id=user_id)
    return {"message": "User restored successfully"}


@router.delete("/users/{user_id}/permanent", response_model=MessageResponse)
def permanently_delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    admin_id = admin.id
    user = get_user_or_404(db, user_id)
    email = user.email

    try:
        repaired = admin_service.purge_user(db, user)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Permanent delete failed for user %s", user_id)
        raise HTTPException(status_code=500, detail="Failed to permanently delete user")

    log_activity(
        db, request,
        user_id=admin_id,
        action="permanent_delete_user",
        entity_type="user",
        entity_id=user_id,
        metadata={"email": email, "countersRepaired": repaired},
    )
    return {"message": "User permanently deleted"}


# ================= AUDIT + DASHBOARD =================
@router.get("/logs")
def get_logs(
    action: Optional[str] = None,
    user_id: Optional[int] = Query(default=None, alias="userId"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: User = Depends(require_capability(Action.VIEW_LOGS)),
):
    query = db.query(ActivityLog, User).outerjoin(User, ActivityLog.user_id == User.id)
    if action:
        query = query.filter(ActivityLog.action == action)
    if user_id is not None:
        query = query.filter(ActivityLog.user_id == user_id)

    rows = (
        query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return [admin_service.log_entry_payload(log, user) for log, user in rows]


@router.get("/dashboard")
def get_dashboard(
    db: Session = Depends(get_db),
    admin: User = Depends(require_capability(Action.VIEW_DASHBOARD)),
):
    return admin_service.dashboard_stats(db)


# ================= COUNTER REPAIR =================
@router.post("/notices/reconcile", response_model=ReconcileResult)
def reconcile_notice_counters(
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_capability(Action.REPAIR_COUNTERS)),
):
    admin_id = admin.id
    repaired = reconcile_counters(db)
    log_activity(
        db, request,
        user_id=admin_id,
        action="reconcile_counters",
        entity_type="notice",
        metadata={"repaired": repaired},
    )
    return {"repaired": repaired}
