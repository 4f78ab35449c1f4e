"""Capability check: (role, action, resource owner) -> allow/deny."""
import enum
from typing import Optional

from fastapi import HTTPException, status


class Action(str, enum.Enum):
    CREATE_NOTICE = "notice:create"
    UPDATE_NOTICE = "notice:update"
    DELETE_NOTICE = "notice:delete"
    APPROVE_NOTICE = "notice:approve"
    MANAGE_USERS = "users:manage"
    VIEW_LOGS = "logs:view"
    VIEW_DASHBOARD = "dashboard:view"
    REPAIR_COUNTERS = "counters:repair"


ROLE_CAPABILITIES: dict[str, frozenset[Action]] = {
    "admin": frozenset(Action),
    "staff": frozenset({Action.CREATE_NOTICE}),
    "student": frozenset(),
}

# Granted to whoever owns the resource, whatever their role
OWNER_CAPABILITIES = frozenset({Action.UPDATE_NOTICE, Action.DELETE_NOTICE})


def is_allowed(
    role: str,
    action: Action,
    actor_id: Optional[int] = None,
    owner_id: Optional[int] = None,
) -> bool:
    if action in ROLE_CAPABILITIES.get(role, frozenset()):
        return True
    if action in OWNER_CAPABILITIES and owner_id is not None:
        return actor_id == owner_id
    return False


def ensure_allowed(user, action: Action, owner_id: Optional[int] = None) -> None:
    if not is_allowed(user.role, action, actor_id=user.id, owner_id=owner_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Permission denied",
        )
