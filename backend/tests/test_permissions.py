import pytest
from fastapi import HTTPException

from noticeboard.core.permissions import Action, ensure_allowed, is_allowed


@pytest.mark.parametrize("action", list(Action))
def test_admin_holds_every_capability(action):
    assert is_allowed("admin", action, actor_id=1, owner_id=2)


def test_staff_can_create_but_not_approve():
    assert is_allowed("staff", Action.CREATE_NOTICE, actor_id=5)
    assert not is_allowed("staff", Action.APPROVE_NOTICE, actor_id=5)
    assert not is_allowed("staff", Action.MANAGE_USERS, actor_id=5)


def test_student_cannot_create_notices():
    assert not is_allowed("student", Action.CREATE_NOTICE, actor_id=9)


@pytest.mark.parametrize("action", [Action.UPDATE_NOTICE, Action.DELETE_NOTICE])
def test_owner_may_update_and_delete_own_notice(action):
    assert is_allowed("staff", action, actor_id=3, owner_id=3)
    assert not is_allowed("staff", action, actor_id=3, owner_id=4)
    assert not is_allowed("staff", action, actor_id=3)


def test_ownership_does_not_grant_approval():
    assert not is_allowed("staff", Action.APPROVE_NOTICE, actor_id=3, owner_id=3)


def test_unknown_role_is_denied():
    assert not is_allowed("guest", Action.CREATE_NOTICE, actor_id=1)


def test_ensure_allowed_raises_403():
    class Actor:
        id = 7
        role = "student"

    with pytest.raises(HTTPException) as exc_info:
        ensure_allowed(Actor(), Action.DELETE_NOTICE, owner_id=8)
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Permission denied"
