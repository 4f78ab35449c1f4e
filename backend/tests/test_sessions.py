from datetime import timedelta

from noticeboard.models.user_session import UserSession
from noticeboard.services.session_service import (
    authenticate_user,
    create_session,
    purge_expired_sessions,
    resolve_session,
    revoke_session,
)
from noticeboard.utils.clock import ensure_aware_utc, utcnow


def test_create_session_issues_opaque_token_valid_for_seven_days(db, make_user):
    user = make_user("s1@school.edu", "s_one")
    before = utcnow()
    session = create_session(db, user.id)

    assert len(session.session_id) >= 32
    lifetime = ensure_aware_utc(session.expires_at) - before
    assert timedelta(days=6, hours=23) < lifetime <= timedelta(days=7, seconds=5)


def test_resolve_returns_user_for_live_session(db, make_user):
    user = make_user("s2@school.edu", "s_two")
    session = create_session(db, user.id)

    resolved = resolve_session(db, session.session_id)
    assert resolved is not None
    assert resolved.id == user.id


def test_resolve_unknown_or_missing_token_is_absent(db):
    assert resolve_session(db, None) is None
    assert resolve_session(db, "") is None
    assert resolve_session(db, "not-a-session") is None


def test_expired_session_is_inert_before_purge(db, make_user):
    user = make_user("s3@school.edu", "s_three")
    session = create_session(db, user.id, now=utcnow() - timedelta(days=8))

    assert resolve_session(db, session.session_id) is None
    assert db.query(UserSession).count() == 1


def test_resolve_rejects_deleted_and_inactive_users(db, make_user):
    deleted = make_user("s4@school.edu", "s_four")
    inactive = make_user("s5@school.edu", "s_five")
    deleted_session = create_session(db, deleted.id)
    inactive_session = create_session(db, inactive.id)

    deleted.is_deleted = True
    inactive.is_active = False
    db.commit()

    assert resolve_session(db, deleted_session.session_id) is None
    assert resolve_session(db, inactive_session.session_id) is None


def test_user_may_hold_several_sessions(db, make_user):
    user = make_user("s6@school.edu", "s_six")
    first_id = create_session(db, user.id).session_id
    second_id = create_session(db, user.id).session_id

    assert first_id != second_id
    revoke_session(db, first_id)

    assert resolve_session(db, first_id) is None
    assert resolve_session(db, second_id).id == user.id


def test_revoke_is_idempotent(db, make_user):
    user = make_user("s7@school.edu", "s_seven")
    session = create_session(db, user.id)
    token = session.session_id

    revoke_session(db, token)
    revoke_session(db, token)
    revoke_session(db, None)

    assert db.query(UserSession).filter(UserSession.session_id == token).count() == 0


def test_purge_removes_only_expired_rows(db, make_user):
    user = make_user("s8@school.edu", "s_eight")
    create_session(db, user.id, now=utcnow() - timedelta(days=10))
    live = create_session(db, user.id)

    assert purge_expired_sessions(db) == 1
    remaining = db.query(UserSession).all()
    assert [s.session_id for s in remaining] == [live.session_id]


def test_authenticate_user_failures_are_indistinguishable(db, make_user):
    user = make_user("s9@school.edu", "s_nine")

    assert authenticate_user(db, "S9@School.edu ", "secret1").id == user.id
    assert authenticate_user(db, "s9@school.edu", "wrong-password") is None
    assert authenticate_user(db, "nobody@school.edu", "secret1") is None

    user.is_deleted = True
    user.is_active = False
    db.commit()
    assert authenticate_user(db, "s9@school.edu", "secret1") is None
