from noticeboard.models.interaction import Interaction
from noticeboard.models.notice import Notice
from noticeboard.services import notice_service
from noticeboard.services.notice_service import reconcile_counters, toggle_interaction


def _like_count(client, notice_id):
    return client.get(f"/notices/{notice_id}").json()["notice"]["likeCount"]


def test_like_toggle_round_trip(admin, student, create_notice, db):
    admin_client, _ = admin
    student_client, student_user = student
    notice_id = create_notice(admin_client)

    assert _like_count(student_client, notice_id) == 0

    added = student_client.post(f"/notices/{notice_id}/interact", json={"type": "like"})
    assert added.status_code == 200
    assert added.json() == {"action": "added"}
    assert _like_count(student_client, notice_id) == 1

    removed = student_client.post(f"/notices/{notice_id}/interact", json={"type": "like"})
    assert removed.json() == {"action": "removed"}
    assert _like_count(student_client, notice_id) == 0

    likes = db.query(Interaction).filter(
        Interaction.notice_id == notice_id,
        Interaction.user_id == student_user["id"],
        Interaction.type == "like",
    ).count()
    assert likes == 0


def test_likes_from_several_users_accumulate(register_user, admin, student, create_notice):
    admin_client, _ = admin
    student_client, _ = student
    other_client, _ = register_user("second@school.edu", "student_two", "student")
    notice_id = create_notice(admin_client)

    student_client.post(f"/notices/{notice_id}/interact", json={"type": "like"})
    other_client.post(f"/notices/{notice_id}/interact", json={"type": "like"})

    assert _like_count(admin_client, notice_id) == 2


def test_bookmark_and_acknowledge_do_not_touch_like_count(admin, student, create_notice):
    admin_client, _ = admin
    student_client, _ = student
    notice_id = create_notice(admin_client)

    for interaction_type in ("bookmark", "acknowledge"):
        response = student_client.post(f"/notices/{notice_id}/interact", json={"type": interaction_type})
        assert response.json() == {"action": "added"}

    detail = student_client.get(f"/notices/{notice_id}").json()
    assert detail["notice"]["likeCount"] == 0
    assert set(detail["userInteractions"]) == {"bookmark", "acknowledge", "view"}


def test_invalid_interaction_type_is_rejected(admin, student, create_notice):
    admin_client, _ = admin
    student_client, _ = student
    notice_id = create_notice(admin_client)

    for bad in ("view", "love"):
        response = student_client.post(f"/notices/{notice_id}/interact", json={"type": bad})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid interaction type"}


def test_interacting_with_hidden_notice_is_404(staff, student, create_notice):
    staff_client, _ = staff
    student_client, _ = student
    pending = create_notice(staff_client)

    response = student_client.post(f"/notices/{pending}/interact", json={"type": "like"})
    assert response.status_code == 404
    assert student_client.post("/notices/9999/interact", json={"type": "like"}).status_code == 404


def test_toggle_service_keeps_row_and_counter_together(db, make_user):
    author = make_user("author@school.edu", "author", role="admin")
    reader = make_user("reader@school.edu", "reader")
    notice = Notice(title="T", content="C", category="general", author_id=author.id, is_approved=True)
    db.add(notice)
    db.commit()

    assert toggle_interaction(db, user_id=reader.id, notice_id=notice.id, interaction_type="like") == "added"
    db.refresh(notice)
    assert notice.like_count == 1

    assert toggle_interaction(db, user_id=reader.id, notice_id=notice.id, interaction_type="like") == "removed"
    db.refresh(notice)
    assert notice.like_count == 0
    assert db.query(Interaction).count() == 0


def test_stale_unlike_does_not_decrement_twice(db, session_factory, make_user, monkeypatch):
    author = make_user("author2@school.edu", "author_two", role="admin")
    reader = make_user("reader2@school.edu", "reader_two")
    notice = Notice(title="T", content="C", category="general", author_id=author.id, is_approved=True)
    db.add(notice)
    db.commit()
    notice_id, reader_id = notice.id, reader.id
    toggle_interaction(db, user_id=reader_id, notice_id=notice_id, interaction_type="like")

    # a second request read the like row before the first one removed it
    other = session_factory()
    stale = other.query(Interaction).filter(Interaction.notice_id == notice_id).one()

    assert toggle_interaction(db, user_id=reader_id, notice_id=notice_id, interaction_type="like") == "removed"

    monkeypatch.setattr(notice_service, "_find_interaction", lambda *args, **kwargs: stale)
    assert toggle_interaction(other, user_id=reader_id, notice_id=notice_id, interaction_type="like") == "removed"
    other.close()

    db.expire_all()
    assert db.get(Notice, notice_id).like_count == 0
    assert db.query(Interaction).count() == 0


def test_comments_are_listed_and_counted(admin, staff, student, create_notice):
    admin_client, _ = admin
    student_client, student_user = student
    notice_id = create_notice(admin_client)

    first = student_client.post(f"/notices/{notice_id}/comments", json={"content": "  When is it?  "})
    assert first.status_code == 200
    assert first.json()["message"] == "Comment added successfully"
    student_client.post(f"/notices/{notice_id}/comments", json={"content": "Found it"})

    comments = student_client.get(f"/notices/{notice_id}/comments").json()
    assert [c["comment"]["content"] for c in comments] == ["Found it", "When is it?"]
    assert comments[0]["user"]["id"] == student_user["id"]

    assert student_client.get(f"/notices/{notice_id}").json()["notice"]["commentCount"] == 2


def test_empty_comment_is_rejected(admin, student, create_notice):
    admin_client, _ = admin
    student_client, _ = student
    notice_id = create_notice(admin_client)

    response = student_client.post(f"/notices/{notice_id}/comments", json={"content": "   "})
    assert response.status_code == 400
    assert response.json() == {"error": "Comment content is required"}


def test_reconcile_repairs_drifted_counters(admin, student, create_notice, db):
    admin_client, _ = admin
    student_client, _ = student
    notice_id = create_notice(admin_client)
    untouched = create_notice(admin_client, title="Quiet notice")

    student_client.post(f"/notices/{notice_id}/interact", json={"type": "like"})
    student_client.post(f"/notices/{notice_id}/comments", json={"content": "Noted"})

    db.query(Notice).filter(Notice.id == notice_id).update({"like_count": 7, "comment_count": 0})
    db.commit()

    assert reconcile_counters(db) == 1
    db.expire_all()
    repaired = db.get(Notice, notice_id)
    assert repaired.like_count == 1
    assert repaired.comment_count == 1
    assert db.get(Notice, untouched).like_count == 0

    assert reconcile_counters(db) == 0


def test_author_is_notified_on_approval_and_comment(admin, staff, student, create_notice):
    admin_client, _ = admin
    staff_client, _ = staff
    student_client, _ = student
    notice_id = create_notice(staff_client)

    admin_client.post(f"/notices/{notice_id}/approve")
    student_client.post(f"/notices/{notice_id}/comments", json={"content": "Thanks"})
    staff_client.post(f"/notices/{notice_id}/comments", json={"content": "You're welcome"})

    notifications = staff_client.get("/notifications/my").json()
    assert sorted(n["type"] for n in notifications) == ["comment", "notice"]
    assert all(n["noticeId"] == notice_id for n in notifications)
    assert staff_client.get("/notifications/unread-count").json() == {"unreadCount": 2}

    first_id = notifications[0]["id"]
    assert staff_client.patch(f"/notifications/{first_id}/read").status_code == 200
    assert staff_client.get("/notifications/unread-count").json() == {"unreadCount": 1}
    assert student_client.patch(f"/notifications/{first_id}/read").status_code == 404

    staff_client.patch("/notifications/read-all")
    assert staff_client.get("/notifications/my", params={"unreadOnly": "true"}).json() == []
