import uuid

import pytest
from rest_framework.test import APIClient

from audits.models import AuditLog
from comments.models import Comment, CommentStatus
from core.models import User
from letterings.models import Lettering
from letterings.services import create_lettering
from notifications.models import Notification
from regions.models import City, RegionPolicy

pytestmark = pytest.mark.django_db


@pytest.fixture
def city():
    return City.objects.create(name="Seoul", country_code="KR")


@pytest.fixture
def lettering(city):
    return create_lettering(city=city, contributor_tag="walker", pin_code="123456", image_url="http://cdn.local/a.jpg", image_hash="a" * 64)


@pytest.fixture
def commenter():
    return User.objects.create_user(email="commenter@example.com", password="password123", display_name="Reader")


@pytest.fixture
def api(commenter):
    c = APIClient()
    c.force_authenticate(commenter)
    return c


@pytest.fixture
def admin():
    return User.objects.create_user(email="admin@example.com", password="password123", is_staff=True, role="ADMIN")


@pytest.fixture
def admin_api(admin):
    c = APIClient()
    c.force_authenticate(admin)
    return c


def _url(lettering):
    return f"/api/v1/letterings/{lettering.id}/comments/"


def _comment(lettering, user=None, content="nice", **extra):
    return Comment.objects.create(lettering=lettering, user=user, content=content, **extra)


class TestCreateComment:
    def test_clean_comment_is_visible(self, api, lettering):
        r = api.post(_url(lettering), {"content": "  Beautiful brush script  "}, format="json")
        assert r.status_code == 201, r.content
        body = r.json()
        assert body["content"] == "Beautiful brush script"
        assert body["status"] == "VISIBLE"
        assert body["commenter_name"] == "Reader"

        lettering.refresh_from_db()
        assert lettering.comments_count == 1

    def test_severe_comment_is_hidden_and_not_counted(self, api, lettering):
        r = api.post(_url(lettering), {"content": "go die"}, format="json")
        assert r.status_code == 201
        comment = Comment.objects.get(pk=r.json()["id"])
        assert comment.status == CommentStatus.HIDDEN
        assert comment.auto_flagged is True
        assert comment.moderated_by == "AUTO_MODERATOR"
        assert comment.moderated_at is not None
        assert "SEVERE:go die" in comment.moderation_flags

        lettering.refresh_from_db()
        assert lettering.comments_count == 0

    def test_strict_region_hides_moderate_score(self, api, lettering):
        RegionPolicy.objects.create(country_code="KR", auto_moderation_level="strict")
        # SEXUAL(55) + URL(25) = 80 -> 기본 규칙으로도 숨김, HARASSMENT(35)+PROFANITY(30)=65 -> strict에서만 숨김
        r = api.post(_url(lettering), {"content": "you idiot, this is shit"}, format="json")
        comment = Comment.objects.get(pk=r.json()["id"])
        assert comment.moderation_score == 65
        assert comment.status == CommentStatus.HIDDEN
        assert comment.review_priority >= 85

    @pytest.mark.parametrize(
        "content,message",
        [("   ", "Comment cannot be empty"), ("x" * 501, "Comment must be 500 characters or less")],
    )
    def test_content_rules(self, api, lettering, content, message):
        r = api.post(_url(lettering), {"content": content}, format="json")
        assert r.status_code == 400
        assert r.json() == {"error": message}

    def test_missing_lettering(self, api):
        r = api.post(f"/api/v1/letterings/{uuid.uuid4()}/comments/", {"content": "hello"}, format="json")
        assert r.status_code == 404
        assert r.json() == {"error": "Lettering not found"}

    def test_region_gate(self, api, lettering):
        RegionPolicy.objects.create(country_code="KR", comments_enabled=False)
        r = api.post(_url(lettering), {"content": "hello"}, format="json")
        assert r.status_code == 403
        assert r.json() == {"error": "Comments are disabled for this region"}
        assert not Comment.objects.exists()

    def test_rate_limit(self, api, lettering):
        assert api.post(_url(lettering), {"content": "first"}, format="json").status_code == 201
        r = api.post(_url(lettering), {"content": "second"}, format="json")
        assert r.status_code == 429
        assert r.json() == {"error": "Please wait before commenting again"}

    def test_requires_auth(self, lettering):
        assert APIClient().post(_url(lettering), {"content": "hi"}, format="json").status_code == 401

    def test_created_event_published_after_commit(self, api, lettering, monkeypatch, django_capture_on_commit_callbacks):
        captured = []
        monkeypatch.setattr("comments.tasks.publish_event", lambda e, d, key=None: captured.append((e, d, key)))

        with django_capture_on_commit_callbacks(execute=True):
            r = api.post(_url(lettering), {"content": "hello there"}, format="json")

        assert captured == [
            (
                "CommentCreated",
                {"comment_id": r.json()["id"], "lettering_id": str(lettering.id), "author_id": r.json()["user_id"], "status": "VISIBLE", "needs_review": False},
                "comment.created",
            )
        ]


class TestListComments:
    def test_visible_only_newest_first(self, lettering, commenter):
        _comment(lettering, commenter, "first")
        _comment(lettering, None, "anon")
        _comment(lettering, commenter, "hidden", status=CommentStatus.HIDDEN)

        body = APIClient().get(_url(lettering)).json()
        assert body["total"] == 2
        assert [i["content"] for i in body["items"]] == ["anon", "first"]
        assert body["items"][0]["commenter_name"] == "Anonymous"

    def test_missing_lettering(self):
        r = APIClient().get(f"/api/v1/letterings/{uuid.uuid4()}/comments/")
        assert r.status_code == 404


class TestAdminComments:
    def test_admin_only(self, api):
        assert api.get("/api/v1/admin/comments/").status_code == 403

    def test_priority_sort_and_filters(self, admin_api, lettering, commenter):
        low = _comment(lettering, commenter, "ok", moderation_score=10, review_priority=10, needs_review=True)
        high = _comment(lettering, commenter, "bad", moderation_score=90, review_priority=100, auto_flagged=True, needs_review=True, status=CommentStatus.HIDDEN)
        clean = _comment(lettering, None, "fine")

        body = admin_api.get("/api/v1/admin/comments/").json()
        assert [i["id"] for i in body["items"]] == [str(high.id), str(low.id), str(clean.id)]
        assert body["limit"] == 50

        assert admin_api.get("/api/v1/admin/comments/?status=hidden").json()["total"] == 1
        assert admin_api.get("/api/v1/admin/comments/?needs_review=true").json()["total"] == 2
        assert admin_api.get("/api/v1/admin/comments/?min_score=50").json()["total"] == 1
        assert admin_api.get("/api/v1/admin/comments/?q=reader").json()["total"] == 2
        assert [i["id"] for i in admin_api.get("/api/v1/admin/comments/?sort=newest").json()["items"]][0] == str(clean.id)

    def test_invalid_filters(self, admin_api):
        r = admin_api.get("/api/v1/admin/comments/?status=GONE")
        assert r.status_code == 400 and r.json() == {"error": "status must be one of ALL, VISIBLE, HIDDEN"}
        r = admin_api.get("/api/v1/admin/comments/?sort=random")
        assert r.status_code == 400 and r.json() == {"error": "sort must be one of priority, newest, score"}

    def test_hide_and_restore(self, admin_api, admin, lettering, commenter):
        comment = _comment(lettering, commenter, "hello", needs_review=True)
        Lettering.objects.filter(pk=lettering.pk).update(comments_count=1)

        r = admin_api.post(f"/api/v1/admin/comments/{comment.id}/hide/", {}, format="json")
        assert r.status_code == 200
        assert r.json()["status"] == "HIDDEN"
        assert r.json()["moderation_reason"] == "Hidden by moderation"
        assert r.json()["moderated_by"] == admin.email
        assert r.json()["needs_review"] is False
        lettering.refresh_from_db()
        assert lettering.comments_count == 0

        log = AuditLog.objects.get(action="HIDE_COMMENT")
        assert log.target_id == str(comment.id) and log.lettering_id == lettering.id
        assert log.metadata["country_code"] == "KR"
        n = Notification.objects.get(user=commenter, type="COMMENT_HIDDEN")
        assert n.title == "Your comment was hidden"

        r = admin_api.post(f"/api/v1/admin/comments/{comment.id}/restore/")
        assert r.status_code == 200
        assert r.json()["status"] == "VISIBLE" and r.json()["moderated_by"] is None
        assert AuditLog.objects.filter(action="RESTORE_COMMENT").count() == 1
        assert Notification.objects.filter(user=commenter, type="COMMENT_RESTORED").exists()
        lettering.refresh_from_db()
        assert lettering.comments_count == 1

    def test_delete(self, admin_api, lettering, commenter):
        comment = _comment(lettering, commenter)
        r = admin_api.delete(f"/api/v1/admin/comments/{comment.id}/")
        assert r.status_code == 204
        assert not Comment.objects.exists()
        assert AuditLog.objects.filter(action="DELETE_COMMENT", target_id=str(comment.id)).exists()
        assert Notification.objects.filter(user=commenter, type="COMMENT_DELETED").exists()

    def test_missing_comment(self, admin_api):
        r = admin_api.post(f"/api/v1/admin/comments/{uuid.uuid4()}/hide/")
        assert r.status_code == 404
        assert r.json() == {"error": "Comment not found"}

    def test_bulk_hide_reports_partial_failures(self, admin_api, lettering, commenter):
        comments = [_comment(lettering, commenter, f"c{i}") for i in range(3)]
        missing = str(uuid.uuid4())
        ids = [str(c.id) for c in comments] + [missing, "not-a-uuid"]

        r = admin_api.post("/api/v1/admin/comments/bulk/", {"ids": ids, "action": "hide"}, format="json")
        assert r.status_code == 200
        body = r.json()
        assert body["requested"] == 5
        assert body["processed"] == 3
        assert body["failed"] == 2
        assert {f["id"] for f in body["failed_items"]} == {missing, "not-a-uuid"}
        assert all(f["error"] == "Comment not found" for f in body["failed_items"])
        assert AuditLog.objects.filter(action="BULK_HIDE_COMMENT").count() == 3
        assert Comment.objects.filter(status=CommentStatus.HIDDEN).count() == 3

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"ids": [], "action": "hide"}, "ids cannot be empty"),
            ({"ids": ["x"], "action": "nuke"}, "action must be one of hide, restore, delete"),
            ({"ids": [str(uuid.uuid4()) for _ in range(201)], "action": "delete"}, "bulk actions are limited to 200 comments"),
        ],
    )
    def test_bulk_validation(self, admin_api, payload, message):
        r = admin_api.post("/api/v1/admin/comments/bulk/", payload, format="json")
        assert r.status_code == 400
        assert r.json() == {"error": message}
