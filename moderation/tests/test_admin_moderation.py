import uuid
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from audits.models import AuditLog
from comments.models import Comment
from core.models import User
from letterings import storage
from letterings.models import ActorType, Lettering, LetteringStatus, LetteringStatusHistory, Like
from letterings.services import create_lettering, transition_status
from moderation import services as moderation_services
from notifications.models import Notification
from regions.models import City

pytestmark = pytest.mark.django_db


@pytest.fixture
def city():
    return City.objects.create(name="Seoul", country_code="KR")


@pytest.fixture
def owner():
    return User.objects.create_user(email="owner@example.com", password="password123")


@pytest.fixture
def admin():
    return User.objects.create_user(email="admin@example.com", password="password123", is_staff=True, role="ADMIN")


@pytest.fixture
def admin_api(admin):
    c = APIClient()
    c.force_authenticate(admin)
    return c


@pytest.fixture
def deleted_keys(monkeypatch):
    keys = []

    class FakeS3:
        def delete_object(self, Bucket, Key):
            keys.append(Key)

    monkeypatch.setattr(storage, "_client", lambda: FakeS3())
    return keys


def _make(city, user=None, n=0, **extra):
    return create_lettering(
        city=city,
        user=user,
        contributor_tag="walker",
        pin_code="123456",
        image_url=f"http://cdn.local/{n}.jpg",
        image_hash=f"{n:064d}",
        storage_key=f"letterings/2026/01/01/{n}.jpg",
        **extra,
    )


class TestModerationQueue:
    def test_requires_admin(self, owner):
        c = APIClient()
        assert c.get("/api/v1/admin/moderation/").status_code == 401
        c.force_authenticate(owner)
        assert c.get("/api/v1/admin/moderation/").status_code == 403

    def test_all_newest_first_and_status_oldest_first(self, admin_api, city):
        first = _make(city, n=1)
        second = _make(city, n=2)
        approved = _make(city, n=3)
        transition_status(approved, LetteringStatus.APPROVED, reason="ok")
        Lettering.objects.filter(pk=first.pk).update(created_at=timezone.now() - timedelta(hours=2))
        Lettering.objects.filter(pk=second.pk).update(created_at=timezone.now() - timedelta(hours=1))

        body = admin_api.get("/api/v1/admin/moderation/").json()
        assert body["total"] == 3
        assert [i["id"] for i in body["items"]] == [str(approved.id), str(second.id), str(first.id)]

        pending = admin_api.get("/api/v1/admin/moderation/?status=pending").json()
        assert [i["id"] for i in pending["items"]] == [str(first.id), str(second.id)]

    def test_invalid_status(self, admin_api):
        r = admin_api.get("/api/v1/admin/moderation/?status=LOST")
        assert r.status_code == 400
        assert r.json() == {"error": "status must be one of ALL, PENDING, APPROVED, REJECTED, REPORTED"}

    def test_limit_clamp(self, admin_api):
        body = admin_api.get("/api/v1/admin/moderation/?limit=999").json()
        assert body["limit"] == 200


class TestModerationCheck:
    def test_preview_with_level(self, admin_api):
        r = admin_api.post("/api/v1/admin/moderation/check/", {"content": "you idiot, shit", "level": "strict"}, format="json")
        assert r.status_code == 200
        body = r.json()
        assert body["level"] == "strict"
        assert body["status"] == "HIDDEN"
        assert body["moderation_score"] == 65

    def test_default_level(self, admin_api):
        body = admin_api.post("/api/v1/admin/moderation/check/", {"content": "you idiot, shit"}, format="json").json()
        assert body["level"] == "standard" and body["status"] == "VISIBLE"


class TestLetteringActions:
    def test_approve(self, admin_api, admin, city, owner):
        lettering = _make(city, owner)
        r = admin_api.post(f"/api/v1/admin/letterings/{lettering.id}/approve/")
        assert r.status_code == 204

        lettering.refresh_from_db()
        assert lettering.status == LetteringStatus.APPROVED
        assert lettering.moderation_reason == "Approved by moderation"
        assert lettering.moderated_by == admin.email

        row = lettering.status_history.latest("created_at")
        assert row.actor_type == ActorType.ADMIN and row.actor_sub == admin.email

        log = AuditLog.objects.get(action="APPROVE_LETTERING")
        assert log.lettering_id == lettering.id and log.actor == admin.email
        assert log.metadata["country_code"] == "KR"

        n = Notification.objects.get(user=owner)
        assert n.type == "MODERATION_APPROVED" and n.title == "Your upload was approved"
        assert n.metadata == {"lettering_id": str(lettering.id)}

    def test_reject_default_and_custom_reason(self, admin_api, city):
        a = _make(city, n=1)
        b = _make(city, n=2)

        assert admin_api.post(f"/api/v1/admin/letterings/{a.id}/reject/", {}, format="json").status_code == 204
        assert admin_api.post(f"/api/v1/admin/letterings/{b.id}/reject/", {"reason": "Not lettering"}, format="json").status_code == 204

        a.refresh_from_db()
        b.refresh_from_db()
        assert a.status == b.status == LetteringStatus.REJECTED
        assert a.moderation_reason == "Rejected by admin"
        assert b.moderation_reason == "Not lettering"
        # 익명 업로드는 알림 대상 없음
        assert not Notification.objects.exists()

    def test_clear_reports(self, admin_api, city, owner):
        lettering = _make(city, owner, report_count=3, report_reasons=["a", "b", "c"])
        transition_status(lettering, LetteringStatus.REPORTED, reason="threshold")

        assert admin_api.post(f"/api/v1/admin/letterings/{lettering.id}/clear-reports/").status_code == 204
        lettering.refresh_from_db()
        assert lettering.status == LetteringStatus.APPROVED
        assert lettering.report_count == 0 and lettering.report_reasons == []
        assert lettering.moderation_reason == "Reports cleared after moderator review"
        assert AuditLog.objects.get(action="CLEAR_REPORTS").metadata["cleared_reports"] == 3
        assert Notification.objects.filter(user=owner, type="REPORTS_CLEARED").exists()

    def test_delete(self, admin_api, city, owner, deleted_keys, django_capture_on_commit_callbacks):
        lettering = _make(city, owner)
        Comment.objects.create(lettering=lettering, content="hi")
        Like.objects.create(lettering=lettering, ip_hash="x")

        with django_capture_on_commit_callbacks(execute=True):
            assert admin_api.delete(f"/api/v1/admin/letterings/{lettering.id}/").status_code == 204
        assert not Lettering.objects.exists()
        assert not LetteringStatusHistory.objects.exists()
        assert not Comment.objects.exists()
        assert deleted_keys == [lettering.storage_key]

        log = AuditLog.objects.get(action="DELETE_LETTERING")
        assert log.lettering_id == lettering.id
        assert Notification.objects.get(user=owner).type == "MODERATION_DELETED"

    def test_delete_rollback_keeps_stored_image(self, admin, city, owner, deleted_keys, monkeypatch, django_capture_on_commit_callbacks):
        lettering = _make(city, owner)

        def broken_audit(**kwargs):
            raise RuntimeError("audit store unavailable")

        monkeypatch.setattr(moderation_services, "write_audit_log", broken_audit)
        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(RuntimeError):
                moderation_services.delete_lettering(lettering.id, admin=admin)

        assert Lettering.objects.filter(pk=lettering.pk).exists()
        assert deleted_keys == []
        assert not Notification.objects.exists()

    def test_missing_lettering(self, admin_api):
        for url in ("approve/", "reject/", "clear-reports/"):
            r = admin_api.post(f"/api/v1/admin/letterings/{uuid.uuid4()}/{url}")
            assert r.status_code == 404
            assert r.json() == {"error": "Lettering not found"}
        assert admin_api.delete(f"/api/v1/admin/letterings/{uuid.uuid4()}/").status_code == 404


class TestBulk:
    def test_bulk_approve_with_failures(self, admin_api, city):
        items = [_make(city, n=i) for i in range(3)]
        missing = str(uuid.uuid4())

        r = admin_api.post("/api/v1/admin/letterings/bulk/", {"ids": [str(i.id) for i in items] + [missing], "action": "approve"}, format="json")
        assert r.status_code == 200
        assert r.json() == {"requested": 4, "processed": 3, "failed": 1, "failed_items": [{"id": missing, "error": "Lettering not found"}]}

        assert Lettering.objects.filter(status=LetteringStatus.APPROVED, moderation_reason="Approved by bulk moderation").count() == 3
        assert AuditLog.objects.filter(action="BULK_APPROVE_LETTERING").count() == 3

    def test_bulk_keep_clears_reports(self, admin_api, city):
        lettering = _make(city, report_count=5, report_reasons=["x"] * 5)
        transition_status(lettering, LetteringStatus.REPORTED, reason="threshold")

        r = admin_api.post("/api/v1/admin/letterings/bulk/", {"ids": [str(lettering.id)], "action": "keep"}, format="json")
        assert r.json()["processed"] == 1
        lettering.refresh_from_db()
        assert lettering.status == LetteringStatus.APPROVED and lettering.report_count == 0
        assert AuditLog.objects.filter(action="BULK_CLEAR_REPORTS").count() == 1

    def test_bulk_delete(self, admin_api, city, deleted_keys, django_capture_on_commit_callbacks):
        items = [_make(city, n=i) for i in range(2)]
        with django_capture_on_commit_callbacks(execute=True):
            r = admin_api.post("/api/v1/admin/letterings/bulk/", {"ids": [str(i.id) for i in items], "action": "delete"}, format="json")
        assert r.json()["processed"] == 2
        assert not Lettering.objects.exists()
        assert len(deleted_keys) == 2

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"ids": [], "action": "approve"}, "ids cannot be empty"),
            ({"ids": ["x"], "action": "archive"}, "action must be one of approve, reject, delete, keep"),
            ({"ids": [str(uuid.uuid4()) for _ in range(201)], "action": "approve"}, "bulk actions are limited to 200 items"),
        ],
    )
    def test_validation(self, admin_api, payload, message):
        r = admin_api.post("/api/v1/admin/letterings/bulk/", payload, format="json")
        assert r.status_code == 400
        assert r.json() == {"error": message}


class TestStats:
    def test_counts(self, admin_api, city):
        City.objects.create(name="Busan", country_code="KR")
        a = _make(city, n=1)
        b = _make(city, n=2)
        _make(city, n=3)
        transition_status(a, LetteringStatus.APPROVED, reason="ok")
        transition_status(b, LetteringStatus.REJECTED, reason="no")
        Like.objects.create(lettering=a, ip_hash="ip")
        Comment.objects.create(lettering=a, content="hello")

        assert admin_api.get("/api/v1/admin/stats/").json() == {
            "total_uploads": 3,
            "pending_approvals": 1,
            "approved": 1,
            "rejected": 1,
            "total_cities": 2,
            "total_likes": 1,
            "total_comments": 1,
        }
