import uuid

import pytest
from rest_framework.test import APIClient

from core.models import User
from notifications.models import Notification
from notifications.services import CATALOGUE, notify_comment_owner, notify_lettering_owner
from notifications.tasks import notify_user

pytestmark = pytest.mark.django_db


# ---------- Fixtures ----------
@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def users():
    a = User.objects.create_user(email="a@example.com", password="password123")
    b = User.objects.create_user(email="b@example.com", password="password123")
    return a, b


@pytest.fixture
def auth_client(client, users):
    u, _ = users
    client.force_authenticate(u)
    return client, u


def _mk(user, type_=Notification.Type.MODERATION_APPROVED, **extra):
    title, body = CATALOGUE[type_]
    return Notification.objects.create(user=user, type=type_, title=title, body=body, **extra)


# =======================
# Notifications API
# =======================
class TestNotificationsAPI:
    def test_list_envelope_with_unread(self, auth_client, users):
        client, u = auth_client
        _, other = users
        _mk(u)
        _mk(u, is_read=True)
        _mk(other)

        r = client.get("/api/v1/me/notifications/")
        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 2
        assert body["unread"] == 1
        assert body["limit"] == 20 and body["offset"] == 0
        assert {item["type"] for item in body["items"]} == {"MODERATION_APPROVED"}

    def test_list_limit_clamped(self, auth_client):
        client, _ = auth_client
        body = client.get("/api/v1/me/notifications/", {"limit": 1000}).json()
        assert body["limit"] == 100

    def test_requires_auth(self, client):
        assert client.get("/api/v1/me/notifications/").status_code == 401

    def test_mark_single_read(self, auth_client):
        client, u = auth_client
        n = _mk(u)

        r = client.post(f"/api/v1/me/notifications/{n.id}/read/")
        assert r.status_code == 200 and r.json()["is_read"] is True
        n.refresh_from_db()
        assert n.is_read is True

    def test_mark_read_not_owned_is_404(self, auth_client, users):
        client, _ = auth_client
        _, other = users
        n = _mk(other)

        r = client.post(f"/api/v1/me/notifications/{n.id}/read/")
        assert r.status_code == 404
        assert r.json() == {"error": "Notification not found"}

        r2 = client.post(f"/api/v1/me/notifications/{uuid.uuid4()}/read/")
        assert r2.status_code == 404

    def test_read_all(self, auth_client, users):
        client, u = auth_client
        _, other = users
        _mk(u)
        _mk(u, type_=Notification.Type.COMMENT_HIDDEN)
        _mk(other)

        r = client.post("/api/v1/me/notifications/read-all/")
        assert r.status_code == 200 and r.json() == {"updated": 2}
        assert Notification.objects.filter(user=other, is_read=False).count() == 1


# =======================
# Celery task / catalogue
# =======================
class TestNotifyUser:
    def test_notify_user_creates_row(self, users):
        a, _ = users
        nid = notify_user(str(a.id), "MODERATION_REJECTED", "t", "b", {"lettering_id": "x"})
        n = Notification.objects.get(id=nid)
        assert n.user == a and n.metadata == {"lettering_id": "x"}

    def test_notify_user_without_account_is_noop(self):
        assert notify_user(None, "MODERATION_APPROVED", "t", "b", {}) is None
        assert notify_user(str(uuid.uuid4()), "MODERATION_APPROVED", "t", "b", {}) is None
        assert Notification.objects.count() == 0

    def test_lettering_owner_catalogue(self, users):
        a, _ = users

        class _Lettering:
            id = uuid.uuid4()
            user_id = a.id

        notify_lettering_owner(_Lettering, Notification.Type.REPORTS_CLEARED)
        n = Notification.objects.get(user=a)
        assert n.type == "REPORTS_CLEARED"
        assert n.title == "Reports cleared on your upload"
        assert n.body == "Moderator reviewed and cleared reports on your lettering contribution."
        assert n.metadata == {"lettering_id": str(_Lettering.id)}

    def test_comment_owner_catalogue_carries_reason(self, users):
        a, _ = users

        class _Comment:
            id = uuid.uuid4()
            user_id = a.id

        notify_comment_owner(_Comment, Notification.Type.COMMENT_HIDDEN, reason="spam")
        n = Notification.objects.get(user=a)
        assert n.title == "Your comment was hidden"
        assert n.metadata == {"comment_id": str(_Comment.id), "reason": "spam"}

    def test_anonymous_owner_is_skipped(self):
        class _Lettering:
            id = uuid.uuid4()
            user_id = None

        notify_lettering_owner(_Lettering, Notification.Type.MODERATION_APPROVED)
        assert Notification.objects.count() == 0
