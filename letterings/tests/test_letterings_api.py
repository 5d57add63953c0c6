import uuid

import pytest
import redis
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

from core.models import User
from letterings import services as lettering_services
from letterings import storage
from letterings.ml import process_ml_job
from letterings.models import Lettering, LetteringMetadataHistory, LetteringStatus, Like
from letterings.services import create_lettering, transition_status
from regions.models import City, RegionPolicy

pytestmark = pytest.mark.django_db

UPLOAD_URL = "/api/v1/letterings/upload/"


class FakeS3:
    def __init__(self):
        self.objects = {}
        self.deleted = []

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[Key] = Body

    def delete_object(self, Bucket, Key):
        self.deleted.append(Key)


class FakeQueue:
    def __init__(self, fail=False):
        self.jobs = []
        self.fail = fail

    def enqueue(self, lettering_id, image_url):
        if self.fail:
            raise redis.ConnectionError("down")
        self.jobs.append({"lettering_id": str(lettering_id), "image_url": image_url})


@pytest.fixture
def s3(monkeypatch):
    fake = FakeS3()
    monkeypatch.setattr(storage, "_client", lambda: fake)
    return fake


@pytest.fixture
def city():
    return City.objects.create(name="Seoul", country_code="KR", center_lat=37.56, center_lng=126.97)


@pytest.fixture
def owner():
    return User.objects.create_user(email="owner@example.com", password="password123", display_name="Walker")


@pytest.fixture
def owner_api(owner):
    c = APIClient()
    c.force_authenticate(owner)
    return c


def _image(content=b"\xff\xd8\xff fake jpeg bytes"):
    return SimpleUploadedFile("sign.jpg", content, content_type="image/jpeg")


def _form(city, **overrides):
    data = {"image": _image(), "city_id": str(city.id), "contributor_tag": "walker_01", "pin_code": "123456", "description": "Neon sign"}
    data.update(overrides)
    return data


def _approved(city, user=None, n=0, **extra):
    lettering = create_lettering(
        city=city, user=user, contributor_tag="walker", pin_code="123456", image_url=f"http://cdn.local/{n}.jpg", image_hash=f"{n:064d}", **extra
    )
    transition_status(lettering, LetteringStatus.APPROVED, reason="ok", admin_sub="admin@example.com")
    return lettering


class TestUpload:
    def test_ml_disabled_approves_immediately(self, owner_api, owner, city, s3, settings):
        settings.ENABLE_ML_PROCESSING = False
        r = owner_api.post(UPLOAD_URL, _form(city), format="multipart")
        assert r.status_code == 201, r.content
        assert r.json()["status"] == "approved"

        lettering = Lettering.objects.get(pk=r.json()["id"])
        assert lettering.status == LetteringStatus.APPROVED
        assert lettering.user == owner
        assert lettering.latitude == city.center_lat
        assert lettering.storage_key in s3.objects
        assert lettering.image_url.endswith(lettering.storage_key)
        assert [h.to_status for h in lettering.status_history.order_by("created_at")] == ["PENDING", "APPROVED"]

    def test_ml_enabled_enqueues_job(self, city, s3, settings, monkeypatch):
        settings.ENABLE_ML_PROCESSING = True
        queue = FakeQueue()
        monkeypatch.setattr(lettering_services, "get_queue", lambda: queue)

        r = APIClient().post(UPLOAD_URL, _form(city), format="multipart")
        assert r.status_code == 201
        assert r.json()["status"] == "processing"
        assert queue.jobs == [{"lettering_id": r.json()["id"], "image_url": Lettering.objects.get().image_url}]
        assert Lettering.objects.get().status == LetteringStatus.PENDING

    def test_queue_failure_falls_back_to_approval(self, city, s3, settings, monkeypatch):
        settings.ENABLE_ML_PROCESSING = True
        monkeypatch.setattr(lettering_services, "get_queue", lambda: FakeQueue(fail=True))

        r = APIClient().post(UPLOAD_URL, _form(city), format="multipart")
        assert r.status_code == 201
        assert r.json()["status"] == "approved"

    def test_region_gate_blocks_upload(self, city, s3):
        RegionPolicy.objects.create(country_code="KR", uploads_enabled=False)
        r = APIClient().post(UPLOAD_URL, _form(city), format="multipart")
        assert r.status_code == 403
        assert r.json() == {"error": "Uploads are disabled for this region"}
        assert not Lettering.objects.exists()
        assert s3.objects == {}

    def test_duplicate_image(self, city, s3):
        c = APIClient()
        assert c.post(UPLOAD_URL, _form(city), format="multipart").status_code == 201
        r = c.post(UPLOAD_URL, _form(city), format="multipart")
        assert r.status_code == 400
        assert r.json() == {"error": "This exact image has already been archived"}

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"city_id": "not-a-uuid"}, "city_id must be a valid UUID"),
            ({"city_id": str(uuid.uuid4())}, "City not found"),
            ({"pin_code": "12a456"}, "pin_code must be 6 digits"),
            ({"contributor_tag": "x"}, "contributor_tag must be between 2 and 30 characters"),
            ({"contributor_tag": "walker!"}, "contributor_tag contains unsupported characters"),
        ],
    )
    def test_validation_messages(self, city, s3, overrides, message):
        r = APIClient().post(UPLOAD_URL, _form(city, **overrides), format="multipart")
        assert r.status_code == 400
        assert r.json() == {"error": message}

    def test_rate_limited_per_ip(self, city, s3, settings):
        settings.RATE_LIMIT_UPLOADS_PER_IP = 1
        c = APIClient()
        assert c.post(UPLOAD_URL, _form(city), format="multipart").status_code == 201
        r = c.post(UPLOAD_URL, _form(city, image=_image(b"another image")), format="multipart")
        assert r.status_code == 429

    def test_rejected_uploads_do_not_use_quota(self, city, s3, settings):
        settings.RATE_LIMIT_UPLOADS_PER_IP = 1
        blocked = City.objects.create(name="Tokyo", country_code="JP")
        RegionPolicy.objects.create(country_code="JP", uploads_enabled=False)
        c = APIClient()

        assert c.post(UPLOAD_URL, _form(city, pin_code="12"), format="multipart").status_code == 400
        assert c.post(UPLOAD_URL, _form(blocked), format="multipart").status_code == 403
        assert c.post(UPLOAD_URL, _form(city, city_id=str(uuid.uuid4())), format="multipart").status_code == 400

        assert c.post(UPLOAD_URL, _form(city), format="multipart").status_code == 201
        # 동일 이미지 중복은 한도 소진 전 거절
        assert c.post(UPLOAD_URL, _form(city), format="multipart").status_code == 400
        assert c.post(UPLOAD_URL, _form(city, image=_image(b"another image")), format="multipart").status_code == 429


class TestMlJob:
    def test_job_approves_with_detected_text(self, city, monkeypatch):
        lettering = create_lettering(city=city, contributor_tag="walker", pin_code="123456", image_url="http://cdn.local/a.jpg", image_hash="a" * 64)
        monkeypatch.setattr("letterings.ml.fetch_image", lambda url: b"img")
        monkeypatch.setattr("letterings.ml.detect_text", lambda image: "OPEN 24H")

        assert process_ml_job({"lettering_id": str(lettering.id), "image_url": lettering.image_url}) is True
        lettering.refresh_from_db()
        assert lettering.status == LetteringStatus.APPROVED
        assert lettering.detected_text == "OPEN 24H"


class TestGallery:
    def test_only_approved_and_discoverable(self, city):
        hidden_city = City.objects.create(name="Berlin", country_code="DE")
        RegionPolicy.objects.create(country_code="DE", discoverability_enabled=False)
        visible = _approved(city, n=1, description="Old bakery sign")
        _approved(hidden_city, n=2)
        create_lettering(city=city, contributor_tag="walker", pin_code="123456", image_url="http://cdn.local/p.jpg", image_hash="p" * 64)

        body = APIClient().get("/api/v1/letterings/").json()
        assert body["total"] == 1
        assert body["limit"] == 20 and body["offset"] == 0
        assert body["items"][0]["id"] == str(visible.id)
        assert "pin_code" not in body["items"][0]

    def test_filters(self, city):
        other = City.objects.create(name="Busan", country_code="KR")
        _approved(city, n=1, description="Old bakery sign")
        _approved(other, n=2, detected_text="FISH MARKET")
        c = APIClient()

        assert c.get("/api/v1/letterings/", {"q": "bakery"}).json()["total"] == 1
        assert c.get("/api/v1/letterings/", {"city_id": str(other.id)}).json()["items"][0]["city_name"] == "Busan"
        bad = c.get("/api/v1/letterings/", {"city_id": "nope"})
        assert bad.status_code == 400 and bad.json() == {"error": "city_id must be a valid UUID"}

    def test_detail_with_is_owner(self, city, owner, owner_api):
        lettering = _approved(city, owner)
        assert owner_api.get(f"/api/v1/letterings/{lettering.id}/").json()["is_owner"] is True
        assert APIClient().get(f"/api/v1/letterings/{lettering.id}/").json()["is_owner"] is False

        r = APIClient().get(f"/api/v1/letterings/{uuid.uuid4()}/")
        assert r.status_code == 404 and r.json() == {"error": "Lettering not found"}


class TestEngagement:
    def test_like_toggle_per_ip(self, city):
        lettering = _approved(city)
        c = APIClient(REMOTE_ADDR="10.0.0.1")

        assert c.post(f"/api/v1/letterings/{lettering.id}/like/").json() == {"liked": True, "likes_count": 1}
        other = APIClient(REMOTE_ADDR="10.0.0.2")
        assert other.post(f"/api/v1/letterings/{lettering.id}/like/").json() == {"liked": True, "likes_count": 2}
        assert c.post(f"/api/v1/letterings/{lettering.id}/like/").json() == {"liked": False, "likes_count": 1}
        assert Like.objects.count() == 1

    def test_report_requires_reason(self, city):
        lettering = _approved(city)
        r = APIClient().post(f"/api/v1/letterings/{lettering.id}/report/", {"reason": "  "}, format="json")
        assert r.status_code == 400
        assert r.json() == {"error": "Report reason is required"}

    def test_report_threshold(self, city, owner_api):
        lettering = _approved(city)
        for reason in ("spam", "spam", "fake"):
            assert owner_api.post(f"/api/v1/letterings/{lettering.id}/report/", {"reason": reason}, format="json").status_code == 200
        lettering.refresh_from_db()
        assert lettering.status == LetteringStatus.REPORTED
        row = lettering.status_history.latest("created_at")
        assert row.actor_type == "USER"


class TestMyLetterings:
    def test_list_and_status_filter(self, city, owner, owner_api):
        _approved(city, owner, n=1)
        create_lettering(city=city, user=owner, contributor_tag="walker", pin_code="123456", image_url="http://cdn.local/p.jpg", image_hash="p" * 64)

        body = owner_api.get("/api/v1/me/letterings/").json()
        assert body["total"] == 2
        assert owner_api.get("/api/v1/me/letterings/?status=pending").json()["total"] == 1

        bad = owner_api.get("/api/v1/me/letterings/?status=LOST")
        assert bad.status_code == 400 and bad.json() == {"error": "Invalid status filter"}

    def test_requires_auth(self):
        assert APIClient().get("/api/v1/me/letterings/").status_code == 401

    def test_patch_writes_metadata_history(self, city, owner, owner_api):
        lettering = _approved(city, owner)
        r = owner_api.patch(f"/api/v1/me/letterings/{lettering.id}/", {"description": "Hand painted", "pin_code": "654321", "contributor_tag": "walker"}, format="json")
        assert r.status_code == 200
        assert r.json()["description"] == "Hand painted" and r.json()["pin_code"] == "654321"

        rows = LetteringMetadataHistory.objects.filter(lettering=lettering)
        # contributor_tag는 값이 같아 이력 없음
        assert sorted(rows.values_list("field_name", flat=True)) == ["description", "pin_code"]
        assert rows.get(field_name="pin_code").old_value == "123456"

    def test_patch_errors(self, city, owner, owner_api):
        lettering = _approved(city, owner)
        stranger = _approved(city, n=9)

        empty = owner_api.patch(f"/api/v1/me/letterings/{lettering.id}/", {}, format="json")
        assert empty.status_code == 400 and empty.json() == {"error": "No updates provided"}

        bad_pin = owner_api.patch(f"/api/v1/me/letterings/{lettering.id}/", {"pin_code": "12"}, format="json")
        assert bad_pin.json() == {"error": "pin_code must be 6 digits"}

        forbidden = owner_api.patch(f"/api/v1/me/letterings/{stranger.id}/", {"description": "mine"}, format="json")
        assert forbidden.status_code == 403
        assert forbidden.json() == {"error": "You can only update your own uploads"}

    def test_timeline_newest_first(self, city, owner, owner_api):
        lettering = _approved(city, owner)
        owner_api.patch(f"/api/v1/me/letterings/{lettering.id}/", {"description": "v2"}, format="json")

        body = owner_api.get(f"/api/v1/me/letterings/{lettering.id}/timeline/").json()
        assert [h["to_status"] for h in body["status_history"]] == ["APPROVED", "PENDING"]
        assert body["metadata_history"][0]["new_value"] == "v2"

        stranger = _approved(city, n=9)
        r = owner_api.get(f"/api/v1/me/letterings/{stranger.id}/timeline/")
        assert r.status_code == 403
        assert r.json() == {"error": "You can only view your own upload timeline"}
