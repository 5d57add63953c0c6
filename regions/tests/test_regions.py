import uuid

import pytest
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APIClient

from audits.models import AuditLog
from core.models import User
from letterings.models import LetteringStatus
from letterings.services import create_lettering, transition_status
from regions.models import City, RegionPolicy
from regions.services import (
    EffectivePolicy,
    get_effective_policy,
    normalize_country_code,
    policy_for_city,
    policy_for_lettering,
    upsert_region_policy,
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def admin():
    return User.objects.create_user(email="admin@example.com", password="password123", is_staff=True, role="ADMIN")


@pytest.fixture
def admin_api(admin):
    c = APIClient()
    c.force_authenticate(admin)
    return c


class TestEffectivePolicy:
    def test_missing_row_is_fully_permissive(self):
        p = get_effective_policy("jp")
        assert p == EffectivePolicy(country_code="JP")
        assert p.uploads_enabled and p.comments_enabled and p.discoverability_enabled
        assert p.auto_moderation_level == "standard"
        assert p.explicit is False

    def test_explicit_row_is_used(self):
        RegionPolicy.objects.create(country_code="KR", comments_enabled=False, auto_moderation_level="strict")
        p = get_effective_policy("KR")
        assert p.explicit is True
        assert p.comments_enabled is False and p.uploads_enabled is True
        assert p.auto_moderation_level == "strict"

    def test_policy_for_city(self):
        city = City.objects.create(name="Busan", country_code="KR")
        RegionPolicy.objects.create(country_code="KR", uploads_enabled=False)
        assert policy_for_city(city).uploads_enabled is False

    def test_policy_for_missing_lettering(self):
        with pytest.raises(NotFound):
            policy_for_lettering(uuid.uuid4())

    @pytest.mark.parametrize("raw,expected", [(" kr ", "KR"), ("Us", "US")])
    def test_normalize_country_code(self, raw, expected):
        assert normalize_country_code(raw) == expected

    @pytest.mark.parametrize("raw", ["", "KOR", "K1", "한국"])
    def test_normalize_country_code_rejects(self, raw):
        with pytest.raises(ValidationError):
            normalize_country_code(raw)


class TestUpsertRegionPolicy:
    def test_partial_update_keeps_other_fields(self, admin):
        upsert_region_policy("kr", user=admin, comments_enabled=False, auto_moderation_level="strict")
        upsert_region_policy("KR", user=admin, uploads_enabled=False)

        p = RegionPolicy.objects.get(country_code="KR")
        assert p.uploads_enabled is False
        assert p.comments_enabled is False
        assert p.auto_moderation_level == "strict"

    def test_writes_snapshot_audit(self, admin):
        upsert_region_policy("DE", user=admin, discoverability_enabled=False)
        row = AuditLog.objects.get(action="UPSERT_REGION_POLICY")
        assert row.actor == admin.email
        assert row.target_id == "DE"
        assert row.metadata == {
            "country_code": "DE",
            "uploads_enabled": True,
            "comments_enabled": True,
            "discoverability_enabled": False,
            "auto_moderation_level": "standard",
        }

    def test_invalid_level(self, admin):
        with pytest.raises(ValidationError):
            upsert_region_policy("DE", user=admin, auto_moderation_level="paranoid")
        assert not RegionPolicy.objects.exists()


class TestRegionPolicyAPI:
    def test_requires_admin(self):
        u = User.objects.create_user(email="u@example.com", password="password123")
        c = APIClient()
        c.force_authenticate(u)
        assert c.get("/api/v1/admin/region-policies/").status_code == 403
        assert c.put("/api/v1/admin/region-policies/KR/", {"uploads_enabled": False}, format="json").status_code == 403

    def test_put_and_list(self, admin_api):
        r = admin_api.put("/api/v1/admin/region-policies/kr/", {"comments_enabled": False}, format="json")
        assert r.status_code == 200
        assert r.json()["country_code"] == "KR" and r.json()["comments_enabled"] is False

        admin_api.put("/api/v1/admin/region-policies/US/", {"auto_moderation_level": "relaxed"}, format="json")

        body = admin_api.get("/api/v1/admin/region-policies/").json()
        assert body["total"] == 2
        assert body["limit"] == 200 and body["offset"] == 0
        assert [i["country_code"] for i in body["items"]] == ["KR", "US"]

        filtered = admin_api.get("/api/v1/admin/region-policies/?country_code=us").json()
        assert [i["country_code"] for i in filtered["items"]] == ["US"]

    def test_list_limit_clamp(self, admin_api):
        body = admin_api.get("/api/v1/admin/region-policies/?limit=9999&offset=-1").json()
        assert body["limit"] == 500 and body["offset"] == 0

    def test_put_invalid_code_and_level(self, admin_api):
        r = admin_api.put("/api/v1/admin/region-policies/KOR/", {}, format="json")
        assert r.status_code == 400
        assert r.json() == {"error": "country_code must be a 2-letter ISO code"}

        r2 = admin_api.put("/api/v1/admin/region-policies/KR/", {"auto_moderation_level": "max"}, format="json")
        assert r2.status_code == 400
        assert r2.json() == {"error": "auto_moderation_level must be one of relaxed, standard, strict"}


class TestCitiesAPI:
    def test_public_list_and_detail(self):
        seoul = City.objects.create(name="Seoul", country_code="KR")
        City.objects.create(name="Atlantis", country_code="GR", is_active=False)
        c = APIClient()

        body = c.get("/api/v1/cities/").json()
        assert [i["name"] for i in body["items"]] == ["Seoul"]

        r = c.get(f"/api/v1/cities/{seoul.id}/")
        assert r.status_code == 200 and r.json()["country_code"] == "KR"

        missing = c.get(f"/api/v1/cities/{uuid.uuid4()}/")
        assert missing.status_code == 404
        assert missing.json() == {"error": "City not found"}

    def test_admin_create_city(self, admin_api):
        r = admin_api.post("/api/v1/admin/cities/", {"name": " Lisbon ", "country_code": "pt"}, format="json")
        assert r.status_code == 201
        assert r.json()["name"] == "Lisbon" and r.json()["country_code"] == "PT"
        assert AuditLog.objects.filter(action="CREATE_CITY").count() == 1

        dup = admin_api.post("/api/v1/admin/cities/", {"name": "Lisbon", "country_code": "PT"}, format="json")
        assert dup.status_code == 400
        assert dup.json() == {"error": "City already exists"}

    def test_city_pin_code_stats(self):
        seoul = City.objects.create(name="Seoul", country_code="KR")
        busan = City.objects.create(name="Busan", country_code="KR")
        for n, (city, pin) in enumerate([(seoul, "222222"), (seoul, "111111"), (seoul, "111111"), (seoul, "333333"), (busan, "111111")]):
            lettering = create_lettering(city=city, contributor_tag="walker", pin_code=pin, image_url=f"http://cdn.local/{n}.jpg", image_hash=f"{n:064d}")
            transition_status(lettering, LetteringStatus.APPROVED, reason="ok")
        create_lettering(city=seoul, contributor_tag="walker", pin_code="999999", image_url="http://cdn.local/p.jpg", image_hash="p" * 64)

        r = APIClient().get(f"/api/v1/cities/{seoul.id}/stats/")
        assert r.status_code == 200
        assert r.json() == [{"pin_code": "111111", "count": 2}, {"pin_code": "222222", "count": 1}, {"pin_code": "333333", "count": 1}]

    def test_city_stats_unknown_or_inactive_city(self):
        closed = City.objects.create(name="Atlantis", country_code="GR", is_active=False)
        for city_id in (uuid.uuid4(), closed.id):
            r = APIClient().get(f"/api/v1/cities/{city_id}/stats/")
            assert r.status_code == 404
            assert r.json() == {"error": "City not found"}
