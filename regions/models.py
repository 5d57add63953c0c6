import uuid

from django.db import models


class ModerationLevel(models.TextChoices):
    RELAXED = "relaxed", "Relaxed"
    STANDARD = "standard", "Standard"
    STRICT = "strict", "Strict"


class City(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=120)
    country_code = models.CharField(max_length=2, db_index=True)
    center_lat = models.FloatField(null=True, blank=True)
    center_lng = models.FloatField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "cities"
        ordering = ["name"]
        constraints = [models.UniqueConstraint(fields=["name", "country_code"], name="uniq_city_name_country")]

    def __str__(self):
        return f"{self.name}, {self.country_code}"


class RegionPolicy(models.Model):
    # 행이 없는 국가는 전부 허용(기본 정책)으로 취급한다.
    country_code = models.CharField(max_length=2, primary_key=True)
    uploads_enabled = models.BooleanField(default=True)
    comments_enabled = models.BooleanField(default=True)
    discoverability_enabled = models.BooleanField(default=True, db_index=True)
    auto_moderation_level = models.CharField(max_length=16, choices=ModerationLevel.choices, default=ModerationLevel.STANDARD)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "region_policies"
        ordering = ["country_code"]

    def __str__(self):
        return f"RegionPolicy({self.country_code}, {self.auto_moderation_level})"
