import uuid

from django.conf import settings
from django.db import models


class LetteringStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"
    REPORTED = "REPORTED", "Reported"


class ActorType(models.TextChoices):
    SYSTEM = "SYSTEM", "System"
    USER = "USER", "User"
    ADMIN = "ADMIN", "Admin"
    AUTO = "AUTO", "Auto"


class Lettering(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    city = models.ForeignKey("regions.City", on_delete=models.PROTECT, related_name="letterings")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="letterings")  # 레거시 익명 업로드는 NULL
    contributor_tag = models.CharField(max_length=30)
    image_url = models.URLField(max_length=500)
    thumbnail_url = models.URLField(max_length=500, blank=True, default="")
    storage_key = models.CharField(max_length=255, blank=True, default="")
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    pin_code = models.CharField(max_length=6)
    detected_text = models.TextField(blank=True, default="")
    description = models.TextField(blank=True, default="")
    image_hash = models.CharField(max_length=64, unique=True)
    status = models.CharField(max_length=16, choices=LetteringStatus.choices, default=LetteringStatus.PENDING, db_index=True)
    moderation_reason = models.TextField(null=True, blank=True)
    moderated_by = models.CharField(max_length=255, null=True, blank=True)
    moderated_at = models.DateTimeField(null=True, blank=True)
    report_count = models.PositiveIntegerField(default=0)
    report_reasons = models.JSONField(default=list, blank=True)
    likes_count = models.PositiveIntegerField(default=0)
    comments_count = models.PositiveIntegerField(default=0)
    uploaded_by_ip_hash = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "letterings"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="lettering_status_created_idx"),
            models.Index(fields=["city", "status"], name="lettering_city_status_idx"),
            models.Index(fields=["user", "-created_at"], name="lettering_user_created_idx"),
        ]

    def __str__(self):
        return f"Lettering({self.id}, {self.status})"


class LetteringStatusHistory(models.Model):
    # append-only: 상태 전이 1회당 정확히 1행
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lettering = models.ForeignKey(Lettering, on_delete=models.CASCADE, related_name="status_history")
    from_status = models.CharField(max_length=16, choices=LetteringStatus.choices, null=True, blank=True)
    to_status = models.CharField(max_length=16, choices=LetteringStatus.choices)
    reason = models.TextField(null=True, blank=True)
    actor_type = models.CharField(max_length=8, choices=ActorType.choices, default=ActorType.SYSTEM)
    actor_sub = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "lettering_status_history"
        ordering = ["created_at"]
        indexes = [models.Index(fields=["lettering", "-created_at"], name="status_hist_lettering_idx")]


class LetteringMetadataHistory(models.Model):
    class Field(models.TextChoices):
        DESCRIPTION = "description", "Description"
        CONTRIBUTOR_TAG = "contributor_tag", "Contributor tag"
        PIN_CODE = "pin_code", "Pin code"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lettering = models.ForeignKey(Lettering, on_delete=models.CASCADE, related_name="metadata_history")
    edited_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    field_name = models.CharField(max_length=32, choices=Field.choices)
    old_value = models.TextField(null=True, blank=True)
    new_value = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "lettering_metadata_history"
        ordering = ["created_at"]
        indexes = [models.Index(fields=["lettering", "-created_at"], name="meta_hist_lettering_idx")]


class Like(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lettering = models.ForeignKey(Lettering, on_delete=models.CASCADE, related_name="likes")
    ip_hash = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "likes"
        constraints = [models.UniqueConstraint(fields=["lettering", "ip_hash"], name="uniq_like_lettering_ip")]


class LocationRevisit(models.Model):
    """같은 장소를 나중에 다시 찍은 레터링 쌍."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    original_lettering = models.ForeignKey(Lettering, on_delete=models.CASCADE, related_name="revisits_as_original")
    revisit_lettering = models.ForeignKey(Lettering, on_delete=models.CASCADE, related_name="revisits_as_revisit")
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "location_revisits"
        ordering = ["-created_at"]
        constraints = [models.UniqueConstraint(fields=["original_lettering", "revisit_lettering"], name="uniq_location_revisit")]
