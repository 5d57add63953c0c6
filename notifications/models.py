import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    class Type(models.TextChoices):
        MODERATION_APPROVED = "MODERATION_APPROVED", "Moderation approved"
        MODERATION_REJECTED = "MODERATION_REJECTED", "Moderation rejected"
        MODERATION_DELETED = "MODERATION_DELETED", "Moderation deleted"
        REPORTS_CLEARED = "REPORTS_CLEARED", "Reports cleared"
        COMMENT_HIDDEN = "COMMENT_HIDDEN", "Comment hidden"
        COMMENT_RESTORED = "COMMENT_RESTORED", "Comment restored"
        COMMENT_DELETED = "COMMENT_DELETED", "Comment deleted"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, db_index=True)
    type = models.CharField(max_length=32, choices=Type.choices)
    title = models.CharField(max_length=200)
    body = models.TextField()
    metadata = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "notifications"
        indexes = [models.Index(fields=["user", "is_read", "-created_at"], name="notif_user_read_created_idx")]
