import uuid

from django.conf import settings
from django.db import models


class CommentStatus(models.TextChoices):
    VISIBLE = "VISIBLE", "Visible"
    HIDDEN = "HIDDEN", "Hidden"


class Comment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lettering = models.ForeignKey("letterings.Lettering", on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="comments")
    content = models.TextField()
    ip_hash = models.CharField(max_length=64, null=True, blank=True)
    status = models.CharField(max_length=8, choices=CommentStatus.choices, default=CommentStatus.VISIBLE, db_index=True)

    # 생성 시 1회 계산(재채점 없음)
    moderation_score = models.PositiveSmallIntegerField(default=0)
    moderation_flags = models.JSONField(default=list, blank=True)
    auto_flagged = models.BooleanField(default=False)
    needs_review = models.BooleanField(default=False)
    review_priority = models.PositiveSmallIntegerField(default=0)

    moderated_at = models.DateTimeField(null=True, blank=True)
    moderated_by = models.CharField(max_length=255, null=True, blank=True)
    moderation_reason = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "comments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["lettering", "status", "-created_at"], name="comment_lettering_status_idx"),
            models.Index(fields=["needs_review", "-review_priority"], name="comment_review_queue_idx"),
        ]

    @property
    def commenter_name(self) -> str:
        return self.user.public_name if self.user_id else "Anonymous"

    def __str__(self):
        return f"Comment({self.id}) on lettering {self.lettering_id}"
