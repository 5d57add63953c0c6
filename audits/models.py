import uuid

from django.conf import settings
from django.db import models


class AuditAction(models.TextChoices):
    ADMIN_LOGIN = "ADMIN_LOGIN", "Admin login"
    APPROVE_LETTERING = "APPROVE_LETTERING", "Approve lettering"
    REJECT_LETTERING = "REJECT_LETTERING", "Reject lettering"
    CLEAR_REPORTS = "CLEAR_REPORTS", "Clear reports"
    DELETE_LETTERING = "DELETE_LETTERING", "Delete lettering"
    BULK_APPROVE_LETTERING = "BULK_APPROVE_LETTERING", "Bulk approve lettering"
    BULK_REJECT_LETTERING = "BULK_REJECT_LETTERING", "Bulk reject lettering"
    BULK_CLEAR_REPORTS = "BULK_CLEAR_REPORTS", "Bulk clear reports"
    BULK_DELETE_LETTERING = "BULK_DELETE_LETTERING", "Bulk delete lettering"
    HIDE_COMMENT = "HIDE_COMMENT", "Hide comment"
    RESTORE_COMMENT = "RESTORE_COMMENT", "Restore comment"
    DELETE_COMMENT = "DELETE_COMMENT", "Delete comment"
    BULK_HIDE_COMMENT = "BULK_HIDE_COMMENT", "Bulk hide comment"
    BULK_RESTORE_COMMENT = "BULK_RESTORE_COMMENT", "Bulk restore comment"
    BULK_DELETE_COMMENT = "BULK_DELETE_COMMENT", "Bulk delete comment"
    UPSERT_REGION_POLICY = "UPSERT_REGION_POLICY", "Upsert region policy"
    CREATE_CITY = "CREATE_CITY", "Create city"


class AuditLog(models.Model):
    # PII 최소화를 위해 IP/UA는 평문 대신 salted SHA-256 해시만 저장한다.
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    actor = models.CharField(max_length=255, db_index=True)  # 관리자 subject(email) 또는 "system"
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="audit_logs")
    action = models.CharField(max_length=48, db_index=True)
    lettering_id = models.UUIDField(null=True, blank=True, db_index=True)  # 삭제된 대상도 추적해야 하므로 FK 아님
    target_type = models.CharField(max_length=32, blank=True, default="")  # e.g. "lettering", "comment", "region_policy"
    target_id = models.CharField(max_length=64, blank=True, default="")
    ip_hash = models.CharField(max_length=64, null=True, blank=True)
    ua_hash = models.CharField(max_length=64, null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "admin_audit_logs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["action", "-created_at"], name="audit_action_created_idx"),
            models.Index(fields=["lettering_id", "-created_at"], name="audit_lettering_created_idx"),
            models.Index(fields=["target_type", "target_id"], name="audit_target_idx"),
        ]

    def __str__(self):
        return f"[{self.created_at.isoformat()}] {self.actor} {self.action} {self.target_type}:{self.target_id}"
