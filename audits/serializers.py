from rest_framework import serializers

from .models import AuditLog


class AuditLogOut(serializers.ModelSerializer):
    user_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = AuditLog
        fields = ["id", "actor", "user_id", "action", "lettering_id", "target_type", "target_id", "metadata", "created_at"]
        read_only_fields = fields
