from rest_framework import serializers

from .models import Notification


class NotificationOut(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ("id", "type", "title", "body", "metadata", "is_read", "created_at")
