from rest_framework import serializers

from .models import City, RegionPolicy


class CityOut(serializers.ModelSerializer):
    class Meta:
        model = City
        fields = ("id", "name", "country_code", "center_lat", "center_lng", "is_active", "created_at")
        read_only_fields = fields


class CityIn(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, default="")
    country_code = serializers.CharField(required=False, allow_blank=True, default="")
    center_lat = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    center_lng = serializers.FloatField(required=False, allow_null=True, min_value=-180, max_value=180)
    is_active = serializers.BooleanField(required=False, default=True)

    def validate(self, attrs):
        name = (attrs.get("name") or "").strip()
        if not name or len(name) > 120:
            raise serializers.ValidationError("name must be between 1 and 120 characters")
        attrs["name"] = name
        return attrs


class RegionPolicyOut(serializers.ModelSerializer):
    class Meta:
        model = RegionPolicy
        fields = ("country_code", "uploads_enabled", "comments_enabled", "discoverability_enabled", "auto_moderation_level", "created_at", "updated_at")
        read_only_fields = fields


class RegionPolicyIn(serializers.Serializer):
    uploads_enabled = serializers.BooleanField(required=False, allow_null=True, default=None)
    comments_enabled = serializers.BooleanField(required=False, allow_null=True, default=None)
    discoverability_enabled = serializers.BooleanField(required=False, allow_null=True, default=None)
    auto_moderation_level = serializers.CharField(required=False, allow_null=True, default=None)
