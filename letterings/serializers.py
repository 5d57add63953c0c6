import uuid

from rest_framework import serializers

from .models import Lettering, LetteringMetadataHistory, LetteringStatusHistory, LocationRevisit
from .services import normalize_contributor_tag, normalize_description, normalize_pin_code


class LetteringUploadIn(serializers.Serializer):
    # 규칙 위반 메시지를 그대로 내보내기 위해 형식 검증은 validate()에서 한다.
    image = serializers.FileField()
    city_id = serializers.CharField(allow_blank=True)
    contributor_tag = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    pin_code = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    latitude = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, allow_null=True, min_value=-180, max_value=180)

    def validate(self, data):
        try:
            data["city_id"] = uuid.UUID(str(data.get("city_id") or "").strip())
        except ValueError:
            raise serializers.ValidationError("city_id must be a valid UUID")
        data["contributor_tag"] = normalize_contributor_tag(data.get("contributor_tag"))
        data["pin_code"] = normalize_pin_code(data.get("pin_code"))
        data["description"] = normalize_description(data.get("description"))
        return data


class LetteringUploadOut(serializers.Serializer):
    id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=["approved", "processing"])
    message = serializers.CharField(required=False)


class LetteringUpdateIn(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    contributor_tag = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    pin_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReportIn(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)


class LetteringOut(serializers.ModelSerializer):
    city_id = serializers.UUIDField(read_only=True)
    city_name = serializers.CharField(source="city.name", read_only=True)
    country_code = serializers.CharField(source="city.country_code", read_only=True)

    class Meta:
        model = Lettering
        fields = [
            "id",
            "city_id",
            "city_name",
            "country_code",
            "contributor_tag",
            "image_url",
            "thumbnail_url",
            "latitude",
            "longitude",
            "detected_text",
            "description",
            "status",
            "likes_count",
            "comments_count",
            "created_at",
        ]
        read_only_fields = fields


class LetteringDetailOut(LetteringOut):
    is_owner = serializers.SerializerMethodField()

    class Meta(LetteringOut.Meta):
        fields = LetteringOut.Meta.fields + ["is_owner"]
        read_only_fields = fields

    def get_is_owner(self, obj) -> bool:
        request = self.context.get("request")
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and obj.user_id == user.pk)


class MyLetteringOut(LetteringOut):
    class Meta(LetteringOut.Meta):
        fields = LetteringOut.Meta.fields + ["pin_code", "report_count", "moderation_reason", "moderated_at", "updated_at"]
        read_only_fields = fields


class StatusHistoryOut(serializers.ModelSerializer):
    class Meta:
        model = LetteringStatusHistory
        fields = ["id", "from_status", "to_status", "reason", "actor_type", "actor_sub", "created_at"]
        read_only_fields = fields


class MetadataHistoryOut(serializers.ModelSerializer):
    edited_by = serializers.UUIDField(source="edited_by_id", read_only=True, allow_null=True)

    class Meta:
        model = LetteringMetadataHistory
        fields = ["id", "field_name", "old_value", "new_value", "edited_by", "created_at"]
        read_only_fields = fields


class TimelineOut(serializers.Serializer):
    status_history = StatusHistoryOut(many=True)
    metadata_history = MetadataHistoryOut(many=True)


class RevisitIn(serializers.Serializer):
    revisit_lettering_id = serializers.UUIDField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RevisitSideOut(serializers.ModelSerializer):
    class Meta:
        model = Lettering
        fields = ["image_url", "created_at"]
        read_only_fields = fields


class RevisitOut(serializers.ModelSerializer):
    original_lettering_id = serializers.UUIDField(read_only=True)
    revisit_lettering_id = serializers.UUIDField(read_only=True)
    original = RevisitSideOut(source="original_lettering", read_only=True)
    revisit = RevisitSideOut(source="revisit_lettering", read_only=True)

    class Meta:
        model = LocationRevisit
        fields = ["id", "original_lettering_id", "revisit_lettering_id", "notes", "created_at", "original", "revisit"]
        read_only_fields = fields


class RevisitListOut(serializers.Serializer):
    revisits = RevisitOut(many=True)


class ContributorOut(serializers.Serializer):
    contributor_tag = serializers.CharField()
    total_count = serializers.IntegerField()
    letterings = LetteringOut(many=True)


class PinCodeStatOut(serializers.Serializer):
    pin_code = serializers.CharField()
    count = serializers.IntegerField()
