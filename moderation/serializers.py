from rest_framework import serializers

from letterings.serializers import LetteringOut

from .scoring import LEVEL_RULES


class ModerationCheckIn(serializers.Serializer):
    content = serializers.CharField(max_length=10_000, allow_blank=True, trim_whitespace=False)
    level = serializers.ChoiceField(choices=sorted(LEVEL_RULES), required=False, allow_blank=True)


class ModerationCheckOut(serializers.Serializer):
    level = serializers.CharField()
    status = serializers.ChoiceField(choices=["VISIBLE", "HIDDEN"])
    moderation_score = serializers.IntegerField(min_value=0, max_value=100)
    moderation_flags = serializers.ListField(child=serializers.CharField())
    auto_flagged = serializers.BooleanField()
    needs_review = serializers.BooleanField()
    review_priority = serializers.IntegerField(min_value=0, max_value=100)
    moderated_by = serializers.CharField(allow_null=True)
    moderation_reason = serializers.CharField(allow_null=True)


class AdminLetteringOut(LetteringOut):
    user_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta(LetteringOut.Meta):
        fields = LetteringOut.Meta.fields + [
            "user_id",
            "report_count",
            "report_reasons",
            "moderation_reason",
            "moderated_by",
            "moderated_at",
            "updated_at",
        ]
        read_only_fields = fields
