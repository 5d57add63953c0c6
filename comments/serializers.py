from rest_framework import serializers

from .models import Comment


class CommentIn(serializers.Serializer):
    # 빈 값/길이 규칙은 서비스에서 통일된 문구로 검증
    content = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


class CommentOut(serializers.ModelSerializer):
    lettering_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True, allow_null=True)
    commenter_name = serializers.CharField(read_only=True)

    class Meta:
        model = Comment
        fields = ["id", "lettering_id", "user_id", "commenter_name", "content", "status", "created_at"]
        read_only_fields = fields


class AdminCommentOut(CommentOut):
    commenter_email = serializers.SerializerMethodField()

    class Meta(CommentOut.Meta):
        fields = CommentOut.Meta.fields + [
            "commenter_email",
            "moderation_score",
            "moderation_flags",
            "auto_flagged",
            "needs_review",
            "review_priority",
            "moderated_at",
            "moderated_by",
            "moderation_reason",
            "updated_at",
        ]
        read_only_fields = fields

    def get_commenter_email(self, obj):
        return obj.user.email if obj.user_id else None
