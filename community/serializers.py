from rest_framework import serializers

from letterings.models import Lettering

from .models import Collection


class CollectionIn(serializers.Serializer):
    # 메시지를 그대로 내보내기 위해 길이 검증은 서비스에서 한다.
    name = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    creator_tag = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    is_public = serializers.BooleanField(required=False, default=True)


class CollectionOut(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Collection
        fields = ["id", "name", "description", "creator_tag", "is_public", "item_count", "created_at", "updated_at"]
        read_only_fields = fields


class CollectionLetteringOut(serializers.ModelSerializer):
    class Meta:
        model = Lettering
        fields = ["id", "image_url", "thumbnail_url", "detected_text", "contributor_tag", "created_at"]
        read_only_fields = fields


class CollectionDetailOut(CollectionOut):
    is_owner = serializers.SerializerMethodField()
    letterings = CollectionLetteringOut(many=True, read_only=True, source="visible_letterings")

    class Meta(CollectionOut.Meta):
        fields = CollectionOut.Meta.fields + ["is_owner", "letterings"]
        read_only_fields = fields

    def get_is_owner(self, obj) -> bool:
        user = self.context.get("user")
        return bool(user and user.is_authenticated and obj.owner_id == user.pk)


class LeaderboardEntryOut(serializers.Serializer):
    tag = serializers.CharField()
    count = serializers.IntegerField()
    total_likes = serializers.IntegerField()
