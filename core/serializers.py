from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


class UserOut(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "email", "display_name", "role", "created_at")
        read_only_fields = fields


class RegisterIn(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True, default="")
    password = serializers.CharField(required=False, allow_blank=True, default="", write_only=True, trim_whitespace=False)
    display_name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=80)

    def validate(self, attrs):
        email = (attrs.get("email") or "").strip().lower()
        if not email or "@" not in email:
            raise serializers.ValidationError("Valid email is required")
        if len(attrs.get("password") or "") < 8:
            raise serializers.ValidationError("Password must be at least 8 characters")
        attrs["email"] = email
        attrs["display_name"] = (attrs.get("display_name") or "").strip() or None
        return attrs


class LoginIn(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True, default="")
    password = serializers.CharField(required=False, allow_blank=True, default="", write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        email = (attrs.get("email") or "").strip().lower()
        if not email:
            raise serializers.ValidationError("Email is required")
        attrs["email"] = email
        return attrs


def build_auth_response(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        "token": str(refresh.access_token),
        "refresh": str(refresh),
        "user": UserOut(user).data,
    }
