from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from audits.models import AuditAction
from audits.services import write_audit_log
from common.schema import AdminTokenOut, AuthOut, AuthUserOut, ErrorOut

from .serializers import LoginIn, RegisterIn, UserOut, build_auth_response
from .services.auth import authenticate_user, ensure_admin_user, register_user, verify_admin_credentials


class AuthViewSet(viewsets.GenericViewSet):
    permission_classes = [AllowAny]
    serializer_class = serializers.Serializer

    @extend_schema(
        tags=["Auth"],
        summary="회원가입",
        description="이메일/비밀번호로 계정을 만들고 JWT를 발급합니다. 이메일은 소문자로 정규화됩니다.",
        operation_id="auth_register",
        request=RegisterIn,
        responses={201: OpenApiResponse(response=AuthOut), 400: OpenApiResponse(response=ErrorOut)},
        examples=[OpenApiExample("요청 예시", value={"email": "reader@example.com", "password": "letters123", "display_name": "Reader"}, request_only=True)],
    )
    @action(detail=False, methods=["post"])
    def register(self, request):
        s = RegisterIn(data=request.data)
        s.is_valid(raise_exception=True)
        user = register_user(**s.validated_data)
        return Response(build_auth_response(user), status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Auth"],
        summary="로그인",
        operation_id="auth_login",
        request=LoginIn,
        responses={200: OpenApiResponse(response=AuthOut), 400: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
    )
    @action(detail=False, methods=["post"])
    def login(self, request):
        s = LoginIn(data=request.data)
        s.is_valid(raise_exception=True)
        user = authenticate_user(**s.validated_data)
        return Response(build_auth_response(user), status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Auth"],
        summary="토큰 재발급",
        operation_id="auth_refresh",
        request=TokenRefreshSerializer,
        responses={200: OpenApiResponse(response=TokenRefreshSerializer), 401: OpenApiResponse(response=ErrorOut)},
    )
    @action(detail=False, methods=["post"])
    def refresh(self, request):
        s = TokenRefreshSerializer(data=request.data)
        try:
            s.is_valid(raise_exception=True)
        except TokenError as e:
            return Response({"error": str(e)}, status=status.HTTP_401_UNAUTHORIZED)
        return Response(s.validated_data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Auth"],
        summary="내 계정 정보",
        operation_id="auth_me",
        responses={200: OpenApiResponse(response=AuthUserOut), 401: OpenApiResponse(response=ErrorOut)},
    )
    @action(detail=False, methods=["get"], permission_classes=[IsAuthenticated])
    def me(self, request):
        return Response(UserOut(request.user).data)


class AdminAuthViewSet(viewsets.GenericViewSet):
    permission_classes = [AllowAny]
    serializer_class = serializers.Serializer

    @extend_schema(
        tags=["Admin"],
        summary="관리자 로그인",
        description=(
            "`ADMIN_EMAIL` / `ADMIN_PASSWORD_HASH`(bcrypt) 설정과 대조해 관리자 JWT를 발급합니다.\n"
            "- 성공 시 관리자 계정(is_staff)이 보장되고 `ADMIN_LOGIN` 감사 로그가 남습니다.\n"
            "- 실패 시 403 `Invalid credentials`"
        ),
        operation_id="admin_login",
        request=LoginIn,
        responses={200: OpenApiResponse(response=AdminTokenOut), 400: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
    )
    @action(detail=False, methods=["post"])
    def login(self, request):
        s = LoginIn(data=request.data)
        s.is_valid(raise_exception=True)
        email = s.validated_data["email"]
        if not verify_admin_credentials(email=email, password=s.validated_data["password"]):
            raise PermissionDenied("Invalid credentials")

        admin = ensure_admin_user(email)
        write_audit_log(action=AuditAction.ADMIN_LOGIN, user=admin, request=request)
        refresh = RefreshToken.for_user(admin)
        return Response({"token": str(refresh.access_token)}, status=status.HTTP_200_OK)
