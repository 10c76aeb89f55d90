from django.contrib.auth import authenticate
from django.db import IntegrityError
from django.db.models import Q
from django.utils import timezone
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.generics import get_object_or_404
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError

from .models import User, BannedIP
from .serializers import (
    RegisterSerializer,
    LoginSerializer,
    TokenRefreshSerializer,
    UserSerializer,
    AdminUserUpdateSerializer,
    BannedIPSerializer,
)
from .permissions import IsAdminRole, IsUserRole
from . import guard
from config.authentication import issue_tokens, verify_recaptcha
from config.exceptions import LoginBanned
from config.pagination import page_params

# logging
from logger import get_logger

logger = get_logger("gamestore.accounts")

token_response_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={
        "message": openapi.Schema(type=openapi.TYPE_STRING),
        "access_token": openapi.Schema(type=openapi.TYPE_STRING),
        "refresh_token": openapi.Schema(type=openapi.TYPE_STRING),
        "user": openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                "id": openapi.Schema(type=openapi.TYPE_INTEGER),
                "username": openapi.Schema(type=openapi.TYPE_STRING),
                "role": openapi.Schema(type=openapi.TYPE_STRING),
            },
        ),
    },
)


# ----------------------------
# register / login / token
# ----------------------------
class RegisterAPIView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @swagger_auto_schema(
        operation_summary="Register",
        operation_description="Create a user account. Limited per client IP.",
        request_body=RegisterSerializer,
        responses={
            201: "Registered",
            400: "Invalid username/password or user already exists",
            403: "IP banned",
            429: "Too many registrations",
        },
    )
    def post(self, request):
        guard.check_registration(guard.get_client_ip(request))

        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            user = serializer.save()
        except IntegrityError:
            # concurrent signup with the same username
            return Response({"error": "User already exists."}, status=400)

        logger.info(f"user registered : {user.username}")
        return Response({"message": "Register successfully."}, status=status.HTTP_201_CREATED)


class LoginAPIView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @swagger_auto_schema(
        operation_summary="Login",
        operation_description=(
            "Username/password login. Failed attempts are counted per client IP; "
            "an IP that reaches the threshold is banned permanently."
        ),
        request_body=LoginSerializer,
        responses={
            200: openapi.Response(description="Login success", schema=token_response_schema),
            400: "Missing fields",
            401: "Invalid username or password",
            403: "reCAPTCHA failed",
            429: "IP banned",
        },
    )
    def post(self, request):
        ip = guard.get_client_ip(request)
        if guard.is_banned(ip):
            raise LoginBanned()

        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if not verify_recaptcha(data.get("recaptcha_token"), ip):
            return Response(
                {"error": "Failed reCAPTCHA verification", "code": "recaptcha_failed"},
                status=status.HTTP_403_FORBIDDEN,
            )

        user = authenticate(request, username=data["username"], password=data["password"])
        if user is None:
            guard.record_failure(ip)
            if guard.is_banned(ip):
                raise LoginBanned()
            return Response(
                {"error": "Invalid username or password", "code": "invalid_credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        guard.record_success(ip)
        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])

        access_token, refresh_token = issue_tokens(user)
        return Response(
            {
                "message": "Login success",
                "access_token": access_token,
                "refresh_token": refresh_token,
                "user": {"id": user.id, "username": user.username, "role": user.role},
            },
            status=status.HTTP_200_OK,
        )


# new access token from a refresh token
class TokenRefreshAPIView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @swagger_auto_schema(
        operation_summary="Refresh access token",
        request_body=TokenRefreshSerializer,
        responses={200: "New access token", 401: "Invalid or expired refresh token"},
    )
    def post(self, request):
        serializer = TokenRefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            refresh = RefreshToken(serializer.validated_data["refresh_token"])
            user = User.objects.filter(id=refresh["id"], is_active=True).first()
        except (TokenError, KeyError):
            return Response(
                {"error": "Invalid or expired refresh token", "code": "token_not_valid"},
                status=status.HTTP_401_UNAUTHORIZED,
            )
        if user is None:
            return Response(
                {"error": "User not found", "code": "user_not_found"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        access_token, _ = issue_tokens(user)
        return Response({"access_token": access_token}, status=status.HTTP_200_OK)


# ----------------------------
# User API
# ----------------------------
class UserMe(APIView):
    permission_classes = [IsUserRole]

    @swagger_auto_schema(
        operation_summary="Current user",
        responses={200: UserSerializer, 401: "Authentication required"},
    )
    def get(self, request):
        serializer = UserSerializer(request.user)
        return Response(serializer.data)


class UserList(APIView):
    permission_classes = [IsAdminRole]

    @swagger_auto_schema(
        operation_summary="User list (admin)",
        manual_parameters=[
            openapi.Parameter("q", openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False),
            openapi.Parameter("page", openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
            openapi.Parameter("pageSize", openapi.IN_QUERY, type=openapi.TYPE_INTEGER, required=False),
        ],
        responses={200: UserSerializer(many=True)},
    )
    def get(self, request):
        page, page_size = page_params(request.query_params, "pageSize")
        q = (request.query_params.get("q") or "").strip()

        users = User.objects.all()
        if q:
            users = users.filter(Q(username__icontains=q))
        total = users.count()
        items = users.order_by("-created_at", "-id")[(page - 1) * page_size: page * page_size]

        return Response(
            {
                "items": UserSerializer(items, many=True).data,
                "total": total,
                "page": page,
                "pageSize": page_size,
            }
        )


class UserDetail(APIView):
    permission_classes = [IsAdminRole]

    @swagger_auto_schema(
        operation_summary="User detail (admin)",
        responses={200: UserSerializer, 404: "User not found"},
    )
    def get(self, request, user_id):
        user = get_object_or_404(User, id=user_id)
        return Response(UserSerializer(user).data)

    @swagger_auto_schema(
        operation_summary="Edit user (admin)",
        operation_description="Change username, password or role. Points cannot be edited here.",
        request_body=AdminUserUpdateSerializer,
        responses={200: UserSerializer, 400: "Invalid data", 404: "User not found"},
    )
    def put(self, request, user_id):
        user = get_object_or_404(User, id=user_id)
        serializer = AdminUserUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(f"admin {request.user.username} updated user {user.id}")
        return Response(UserSerializer(user).data)

    @swagger_auto_schema(
        operation_summary="Delete user (admin)",
        responses={204: "Deleted", 404: "User not found"},
    )
    def delete(self, request, user_id):
        user = get_object_or_404(User, id=user_id)
        user.delete()
        logger.info(f"admin {request.user.username} deleted user {user_id}")
        return Response(status=status.HTTP_204_NO_CONTENT)


# ----------------------------
# banned IP API
# ----------------------------
class BannedIPList(APIView):
    permission_classes = [IsAdminRole]

    @swagger_auto_schema(
        operation_summary="Banned IPs (admin)",
        responses={200: BannedIPSerializer(many=True)},
    )
    def get(self, request):
        banned = BannedIP.objects.order_by("-banned_at")
        return Response(BannedIPSerializer(banned, many=True).data)


class BannedIPDetail(APIView):
    permission_classes = [IsAdminRole]

    @swagger_auto_schema(
        operation_summary="Lift a ban (admin)",
        responses={204: "Ban lifted", 404: "Not banned"},
    )
    def delete(self, request, banned_id):
        banned = get_object_or_404(BannedIP, id=banned_id)
        guard.lift_ban(banned)
        return Response(status=status.HTTP_204_NO_CONTENT)
