"""
E-Learning User Authentication Views

This module provides authentication endpoints for the E-Learning system.

Views:
- CustomTokenObtainPairView: Login, JWT tokens stored in HTTP-only cookies
- CustomTokenRefreshView: Refresh using the refresh token cookie
- LogoutView: Blacklist refresh token and clear cookies
- RegistrationView: Public self-service sign-up

Author: DSP Development Team
Version: 1.0.0
"""

import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils.translation import gettext_lazy as _
from rest_framework import status, generics
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from ...services.media_storage import MediaStorageError, MediaStorageService
from ..serializers import CustomTokenObtainPairSerializer, RegistrationSerializer

logger = logging.getLogger(__name__)


def set_token_cookies(response, access=None, refresh=None):
    """
    Store JWT tokens in HTTP-only cookies:
     * httponly=True -> no JavaScript access
     * secure=True -> HTTPS only
     * samesite="None" -> required for the cross-site frontend
    """
    if refresh:
        response.set_cookie(
            "refresh_token",
            refresh,
            httponly=True,
            secure=True,
            samesite="None",
            path="/",
            max_age=settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"],
        )
    if access:
        response.set_cookie(
            "access_token",
            access,
            httponly=True,
            secure=True,
            samesite="None",
            path="/",
            max_age=settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"],
        )
    return response


def clear_token_cookies(response):
    response.delete_cookie("refresh_token", samesite="None")
    response.delete_cookie("access_token", samesite="None")
    return response


class CustomTokenObtainPairView(TokenObtainPairView):
    """
    Login endpoint. Tokens are removed from the JSON body and set as cookies.
    """

    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == 200:
            data = response.data
            set_token_cookies(
                response,
                access=data.pop("access", None),
                refresh=data.pop("refresh", None),
            )
        return response


class CustomTokenRefreshView(TokenRefreshView):
    """
    Refresh endpoint reading the refresh token from its cookie and writing
    the new tokens back into cookies.
    """

    def post(self, request, *args, **kwargs):
        refresh_token = request.COOKIES.get("refresh_token")
        if not refresh_token:
            return Response(
                {"detail": "Refresh token not provided"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = TokenRefreshSerializer(data={"refresh": refresh_token})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        response = Response(status=status.HTTP_200_OK)
        return set_token_cookies(
            response, access=data.get("access"), refresh=data.get("refresh")
        )


class LogoutView(APIView):
    """
    Blacklist the refresh token (if any) and delete both token cookies.
    Always answers 205.
    """

    permission_classes = [AllowAny]

    def post(self, request):
        refresh_token = request.COOKIES.get("refresh_token")
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                logger.info("Logout with unusable refresh token: %s", e)
        response = JsonResponse({"detail": "Successfully logged out."}, status=205)
        return clear_token_cookies(response)


class RegistrationView(generics.CreateAPIView):
    """
    Public sign-up endpoint.

    Request Body Example (multipart or JSON):
    {
        "username": "johndoe",
        "email": "johndoe@example.com",
        "password": "secret1234",
        "password_confirm": "secret1234",
        "role": "student",
        "bio": "Data enthusiast",
        "avatar": <file>
    }
    """

    serializer_class = RegistrationSerializer
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        extra = {}
        avatar = serializer.validated_data.get("avatar")
        if avatar is not None:
            try:
                stored = MediaStorageService().upload(avatar, "avatars")
            except MediaStorageError as e:
                return Response({"detail": str(e)}, status=status.HTTP_502_BAD_GATEWAY)
            extra = {"avatar_url": stored.url, "avatar_key": stored.key}

        user = serializer.save(**extra)
        logger.info("Registered user %s", user.pk)
        return Response(
            {"detail": _("Registration successful."), "user_id": user.pk},
            status=status.HTTP_201_CREATED,
        )
