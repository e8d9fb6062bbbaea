"""
E-Learning User Profile Views

Views:
- ProfileView: Own profile (GET) and profile updates incl. avatar (PATCH)
- ChangePasswordView: Change password with the current password
- ForgotPasswordView / ResetPasswordView: E-mail based password reset
- DeleteAccountView: Remove own account

Author: DSP Development Team
Version: 1.0.0
"""

import logging

from django.conf import settings
from django.contrib.auth.models import User
from django.contrib.auth.tokens import default_token_generator
from django.db import transaction
from django.db.models import ProtectedError
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ...services.media_storage import MediaStorageError, MediaStorageService
from ...services.notifications import send_password_reset_email
from ..models import Profile
from ..serializers import (
    ChangePasswordSerializer,
    ForgotPasswordSerializer,
    ProfileUpdateSerializer,
    ResetPasswordSerializer,
    UserSerializer,
)
from .auth_views import clear_token_cookies

logger = logging.getLogger(__name__)


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        profile, _created = Profile.objects.get_or_create(user=request.user)
        profile.touch()
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        extra = {}
        storage = None
        old_avatar_key = request.user.profile.avatar_key
        avatar = serializer.validated_data.get("avatar")
        if avatar is not None:
            storage = MediaStorageService()
            try:
                stored = storage.upload(avatar, "avatars")
            except MediaStorageError as e:
                return Response({"detail": str(e)}, status=status.HTTP_502_BAD_GATEWAY)
            extra = {"avatar_url": stored.url, "avatar_key": stored.key}

        user = serializer.save(**extra)
        if storage and old_avatar_key:
            storage.delete_quietly(old_avatar_key)

        return Response(UserSerializer(user).data)


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def patch(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        serializer.save(request.user)
        logger.info("User %s changed password", request.user.pk)
        return Response({"detail": _("Password changed successfully.")})


class ForgotPasswordView(APIView):
    """
    Send a reset link if the address belongs to an account. The response is
    the same either way.
    """

    permission_classes = [AllowAny]

    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = User.objects.filter(
            email__iexact=serializer.validated_data["email"], is_active=True
        ).first()
        if user is not None:
            uidb64 = urlsafe_base64_encode(force_bytes(user.pk))
            token = default_token_generator.make_token(user)
            reset_url = f"{settings.FRONTEND_URL}/reset-password/{uidb64}/{token}"
            send_password_reset_email(user, reset_url)

        return Response(
            {"detail": _("If the address is registered, a reset link has been sent.")}
        )


class ResetPasswordView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, uidb64: str, token: str):
        try:
            user = User.objects.get(pk=force_str(urlsafe_base64_decode(uidb64)))
        except (User.DoesNotExist, ValueError, TypeError, OverflowError):
            user = None

        if user is None or not default_token_generator.check_token(user, token):
            return Response(
                {"detail": _("Invalid or expired reset token.")},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = ResetPasswordSerializer(data=request.data, context={"user": user})
        serializer.is_valid(raise_exception=True)
        user.set_password(serializer.validated_data["password"])
        user.save(update_fields=["password"])
        logger.info("User %s reset password", user.pk)
        return Response({"detail": _("Password reset successful.")})


class DeleteAccountView(APIView):
    """
    Delete the current account and its avatar.

    Accounts referenced by purchase records are deactivated instead, since
    the purchase history is kept.
    """

    permission_classes = [IsAuthenticated]

    def delete(self, request):
        user = request.user
        avatar_key = getattr(getattr(user, "profile", None), "avatar_key", "")

        try:
            with transaction.atomic():
                user.delete()
            deleted = True
        except ProtectedError:
            user.is_active = False
            user.save(update_fields=["is_active"])
            deleted = False
            logger.info("User %s has purchase history, account deactivated", user.pk)

        if deleted and avatar_key:
            try:
                MediaStorageService().delete(avatar_key)
            except MediaStorageError:
                logger.warning("Avatar %s of deleted account could not be removed", avatar_key)

        response = Response(
            {"detail": _("Account deleted.") if deleted else _("Account deactivated.")},
            status=status.HTTP_200_OK,
        )
        return clear_token_cookies(response)
