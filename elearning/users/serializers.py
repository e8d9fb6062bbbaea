"""
E-Learning User Management Serializers

This module provides serializers for user authentication, profile data
and password operations in the E-Learning system.

Serializers:
- CustomTokenObtainPairSerializer: JWT token with user metadata
- UserSummarySerializer: Compact user data embedded in other resources
- UserSerializer: Own profile incl. enrolled and created courses
- RegistrationSerializer: Self-service sign-up
- ProfileUpdateSerializer: Name, role, bio and avatar changes
- ChangePasswordSerializer / ForgotPasswordSerializer / ResetPasswordSerializer

Author: DSP Development Team
Version: 1.0.0
"""

from typing import Dict, Any
from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Profile

SELF_ASSIGNABLE_ROLES = (
    (Profile.Role.STUDENT, Profile.Role.STUDENT.label),
    (Profile.Role.INSTRUCTOR, Profile.Role.INSTRUCTOR.label),
)


def _validate_password_strength(value: str, user: User = None) -> str:
    try:
        validate_password(value, user=user)
    except DjangoValidationError as e:
        raise serializers.ValidationError(list(e.messages))
    return value


def _full_name(user: User) -> str:
    return user.get_full_name() or user.username


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT token serializer with user metadata.

    Token Payload Includes:
    - username: User identification
    - role: Platform role from the profile
    - is_staff: Staff privileges flag
    """

    @classmethod
    def get_token(cls, user: User) -> RefreshToken:
        token = super().get_token(user)
        profile, _created = Profile.objects.get_or_create(user=user)

        token["username"] = user.username
        token["role"] = profile.role
        token["is_staff"] = user.is_staff
        return token

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        data = super().validate(attrs)
        data.update(
            {
                "user_id": self.user.id,
                "username": self.user.username,
                "role": self.user.profile.role,
                "is_staff": self.user.is_staff,
            }
        )
        return data


class UserSummarySerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()
    avatar_url = serializers.CharField(source="profile.avatar_url", read_only=True, default="")

    class Meta:
        model = User
        fields = ("id", "username", "full_name", "email", "avatar_url")

    def get_full_name(self, obj: User) -> str:
        return _full_name(obj)


class _CourseSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    title = serializers.CharField()
    thumbnail_url = serializers.CharField()
    is_published = serializers.BooleanField()


class UserSerializer(serializers.ModelSerializer):
    """
    Own profile of the authenticated user.

    Includes profile attributes plus the courses the user is enrolled in
    and the courses the user created.
    """

    full_name = serializers.SerializerMethodField()
    role = serializers.CharField(source="profile.role", read_only=True)
    bio = serializers.CharField(source="profile.bio", read_only=True)
    avatar_url = serializers.CharField(source="profile.avatar_url", read_only=True)
    last_active = serializers.DateTimeField(source="profile.last_active", read_only=True)
    enrolled_courses = _CourseSummarySerializer(many=True, read_only=True)
    created_courses = _CourseSummarySerializer(many=True, read_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "role",
            "bio",
            "avatar_url",
            "is_staff",
            "date_joined",
            "last_login",
            "last_active",
            "enrolled_courses",
            "created_courses",
        )
        read_only_fields = fields

    def get_full_name(self, obj: User) -> str:
        return _full_name(obj)


class RegistrationSerializer(serializers.ModelSerializer):
    """
    Self-service sign-up.

    Fields:
    - username, email: Required, must be unique
    - first_name, last_name: Optional
    - password / password_confirm: Required, must match, Django validators apply
    - role: student (default) or instructor; admins are assigned in the admin
    - bio: Optional, max 200 characters
    """

    password = serializers.CharField(write_only=True, min_length=8, required=True)
    password_confirm = serializers.CharField(write_only=True, min_length=8, required=True)
    role = serializers.ChoiceField(
        choices=SELF_ASSIGNABLE_ROLES, required=False, default=Profile.Role.STUDENT
    )
    bio = serializers.CharField(max_length=200, required=False, allow_blank=True)
    avatar = serializers.FileField(write_only=True, required=False)

    class Meta:
        model = User
        fields = [
            "username",
            "email",
            "first_name",
            "last_name",
            "password",
            "password_confirm",
            "role",
            "bio",
            "avatar",
        ]
        extra_kwargs = {"email": {"required": True}}

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError(_("A user with this email already exists."))
        return value.lower()

    def validate_password(self, value):
        return _validate_password_strength(value)

    def validate(self, data):
        if data["password"] != data["password_confirm"]:
            raise serializers.ValidationError({"password_confirm": _("Passwords do not match")})
        return data

    def create(self, validated_data):
        password = validated_data.pop("password")
        validated_data.pop("password_confirm")
        validated_data.pop("avatar", None)
        role = validated_data.pop("role", Profile.Role.STUDENT)
        bio = validated_data.pop("bio", "")
        avatar_url = validated_data.pop("avatar_url", "")
        avatar_key = validated_data.pop("avatar_key", "")

        user = User.objects.create_user(password=password, **validated_data)

        profile, _created = Profile.objects.get_or_create(user=user)
        profile.role = role
        profile.bio = bio
        profile.avatar_url = avatar_url
        profile.avatar_key = avatar_key
        profile.save()
        return user


class ProfileUpdateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=SELF_ASSIGNABLE_ROLES, required=False)
    bio = serializers.CharField(max_length=200, required=False, allow_blank=True)
    avatar = serializers.FileField(required=False)

    def validate_avatar(self, value):
        if not (getattr(value, "content_type", "") or "").startswith("image/"):
            raise serializers.ValidationError(_("Avatar must be an image."))
        return value

    def validate_role(self, value):
        # admins keep their role, it is managed in the Django admin
        current = self.instance.profile.role
        if current == Profile.Role.ADMIN and value != current:
            raise serializers.ValidationError(_("Admin role cannot be changed here."))
        return value

    def update(self, instance: User, validated_data):
        validated_data.pop("avatar", None)
        profile = instance.profile

        user_fields = [f for f in ("first_name", "last_name") if f in validated_data]
        for field in user_fields:
            setattr(instance, field, validated_data[field])
        if user_fields:
            instance.save(update_fields=user_fields)

        for field in ("role", "bio", "avatar_url", "avatar_key"):
            if field in validated_data:
                setattr(profile, field, validated_data[field])
        profile.save()
        return instance


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, style={"input_type": "password"})
    new_password = serializers.CharField(
        write_only=True, min_length=8, style={"input_type": "password"}
    )

    def validate_current_password(self, value):
        if not self.context["request"].user.check_password(value):
            raise serializers.ValidationError(_("Current password is incorrect."))
        return value

    def validate(self, data):
        if data["current_password"] == data["new_password"]:
            raise serializers.ValidationError(
                {"new_password": _("New password must be different from current password.")}
            )
        _validate_password_strength(data["new_password"], self.context["request"].user)
        return data

    def save(self, user: User) -> User:
        user.set_password(self.validated_data["new_password"])
        user.save(update_fields=["password"])
        return user


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    password = serializers.CharField(write_only=True, min_length=8)
    password_confirm = serializers.CharField(write_only=True, min_length=8)

    def validate(self, data):
        if data["password"] != data["password_confirm"]:
            raise serializers.ValidationError({"password_confirm": _("Passwords do not match")})
        _validate_password_strength(data["password"], self.context.get("user"))
        return data
