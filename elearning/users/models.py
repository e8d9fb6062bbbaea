"""
E-Learning User Management Models

This module defines the user-related models for the E-Learning system,
extending Django's built-in User model with additional profile functionality
and automatic profile management through Django signals.

Models:
- Profile: Platform role, public profile data and avatar asset

Features:
- Automatic profile creation for new users
- Role based authoring rights (only admins create courses)
- Avatar stored in object storage, referenced by URL and storage key

Author: DSP Development Team
Version: 1.0.0
"""

from django.db import models
from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Profile(models.Model):
    """
    Extended user profile model for the E-Learning system.

    Attributes:
        user: One-to-one relationship with Django User model
        role: Platform role deciding which operations the user may perform
        bio: Short public description
        avatar_url: Public URL of the avatar image
        avatar_key: Storage key needed to delete or replace the avatar
        last_active: Updated on profile access
    """

    class Role(models.TextChoices):
        STUDENT = "student", _("Student")
        INSTRUCTOR = "instructor", _("Instructor")
        ADMIN = "admin", _("Admin")

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        verbose_name=_("User"),
        help_text=_("Associated user account"),
    )

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.STUDENT,
        verbose_name=_("Role"),
        help_text=_("Platform role of the user"),
    )

    bio = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_("Bio"),
    )

    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        verbose_name=_("Avatar URL"),
    )

    avatar_key = models.CharField(
        max_length=500,
        blank=True,
        verbose_name=_("Avatar Storage Key"),
        help_text=_("Object storage key used to delete the avatar"),
    )

    last_active = models.DateTimeField(
        default=timezone.now,
        verbose_name=_("Last Active"),
    )

    class Meta:
        verbose_name = _("User Profile")
        verbose_name_plural = _("User Profiles")
        db_table = "elearning_profile"

    def __str__(self) -> str:
        return f"{self.user.username} Profile"

    def __repr__(self) -> str:
        return f"<Profile(user={self.user.username}, role={self.role})>"

    @property
    def is_course_admin(self) -> bool:
        """True if the user may author courses."""
        return self.role == self.Role.ADMIN

    def touch(self) -> None:
        """Record activity without touching other columns."""
        self.last_active = timezone.now()
        self.save(update_fields=["last_active"])


# --- Signal Handlers for Automatic Profile Management ---


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created: bool, **kwargs) -> None:
    """
    Automatically create a user profile when a new user is created.

    Args:
        sender: The User model class
        instance: The actual User instance that was saved
        created: Boolean indicating if this is a new instance
        **kwargs: Additional signal arguments
    """
    if created:
        Profile.objects.get_or_create(user=instance)
