"""
E-Learning Course Catalog Models

Models:
- Course: Purchasable learning unit authored by an admin
- Lecture: Ordered video lesson inside a course
- Enrollment: Access edge between a user and a course

The enrollment edge is a single through table. It is visible from both
sides as ``user.enrolled_courses`` and ``course.enrolled_students`` so the
two views can never disagree. Enrollments are only ever written with set
semantics (``get_or_create``); see ``Enrollment.grant``.

Derived course totals (lecture count, duration) are recomputed explicitly
by the operations that change lectures via ``Course.recompute_totals``.

Author: DSP Development Team
Version: 1.0.0
"""

from decimal import Decimal
from typing import Tuple

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum
from django.utils.translation import gettext_lazy as _


class Course(models.Model):
    """
    A course offered on the platform.

    The ``price`` is the current list price; purchases snapshot it at
    checkout time so later price changes never affect open purchases.
    """

    class Level(models.TextChoices):
        BEGINNER = "beginner", _("Beginner")
        INTERMEDIATE = "intermediate", _("Intermediate")
        ADVANCED = "advanced", _("Advanced")

    title = models.CharField(
        max_length=100,
        verbose_name=_("Title"),
    )
    subtitle = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_("Subtitle"),
    )
    description = models.TextField(
        max_length=5000,
        blank=True,
        verbose_name=_("Description"),
    )
    category = models.CharField(
        max_length=100,
        verbose_name=_("Category"),
        db_index=True,
    )
    level = models.CharField(
        max_length=20,
        choices=Level.choices,
        default=Level.BEGINNER,
        verbose_name=_("Level"),
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        verbose_name=_("Price"),
        help_text=_("List price in major currency units"),
    )
    thumbnail_url = models.URLField(
        max_length=500,
        verbose_name=_("Thumbnail URL"),
    )
    thumbnail_key = models.CharField(
        max_length=500,
        blank=True,
        verbose_name=_("Thumbnail Storage Key"),
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="created_courses",
        verbose_name=_("Owner"),
        help_text=_("Admin who created the course"),
    )
    instructors = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="instructed_courses",
        blank=True,
        verbose_name=_("Instructors"),
    )
    enrolled_students = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="Enrollment",
        related_name="enrolled_courses",
        blank=True,
        verbose_name=_("Enrolled Students"),
    )
    is_published = models.BooleanField(
        default=False,
        verbose_name=_("Published"),
    )
    total_duration = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Total Duration"),
        help_text=_("Sum of lecture durations in seconds"),
    )
    total_lectures = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Total Lectures"),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Course")
        verbose_name_plural = _("Courses")
        ordering = ["-created_at"]
        db_table = "elearning_course"
        indexes = [
            models.Index(fields=["is_published", "category"], name="elearning_course_pub_cat_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    def recompute_totals(self) -> Tuple[int, int]:
        """
        Recalculate lecture count and total duration from the lectures table.

        Returns:
            (total_lectures, total_duration)
        """
        aggregate = self.lectures.aggregate(total=Sum("duration"))
        self.total_lectures = self.lectures.count()
        self.total_duration = int(aggregate["total"] or 0)
        self.save(update_fields=["total_lectures", "total_duration", "updated_at"])
        return self.total_lectures, self.total_duration

    def is_enrolled(self, user) -> bool:
        if not user or not user.is_authenticated:
            return False
        return Enrollment.objects.filter(course=self, user=user).exists()

    def has_full_access(self, user) -> bool:
        """
        Check if a user may see every lecture of this course.

        Owners, instructors and enrolled students get full access; everybody
        else only sees preview lectures.
        """
        if not user or not user.is_authenticated:
            return False
        if self.owner_id == user.id:
            return True
        if self.instructors.filter(pk=user.pk).exists():
            return True
        return self.is_enrolled(user)


class Lecture(models.Model):
    """Video lesson inside a course. ``order`` is unique per course."""

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="lectures",
        verbose_name=_("Course"),
    )
    title = models.CharField(max_length=100, verbose_name=_("Title"))
    description = models.TextField(max_length=500, blank=True, verbose_name=_("Description"))
    video_url = models.URLField(max_length=500, verbose_name=_("Video URL"))
    video_key = models.CharField(
        max_length=500,
        blank=True,
        verbose_name=_("Video Storage Key"),
    )
    duration = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Duration"),
        help_text=_("Duration in seconds"),
    )
    is_preview = models.BooleanField(
        default=False,
        verbose_name=_("Preview"),
        help_text=_("Preview lectures are visible without enrollment"),
    )
    order = models.PositiveIntegerField(verbose_name=_("Order"))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Lecture")
        verbose_name_plural = _("Lectures")
        unique_together = ("course", "order")
        ordering = ["course", "order"]
        db_table = "elearning_lecture"

    def __str__(self) -> str:
        return f"{self.course.title} - {self.order}. {self.title}"


class Enrollment(models.Model):
    """
    Access edge between a user and a course.

    Created by the purchase reconciliation once a purchase completes and
    removed again on refund.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="enrollments",
        verbose_name=_("User"),
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="enrollments",
        verbose_name=_("Course"),
    )
    purchase = models.ForeignKey(
        "elearning.PurchaseRecord",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="enrollments",
        verbose_name=_("Purchase"),
        help_text=_("Purchase that granted this enrollment"),
    )
    enrolled_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Enrolled At"))

    class Meta:
        verbose_name = _("Enrollment")
        verbose_name_plural = _("Enrollments")
        unique_together = ("user", "course")
        ordering = ["-enrolled_at"]
        db_table = "elearning_enrollment"

    def __str__(self) -> str:
        return f"{self.user} -> {self.course}"

    @classmethod
    def grant(cls, user, course, purchase=None) -> Tuple["Enrollment", bool]:
        """Add the edge if absent. Returns (enrollment, created)."""
        return cls.objects.get_or_create(
            user=user, course=course, defaults={"purchase": purchase}
        )

    @classmethod
    def revoke(cls, user, course) -> int:
        deleted, _by_model = cls.objects.filter(user=user, course=course).delete()
        return deleted
