"""
E-Learning Course Review Models

One review per user and course; submitting again updates the existing one.

Author: DSP Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Review(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews",
        verbose_name=_("User"),
    )
    course = models.ForeignKey(
        "elearning.Course",
        on_delete=models.CASCADE,
        related_name="reviews",
        verbose_name=_("Course"),
    )
    comment = models.TextField(max_length=2000, verbose_name=_("Comment"))
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        verbose_name=_("Rating"),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Review")
        verbose_name_plural = _("Reviews")
        unique_together = ("user", "course")
        ordering = ["-created_at"]
        db_table = "elearning_review"

    def __str__(self) -> str:
        return f"{self.user} - {self.course} ({self.rating}/5)"
