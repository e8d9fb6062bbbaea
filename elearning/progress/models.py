"""
E-Learning Progress Tracking Models

Models:
- CourseProgress: Per user and course completion state
- LectureProgress: Per lecture completion and watch time

``completion_percentage`` is a derived value. It is recalculated by the
operations that change lecture progress through ``recompute_completion``
and never inside ``save()``.

Author: DSP Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.core.validators import MaxValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class CourseProgress(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="course_progress",
        verbose_name=_("User"),
    )
    course = models.ForeignKey(
        "elearning.Course",
        on_delete=models.CASCADE,
        related_name="progress_entries",
        verbose_name=_("Course"),
    )
    is_completed = models.BooleanField(default=False, verbose_name=_("Completed"))
    completion_percentage = models.PositiveSmallIntegerField(
        default=0,
        validators=[MaxValueValidator(100)],
        verbose_name=_("Completion Percentage"),
    )
    last_accessed = models.DateTimeField(default=timezone.now, verbose_name=_("Last Accessed"))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Course Progress")
        verbose_name_plural = _("Course Progress")
        unique_together = ("user", "course")
        ordering = ["-last_accessed"]
        db_table = "elearning_course_progress"

    def __str__(self) -> str:
        return f"{self.user} - {self.course} ({self.completion_percentage}%)"

    def recompute_completion(self) -> int:
        """
        Recalculate completion from lecture progress.

        The denominator is the number of lectures in the course, falling back
        to the number of tracked lectures for courses without lectures.

        Returns:
            The new completion percentage
        """
        completed = self.lecture_progress.filter(is_completed=True).count()
        total = self.course.lectures.count() or self.lecture_progress.count()
        self.completion_percentage = round(completed / total * 100) if total else 0
        self.is_completed = self.completion_percentage == 100
        self.save(update_fields=["completion_percentage", "is_completed", "updated_at"])
        return self.completion_percentage


class LectureProgress(models.Model):
    course_progress = models.ForeignKey(
        CourseProgress,
        on_delete=models.CASCADE,
        related_name="lecture_progress",
        verbose_name=_("Course Progress"),
    )
    lecture = models.ForeignKey(
        "elearning.Lecture",
        on_delete=models.CASCADE,
        related_name="progress_entries",
        verbose_name=_("Lecture"),
    )
    is_completed = models.BooleanField(default=False, verbose_name=_("Completed"))
    watch_time = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Watch Time"),
        help_text=_("Watched seconds"),
    )
    last_watched = models.DateTimeField(default=timezone.now, verbose_name=_("Last Watched"))

    class Meta:
        verbose_name = _("Lecture Progress")
        verbose_name_plural = _("Lecture Progress")
        unique_together = ("course_progress", "lecture")
        ordering = ["lecture__order"]
        db_table = "elearning_lecture_progress"

    def __str__(self) -> str:
        return f"{self.course_progress.user} - {self.lecture}"
