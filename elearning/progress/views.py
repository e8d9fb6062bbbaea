"""
E-Learning Progress Views

Views:
- CourseProgressView: Current progress of a course, touches last accessed
- LectureProgressUpdateView: Mark a lecture watched/completed
- CompleteCourseView: Mark every lecture completed
- ResetCourseProgressView: Start the course over

Progress exists only for users with full access to a course (enrolled,
owner, instructor). Completion is recalculated explicitly after each change.

Author: DSP Development Team
Version: 1.0.0
"""

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..courses.models import Course
from .models import CourseProgress, LectureProgress
from .serializers import CourseProgressSerializer, LectureProgressUpdateSerializer

logger = logging.getLogger(__name__)


class CourseProgressMixin:
    permission_classes = [permissions.IsAuthenticated]

    def get_progress(self, request, course_id: int) -> CourseProgress:
        course = get_object_or_404(Course, pk=course_id)
        if not course.has_full_access(request.user):
            self.permission_denied(request, message="You are not enrolled in this course.")
        progress, created = CourseProgress.objects.get_or_create(
            user=request.user, course=course
        )
        if created:
            logger.info("Started progress for user %s in course %s", request.user.pk, course.pk)
        return progress

    def respond(self, progress: CourseProgress) -> Response:
        progress = CourseProgress.objects.prefetch_related("lecture_progress__lecture").get(
            pk=progress.pk
        )
        return Response(CourseProgressSerializer(progress).data)


class CourseProgressView(CourseProgressMixin, APIView):
    def get(self, request, course_id: int):
        progress = self.get_progress(request, course_id)
        progress.last_accessed = timezone.now()
        progress.save(update_fields=["last_accessed"])
        return self.respond(progress)


class LectureProgressUpdateView(CourseProgressMixin, APIView):
    def patch(self, request, course_id: int, lecture_id: int):
        progress = self.get_progress(request, course_id)
        lecture = get_object_or_404(progress.course.lectures, pk=lecture_id)

        serializer = LectureProgressUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            entry, _created = LectureProgress.objects.get_or_create(
                course_progress=progress, lecture=lecture
            )
            entry.is_completed = data.get("is_completed", True)
            if "watch_time" in data:
                entry.watch_time = max(entry.watch_time, data["watch_time"])
            entry.last_watched = timezone.now()
            entry.save()

            progress.last_accessed = timezone.now()
            progress.save(update_fields=["last_accessed"])
            progress.recompute_completion()

        return self.respond(progress)


class CompleteCourseView(CourseProgressMixin, APIView):
    def patch(self, request, course_id: int):
        progress = self.get_progress(request, course_id)
        now = timezone.now()

        with transaction.atomic():
            for lecture in progress.course.lectures.all():
                LectureProgress.objects.update_or_create(
                    course_progress=progress,
                    lecture=lecture,
                    defaults={"is_completed": True, "last_watched": now},
                )
            progress.recompute_completion()

        return self.respond(progress)


class ResetCourseProgressView(CourseProgressMixin, APIView):
    def patch(self, request, course_id: int):
        progress = self.get_progress(request, course_id)

        with transaction.atomic():
            progress.lecture_progress.update(is_completed=False, watch_time=0)
            progress.recompute_completion()

        return Response(
            {"detail": "Course progress has been reset.", **CourseProgressSerializer(progress).data},
            status=status.HTTP_200_OK,
        )
