"""
E-Learning Course Views

Views:
- CourseCreateView: Admins create courses (thumbnail upload)
- CourseSearchView: Filter published courses by text, category, level, price
- PublishedCourseListView: Paginated catalog
- MyCoursesView: Courses created by the current admin
- CourseDetailView: Course page (GET) and owner updates (PATCH)
- LectureListCreateView: Lecture list with preview filtering (GET) and
  owner lecture upload (POST)

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.db.models import Max, Q
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response

from ..pagination import StandardResultsSetPagination
from ..permissions import IsCourseAdmin, IsCourseOwner
from ..services.media_storage import MediaStorageError, MediaStorageService
from .models import Course, Lecture
from .serializers import (
    CourseDetailSerializer,
    CourseListSerializer,
    CourseWriteSerializer,
    LectureCreateSerializer,
    LectureSerializer,
)

logger = logging.getLogger(__name__)

SORT_OPTIONS = {
    "price-low": ["price", "-created_at"],
    "price-high": ["-price", "-created_at"],
    "newest": ["-created_at"],
}


def _visible_courses(user):
    """Published courses plus unpublished ones the user owns or teaches."""
    queryset = Course.objects.select_related("owner")
    if user and user.is_authenticated:
        return queryset.filter(
            Q(is_published=True) | Q(owner=user) | Q(instructors=user)
        ).distinct()
    return queryset.filter(is_published=True)


class CourseCreateView(generics.CreateAPIView):
    serializer_class = CourseWriteSerializer
    permission_classes = [permissions.IsAuthenticated, IsCourseAdmin]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        storage = MediaStorageService()
        try:
            thumbnail = storage.upload(serializer.validated_data["thumbnail"], "thumbnails")
        except MediaStorageError as e:
            return Response({"detail": str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        try:
            course = serializer.save(
                owner=request.user,
                thumbnail_url=thumbnail.url,
                thumbnail_key=thumbnail.key,
            )
        except IntegrityError:
            storage.delete_quietly(thumbnail.key)
            raise

        logger.info("Course %s created by user %s", course.pk, request.user.pk)
        return Response(
            CourseDetailSerializer(course, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )


class CourseSearchView(generics.ListAPIView):
    serializer_class = CourseListSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        params = self.request.query_params
        queryset = Course.objects.filter(is_published=True).select_related("owner")

        query = params.get("query", "").strip()
        if query:
            queryset = queryset.filter(
                Q(title__icontains=query)
                | Q(subtitle__icontains=query)
                | Q(description__icontains=query)
            )

        categories = [c for c in params.get("categories", "").split(",") if c]
        if categories:
            queryset = queryset.filter(category__in=categories)

        level = params.get("level")
        if level:
            queryset = queryset.filter(level=level)

        for param, lookup in (("min_price", "price__gte"), ("max_price", "price__lte")):
            value = params.get(param)
            if value:
                try:
                    queryset = queryset.filter(**{lookup: Decimal(value)})
                except InvalidOperation:
                    continue

        return queryset.order_by(*SORT_OPTIONS.get(params.get("sort_by"), SORT_OPTIONS["newest"]))


class PublishedCourseListView(generics.ListAPIView):
    queryset = Course.objects.filter(is_published=True).select_related("owner")
    serializer_class = CourseListSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = StandardResultsSetPagination


class MyCoursesView(generics.ListAPIView):
    serializer_class = CourseListSerializer
    permission_classes = [permissions.IsAuthenticated, IsCourseAdmin]

    def get_queryset(self):
        return Course.objects.filter(owner=self.request.user).select_related("owner")


class CourseDetailView(generics.RetrieveUpdateAPIView):
    http_method_names = ["get", "patch", "head", "options"]

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsCourseOwner()]

    def get_queryset(self):
        return _visible_courses(self.request.user).prefetch_related("instructors", "lectures")

    def get_serializer_class(self):
        if self.request.method in permissions.SAFE_METHODS:
            return CourseDetailSerializer
        return CourseWriteSerializer

    def update(self, request, *args, **kwargs):
        course = self.get_object()
        serializer = self.get_serializer(course, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        extra = {}
        old_thumbnail_key = None
        storage = None
        upload = serializer.validated_data.get("thumbnail")
        if upload is not None:
            storage = MediaStorageService()
            try:
                thumbnail = storage.upload(upload, "thumbnails")
            except MediaStorageError as e:
                return Response({"detail": str(e)}, status=status.HTTP_502_BAD_GATEWAY)
            old_thumbnail_key = course.thumbnail_key
            extra = {"thumbnail_url": thumbnail.url, "thumbnail_key": thumbnail.key}

        course = serializer.save(**extra)
        if storage and old_thumbnail_key:
            storage.delete_quietly(old_thumbnail_key)

        return Response(CourseDetailSerializer(course, context={"request": request}).data)


class LectureListCreateView(generics.ListCreateAPIView):
    """
    GET returns every lecture to owners, instructors and enrolled students
    and only preview lectures to everybody else.
    """

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get_course(self) -> Course:
        if not hasattr(self, "_course"):
            self._course = get_object_or_404(
                _visible_courses(self.request.user), pk=self.kwargs["course_id"]
            )
        return self._course

    def get_serializer_class(self):
        if self.request.method == "POST":
            return LectureCreateSerializer
        return LectureSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["course"] = self.get_course()
        return context

    def get_queryset(self):
        course = self.get_course()
        lectures = course.lectures.all()
        if not course.has_full_access(self.request.user):
            lectures = lectures.filter(is_preview=True)
        return lectures.order_by("order")

    def create(self, request, *args, **kwargs):
        course = self.get_course()
        if course.owner_id != request.user.id:
            self.permission_denied(request, message=IsCourseOwner.message)

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        storage = MediaStorageService()
        try:
            video = storage.upload(
                serializer.validated_data.pop("video"), f"lectures/{course.pk}"
            )
        except MediaStorageError as e:
            return Response({"detail": str(e)}, status=status.HTTP_502_BAD_GATEWAY)

        order = serializer.validated_data.get("order")
        if order is None:
            # next free position
            order = (course.lectures.aggregate(last=Max("order"))["last"] or 0) + 1

        try:
            with transaction.atomic():
                lecture = serializer.save(
                    course=course,
                    order=order,
                    video_url=video.url,
                    video_key=video.key,
                )
                course.recompute_totals()
        except IntegrityError:
            storage.delete_quietly(video.key)
            return Response(
                {"order": ["A lecture with this order already exists in the course."]},
                status=status.HTTP_400_BAD_REQUEST,
            )

        logger.info("Lecture %s added to course %s", lecture.pk, course.pk)
        return Response(LectureSerializer(lecture).data, status=status.HTTP_201_CREATED)
