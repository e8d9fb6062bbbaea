"""
E-Learning Review Views

Views:
- CourseReviewsView: Paginated reviews of a course (GET) and upsert of the
  current user's review (PUT)
- CourseRatingView: Average rating, review count and 5..1 breakdown

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Avg, Count
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..courses.models import Course
from ..pagination import ReviewResultsSetPagination
from .models import Review
from .serializers import ReviewSerializer

logger = logging.getLogger(__name__)


class CourseReviewsView(generics.ListAPIView):
    serializer_class = ReviewSerializer
    pagination_class = ReviewResultsSetPagination

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get_course(self) -> Course:
        return get_object_or_404(Course, pk=self.kwargs["course_id"], is_published=True)

    def get_queryset(self):
        return Review.objects.filter(course=self.get_course()).select_related(
            "user", "user__profile"
        )

    def put(self, request, course_id: int):
        course = self.get_course()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review, created = Review.objects.update_or_create(
            user=request.user,
            course=course,
            defaults={
                "comment": serializer.validated_data["comment"],
                "rating": serializer.validated_data["rating"],
            },
        )
        logger.info(
            "Review %s %s for course %s", review.pk, "created" if created else "updated", course.pk
        )
        return Response(
            self.get_serializer(review).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class CourseRatingView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, course_id: int):
        course = get_object_or_404(Course, pk=course_id, is_published=True)
        reviews = Review.objects.filter(course=course)

        summary = reviews.aggregate(average=Avg("rating"), total=Count("id"))
        counts = dict(reviews.order_by().values_list("rating").annotate(n=Count("id")))
        average = summary["average"] or 0

        return Response(
            {
                "course_id": course.pk,
                "average_rating": float(
                    Decimal(str(average)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
                ),
                "total_reviews": summary["total"],
                "rating_breakdown": {
                    str(stars): counts.get(stars, 0) for stars in range(5, 0, -1)
                },
            }
        )
