"""
Tests for course reviews and the rating summary.
"""

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from elearning.reviews.models import Review
from elearning.users.models import Profile

from ..helpers import create_course, create_user


class CourseReviewTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("kursadmin", role=Profile.Role.ADMIN)
        cls.anna = create_user("anna")
        cls.ben = create_user("ben")
        cls.course = create_course(cls.admin)
        cls.draft = create_course(cls.admin, "Draft", is_published=False)

    def setUp(self):
        self.reviews_url = reverse("elearning:courses:course-reviews", args=[self.course.pk])
        self.rating_url = reverse("elearning:courses:course-rating", args=[self.course.pk])

    def test_put_creates_then_updates(self):
        self.client.force_authenticate(user=self.anna)

        created = self.client.put(self.reviews_url, {"comment": "Gut", "rating": 4}, format="json")
        updated = self.client.put(
            self.reviews_url, {"comment": "Sehr gut", "rating": 5}, format="json"
        )

        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertEqual(updated.status_code, status.HTTP_200_OK)
        review = Review.objects.get(user=self.anna, course=self.course)
        self.assertEqual(review.rating, 5)
        self.assertEqual(review.comment, "Sehr gut")

    def test_rating_out_of_range(self):
        self.client.force_authenticate(user=self.anna)
        response = self.client.put(self.reviews_url, {"comment": "?", "rating": 6}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_put_requires_authentication(self):
        response = self.client.put(self.reviews_url, {"comment": "x", "rating": 3}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_unpublished_course(self):
        self.client.force_authenticate(user=self.anna)
        url = reverse("elearning:courses:course-reviews", args=[self.draft.pk])
        response = self.client.put(url, {"comment": "x", "rating": 3}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_and_rating_summary(self):
        Review.objects.create(user=self.anna, course=self.course, comment="Top", rating=5)
        Review.objects.create(user=self.ben, course=self.course, comment="Okay", rating=4)

        listing = self.client.get(self.reviews_url)
        self.assertEqual(listing.data["count"], 2)

        summary = self.client.get(self.rating_url).data
        self.assertEqual(summary["average_rating"], 4.5)
        self.assertEqual(summary["total_reviews"], 2)
        self.assertEqual(
            summary["rating_breakdown"], {"5": 1, "4": 1, "3": 0, "2": 0, "1": 0}
        )

    def test_rating_without_reviews(self):
        summary = self.client.get(self.rating_url).data
        self.assertEqual(summary["average_rating"], 0)
        self.assertEqual(summary["total_reviews"], 0)
