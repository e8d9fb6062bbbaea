"""
API tests for the course catalog and lecture management. Media uploads go
through a mocked MediaStorageService.
"""

from decimal import Decimal
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from elearning.courses.models import Course, Enrollment, Lecture
from elearning.services.media_storage import StoredMedia
from elearning.users.models import Profile

from ..helpers import create_course, create_lecture, create_user

COURSE_CREATE_URL = reverse("elearning:courses:course-create")
COURSE_SEARCH_URL = reverse("elearning:courses:course-search")
COURSE_PUBLISHED_URL = reverse("elearning:courses:course-published")


def _image():
    return SimpleUploadedFile("cover.png", b"\x89PNG fake", content_type="image/png")


def _video():
    return SimpleUploadedFile("intro.mp4", b"fake video", content_type="video/mp4")


def _stored(key):
    return StoredMedia(
        url=f"https://cdn.example.com/{key}", key=key, content_type="application/octet-stream", size=10
    )


@mock.patch("elearning.courses.views.MediaStorageService")
class CourseCreateTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("kursadmin", role=Profile.Role.ADMIN)
        cls.instructor = create_user("dozentin", role=Profile.Role.INSTRUCTOR)
        cls.student = create_user("student")

    def _payload(self, **kwargs):
        payload = {
            "title": "Django in Practice",
            "subtitle": "Build real APIs",
            "description": "Models, views and serializers.",
            "category": "programming",
            "level": Course.Level.INTERMEDIATE,
            "price": "999.00",
            "is_published": True,
            "thumbnail": _image(),
        }
        payload.update(kwargs)
        return payload

    def test_admin_creates_course(self, storage_cls):
        storage_cls.return_value.upload.return_value = _stored("thumbnails/cover.png")
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            COURSE_CREATE_URL,
            self._payload(instructor_emails=[self.instructor.email]),
            format="multipart",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        course = Course.objects.get(pk=response.data["id"])
        self.assertEqual(course.owner, self.admin)
        self.assertEqual(course.thumbnail_key, "thumbnails/cover.png")
        self.assertEqual(course.price, Decimal("999.00"))
        self.assertEqual(list(course.instructors.all()), [self.instructor])

    def test_student_cannot_create_course(self, storage_cls):
        self.client.force_authenticate(user=self.student)
        response = self.client.post(COURSE_CREATE_URL, self._payload(), format="multipart")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        storage_cls.return_value.upload.assert_not_called()

    def test_thumbnail_required(self, storage_cls):
        self.client.force_authenticate(user=self.admin)
        payload = self._payload()
        del payload["thumbnail"]

        response = self.client.post(COURSE_CREATE_URL, payload, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("thumbnail", response.data)

    def test_thumbnail_must_be_image(self, storage_cls):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            COURSE_CREATE_URL, self._payload(thumbnail=_video()), format="multipart"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_instructor(self, storage_cls):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            COURSE_CREATE_URL,
            self._payload(instructor_emails=["nobody@example.com"]),
            format="multipart",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Course.objects.exists())


class CourseCatalogTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("kursadmin", role=Profile.Role.ADMIN)
        cls.student = create_user("student")
        cls.python = create_course(cls.admin, "Python Basics", price=Decimal("499.00"))
        cls.ml = create_course(
            cls.admin,
            "Machine Learning",
            category="data-science",
            level=Course.Level.ADVANCED,
            price=Decimal("1999.00"),
        )
        cls.draft = create_course(cls.admin, "Draft Course", is_published=False)

    def test_published_list_hides_drafts(self):
        response = self.client.get(COURSE_PUBLISHED_URL)
        titles = {course["title"] for course in response.data["results"]}
        self.assertEqual(titles, {"Python Basics", "Machine Learning"})

    def test_search_by_text_and_category(self):
        response = self.client.get(COURSE_SEARCH_URL, {"query": "python"})
        self.assertEqual([c["title"] for c in response.data["results"]], ["Python Basics"])

        response = self.client.get(COURSE_SEARCH_URL, {"categories": "data-science,design"})
        self.assertEqual([c["title"] for c in response.data["results"]], ["Machine Learning"])

    def test_search_by_price_and_sort(self):
        response = self.client.get(COURSE_SEARCH_URL, {"max_price": "500"})
        self.assertEqual([c["title"] for c in response.data["results"]], ["Python Basics"])

        response = self.client.get(COURSE_SEARCH_URL, {"sort_by": "price-high"})
        self.assertEqual(
            [c["title"] for c in response.data["results"]], ["Machine Learning", "Python Basics"]
        )

    def test_invalid_price_filter_is_ignored(self):
        response = self.client.get(COURSE_SEARCH_URL, {"min_price": "abc"})
        self.assertEqual(response.data["count"], 2)

    def test_draft_detail_visible_to_owner_only(self):
        url = reverse("elearning:courses:course-detail", args=[self.draft.pk])
        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)

    def test_detail_reports_enrollment(self):
        Enrollment.grant(self.student, self.python)
        self.client.force_authenticate(user=self.student)

        response = self.client.get(reverse("elearning:courses:course-detail", args=[self.python.pk]))

        self.assertTrue(response.data["is_enrolled"])
        self.assertEqual(response.data["enrolled_count"], 1)

    def test_only_owner_can_update(self):
        url = reverse("elearning:courses:course-detail", args=[self.python.pk])
        self.client.force_authenticate(user=self.student)
        response = self.client.patch(url, {"title": "Hijacked"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(url, {"title": "Python Grundlagen"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["title"], "Python Grundlagen")

    def test_mine_lists_own_courses_including_drafts(self):
        other_admin = create_user("zweitadmin", role=Profile.Role.ADMIN)
        create_course(other_admin, "Fremder Kurs")
        url = reverse("elearning:courses:course-mine")

        self.client.force_authenticate(user=self.admin)
        response = self.client.get(url)
        self.assertEqual(
            {c["title"] for c in response.data},
            {"Python Basics", "Machine Learning", "Draft Course"},
        )

        self.client.force_authenticate(user=self.student)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)


class LectureTests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("kursadmin", role=Profile.Role.ADMIN)
        cls.student = create_user("student")
        cls.course = create_course(cls.admin)
        create_lecture(cls.course, 1, is_preview=True, duration=300)
        create_lecture(cls.course, 2, duration=900)
        cls.course.recompute_totals()

    def setUp(self):
        self.url = reverse("elearning:courses:course-lectures", args=[self.course.pk])

    def test_preview_lectures_for_visitors(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([lecture["order"] for lecture in response.data], [1])

    def test_all_lectures_for_enrolled_students(self):
        Enrollment.grant(self.student, self.course)
        self.client.force_authenticate(user=self.student)

        response = self.client.get(self.url)
        self.assertEqual([lecture["order"] for lecture in response.data], [1, 2])

    @mock.patch("elearning.courses.views.MediaStorageService")
    def test_owner_adds_lecture_and_totals_follow(self, storage_cls):
        storage_cls.return_value.upload.return_value = _stored(f"lectures/{self.course.pk}/intro.mp4")
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            self.url,
            {"title": "Functions", "duration": 1200, "video": _video()},
            format="multipart",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["order"], 3)
        self.course.refresh_from_db()
        self.assertEqual(self.course.total_lectures, 3)
        self.assertEqual(self.course.total_duration, 300 + 900 + 1200)

    @mock.patch("elearning.courses.views.MediaStorageService")
    def test_order_clash(self, storage_cls):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            self.url,
            {"title": "Clash", "duration": 60, "order": 2, "video": _video()},
            format="multipart",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("order", response.data)
        self.assertEqual(Lecture.objects.filter(course=self.course).count(), 2)

    @mock.patch("elearning.courses.views.MediaStorageService")
    def test_student_cannot_add_lecture(self, storage_cls):
        self.client.force_authenticate(user=self.student)
        response = self.client.post(
            self.url, {"title": "Nope", "duration": 60, "video": _video()}, format="multipart"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        storage_cls.return_value.upload.assert_not_called()
