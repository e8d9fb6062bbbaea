"""
E-Learning Course Serializers

Serializers:
- CourseListSerializer: Catalog card data
- CourseDetailSerializer: Full course page incl. lecture outline
- CourseWriteSerializer: Create/update payload (multipart, thumbnail upload)
- LectureSerializer / LectureCreateSerializer: Lecture data and upload payload

Uploads are not handled here; views push files to the media storage and
pass the resulting URL and key into ``save()``.

Author: DSP Development Team
Version: 1.0.0
"""

from django.contrib.auth.models import User
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from ..users.serializers import UserSummarySerializer
from .models import Course, Lecture


def _validate_content_type(upload, prefix: str):
    content_type = getattr(upload, "content_type", "") or ""
    if not content_type.startswith(prefix):
        raise serializers.ValidationError(_("Unsupported file type: %s") % content_type)
    return upload


class LectureOutlineSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lecture
        fields = ["id", "title", "duration", "is_preview", "order"]


class LectureSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lecture
        fields = [
            "id",
            "course",
            "title",
            "description",
            "video_url",
            "duration",
            "is_preview",
            "order",
            "created_at",
        ]
        read_only_fields = fields


class LectureCreateSerializer(serializers.ModelSerializer):
    video = serializers.FileField(write_only=True)
    order = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = Lecture
        fields = ["title", "description", "duration", "is_preview", "order", "video"]

    def validate_video(self, value):
        return _validate_content_type(value, "video/")

    def validate_order(self, value):
        course = self.context["course"]
        if Lecture.objects.filter(course=course, order=value).exists():
            raise serializers.ValidationError(
                _("A lecture with this order already exists in the course.")
            )
        return value


class CourseListSerializer(serializers.ModelSerializer):
    owner = UserSummarySerializer(read_only=True)

    class Meta:
        model = Course
        fields = [
            "id",
            "title",
            "subtitle",
            "category",
            "level",
            "price",
            "thumbnail_url",
            "owner",
            "is_published",
            "total_lectures",
            "total_duration",
            "created_at",
        ]


class CourseDetailSerializer(CourseListSerializer):
    instructors = UserSummarySerializer(many=True, read_only=True)
    lectures = LectureOutlineSerializer(many=True, read_only=True)
    enrolled_count = serializers.SerializerMethodField()
    is_enrolled = serializers.SerializerMethodField()

    class Meta(CourseListSerializer.Meta):
        fields = CourseListSerializer.Meta.fields + [
            "description",
            "instructors",
            "lectures",
            "enrolled_count",
            "is_enrolled",
            "updated_at",
        ]

    def get_enrolled_count(self, obj: Course) -> int:
        return obj.enrollments.count()

    def get_is_enrolled(self, obj: Course) -> bool:
        request = self.context.get("request")
        return obj.is_enrolled(getattr(request, "user", None))


class CourseWriteSerializer(serializers.ModelSerializer):
    """
    Payload for creating and updating courses.

    ``instructor_emails`` replaces the instructor list; every address must
    belong to an existing user.
    """

    thumbnail = serializers.FileField(write_only=True, required=False)
    instructor_emails = serializers.ListField(
        child=serializers.EmailField(), write_only=True, required=False
    )

    class Meta:
        model = Course
        fields = [
            "title",
            "subtitle",
            "description",
            "category",
            "level",
            "price",
            "is_published",
            "thumbnail",
            "instructor_emails",
        ]

    def validate_thumbnail(self, value):
        return _validate_content_type(value, "image/")

    def validate_instructor_emails(self, value):
        emails = {email.lower() for email in value}
        users = list(User.objects.filter(email__in=emails))
        found = {user.email.lower() for user in users}
        missing = sorted(emails - found)
        if missing:
            raise serializers.ValidationError(
                _("Instructors not found: %s") % ", ".join(missing)
            )
        return users

    def validate(self, attrs):
        if self.instance is None and "thumbnail" not in attrs:
            raise serializers.ValidationError({"thumbnail": _("Thumbnail is required.")})
        return attrs

    def create(self, validated_data):
        validated_data.pop("thumbnail", None)
        instructors = validated_data.pop("instructor_emails", None)
        course = super().create(validated_data)
        if instructors:
            course.instructors.set(instructors)
        return course

    def update(self, instance, validated_data):
        validated_data.pop("thumbnail", None)
        instructors = validated_data.pop("instructor_emails", None)
        course = super().update(instance, validated_data)
        if instructors is not None:
            course.instructors.set(instructors)
        return course
