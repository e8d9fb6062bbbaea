from rest_framework import serializers

from .models import CourseProgress, LectureProgress


class LectureProgressSerializer(serializers.ModelSerializer):
    lecture_title = serializers.CharField(source="lecture.title", read_only=True)
    lecture_order = serializers.IntegerField(source="lecture.order", read_only=True)

    class Meta:
        model = LectureProgress
        fields = [
            "lecture",
            "lecture_title",
            "lecture_order",
            "is_completed",
            "watch_time",
            "last_watched",
        ]
        read_only_fields = fields


class CourseProgressSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True)
    lecture_progress = LectureProgressSerializer(many=True, read_only=True)

    class Meta:
        model = CourseProgress
        fields = [
            "course",
            "course_title",
            "is_completed",
            "completion_percentage",
            "last_accessed",
            "lecture_progress",
        ]
        read_only_fields = fields


class LectureProgressUpdateSerializer(serializers.Serializer):
    is_completed = serializers.BooleanField(required=False, default=True)
    watch_time = serializers.IntegerField(min_value=0, required=False)
