from rest_framework import serializers

from ..users.serializers import UserSummarySerializer
from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Review
        fields = ["id", "user", "course", "comment", "rating", "created_at", "updated_at"]
        read_only_fields = ["id", "user", "course", "created_at", "updated_at"]
