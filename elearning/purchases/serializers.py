"""
Purchase Serializers

Author: DSP Development Team
Version: 1.0.0
"""

from decimal import Decimal

from rest_framework import serializers

from ..courses.models import Course
from .models import PaymentMethod, PurchaseRecord


class CheckoutRequestSerializer(serializers.Serializer):
    course_id = serializers.IntegerField(min_value=1)
    payment_method = serializers.ChoiceField(
        choices=PaymentMethod.choices, required=False
    )


class RazorpayVerificationSerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField(max_length=255)
    razorpay_payment_id = serializers.CharField(max_length=255)
    razorpay_signature = serializers.CharField(max_length=255)


class RefundRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.01"), required=False
    )
    reason = serializers.CharField(max_length=1000, required=False, allow_blank=True)


class PurchaseStatusSerializer(serializers.ModelSerializer):
    """Projection returned by the purchase status endpoint."""

    course_id = serializers.IntegerField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    is_refundable = serializers.BooleanField(read_only=True)

    class Meta:
        model = PurchaseRecord
        fields = (
            "id",
            "course_id",
            "user_id",
            "amount",
            "currency",
            "status",
            "payment_method",
            "refund_amount",
            "refund_reason",
            "is_refundable",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class PurchasedCourseSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = ("id", "title", "subtitle", "thumbnail_url", "category", "level")


class PurchasedCourseSerializer(serializers.ModelSerializer):
    course = PurchasedCourseSummarySerializer(read_only=True)

    class Meta:
        model = PurchaseRecord
        fields = ("id", "course", "amount", "currency", "payment_method", "created_at")
        read_only_fields = fields
