"""
Purchase Views
==============

Endpoints
---------

1. CheckoutView
   - URL: /api/elearning/purchase/checkout/
   - Method: POST
   - Body: {"course_id": 42, "payment_method": "stripe"}
   - Auth: Required
   - Purpose:
       Creates a pending purchase and opens a checkout with the payment
       provider. Returns the redirect URL (Stripe) or the client payload
       needed to open the provider widget (Razorpay).

2. StripeWebhookView / RazorpayWebhookView
   - URL: /api/elearning/purchase/webhook/ (Stripe)
          /api/elearning/purchase/webhook/razorpay/
   - Method: POST
   - Auth: None (provider signature)
   - Purpose:
       Verifies the provider signature on the raw body and reconciles the
       purchase. Always answers {"received": true} once handled; 400 on an
       invalid signature, 404 if no purchase matches.

3. RazorpayVerifyPaymentView
   - URL: /api/elearning/purchase/razorpay/verify/
   - Method: POST
   - Purpose:
       Confirms a Razorpay payment from the checkout callback signature.

4. PurchaseStatusView
   - URL: /api/elearning/purchase/status/<course_id>/
   - Method: GET
   - Purpose:
       Latest purchase of the current user for a course.

5. PurchasedCoursesView
   - URL: /api/elearning/purchase/
   - Method: GET
   - Purpose:
       Completed purchases of the current user with course summaries.

6. RefundPurchaseView
   - URL: /api/elearning/purchase/<pk>/refund/
   - Method: POST
   - Auth: Staff
   - Purpose:
       Records a refund and revokes the enrollment.

Author: DSP Development Team
Date: 2025-09-03
"""

import logging

from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.payments import get_gateway
from core.payments.exceptions import PaymentException

from .ledger import PurchaseLedger
from .reconciliation import ReconciliationEngine
from .serializers import (
    CheckoutRequestSerializer,
    PurchasedCourseSerializer,
    PurchaseStatusSerializer,
    RazorpayVerificationSerializer,
    RefundRequestSerializer,
)
from .models import PaymentMethod

logger = logging.getLogger(__name__)


def build_engine(payment_method: str = None) -> ReconciliationEngine:
    return ReconciliationEngine(gateway=get_gateway(payment_method))


class CheckoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        engine = build_engine(data.get("payment_method"))
        try:
            result = engine.initiate(request.user, data["course_id"])
        except PaymentException as e:
            return Response(e.to_dict(), status=e.status_code)

        return Response(
            {
                "checkout_url": result.session.redirect_url,
                "session_id": result.session.session_id,
                "purchase_id": result.purchase.pk,
                "payment_method": result.purchase.payment_method,
                "gateway": result.session.client_payload,
            },
            status=status.HTTP_200_OK,
        )


class WebhookView(APIView):
    """
    Base webhook endpoint. Reads ``request.body`` only, the signature is
    computed over the exact bytes the provider sent.
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    payment_method: str = ""
    signature_header: str = ""

    def post(self, request):
        engine = build_engine(self.payment_method)
        try:
            result = engine.reconcile(request.body, request.META.get(self.signature_header))
        except PaymentException as e:
            return Response(e.to_dict(), status=e.status_code)

        logger.info(
            "%s webhook handled: %s (purchase=%s)",
            self.payment_method,
            result.action,
            result.purchase_id,
        )
        return Response({"received": True}, status=status.HTTP_200_OK)


class StripeWebhookView(WebhookView):
    payment_method = PaymentMethod.STRIPE
    signature_header = "HTTP_STRIPE_SIGNATURE"


class RazorpayWebhookView(WebhookView):
    payment_method = PaymentMethod.RAZORPAY
    signature_header = "HTTP_X_RAZORPAY_SIGNATURE"


class RazorpayVerifyPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = RazorpayVerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        engine = build_engine(PaymentMethod.RAZORPAY)
        record = engine.ledger.find_by_external_id(data["razorpay_order_id"])
        if record is None or record.user_id != request.user.pk:
            return Response({"detail": "Purchase not found."}, status=status.HTTP_404_NOT_FOUND)

        try:
            result = engine.verify_client_payment(
                data["razorpay_order_id"],
                data["razorpay_payment_id"],
                data["razorpay_signature"],
            )
        except PaymentException as e:
            return Response(e.to_dict(), status=e.status_code)

        return Response(
            {"verified": True, "status": result.status or record.status, "purchase_id": record.pk},
            status=status.HTTP_200_OK,
        )


class PurchaseStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, course_id: int):
        record = PurchaseLedger().latest_for(request.user.pk, course_id)
        if record is None:
            return Response(
                {"detail": "No purchase found for this course."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(PurchaseStatusSerializer(record).data)


class PurchasedCoursesView(generics.ListAPIView):
    serializer_class = PurchasedCourseSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return PurchaseLedger().completed_for_user(self.request.user.pk)


class RefundPurchaseView(APIView):
    permission_classes = [IsAdminUser]

    def post(self, request, pk: int):
        serializer = RefundRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        ledger = PurchaseLedger()
        try:
            record = ledger.get(pk)
            engine = ReconciliationEngine(get_gateway(record.payment_method), ledger=ledger)
            refunded = engine.refund(
                record.pk, amount=data.get("amount"), reason=data.get("reason", "")
            )
        except PaymentException as e:
            return Response(e.to_dict(), status=e.status_code)

        return Response(PurchaseStatusSerializer(refunded).data)
