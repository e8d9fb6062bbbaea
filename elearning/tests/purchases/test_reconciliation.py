"""
Tests for the reconciliation engine: checkout initiation, idempotent
webhook handling, failure handling and refunds.
"""

from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings

from core.payments import RazorpayGateway, StripeGateway
from core.payments.base import CheckoutSession, PaymentGateway
from core.payments.exceptions import AuthenticityFailure, GatewayUnavailable, PaymentException
from elearning.courses.models import Enrollment
from elearning.progress.models import CourseProgress
from elearning.purchases.exceptions import (
    AlreadyPurchased,
    NotFound,
    PurchaseException,
    StaleState,
)
from elearning.purchases.ledger import PurchaseLedger
from elearning.purchases.models import PurchaseRecord, PurchaseStatus
from elearning.purchases.reconciliation import (
    ACTION_ALREADY_COMPLETED,
    ACTION_COMPLETED,
    ACTION_FAILED,
    ACTION_IGNORED,
    ACTION_NO_OP,
    ReconciliationEngine,
)
from elearning.users.models import Profile

from ..helpers import (
    PAYMENT_SETTINGS,
    RAZORPAY_KEY_ID,
    RAZORPAY_KEY_SECRET,
    RAZORPAY_WEBHOOK_SECRET,
    STRIPE_SECRET_KEY,
    STRIPE_WEBHOOK_SECRET,
    create_course,
    create_user,
    razorpay_event_payload,
    razorpay_signature,
    stripe_event_payload,
    stripe_signature,
)


class FakeGateway(PaymentGateway):
    """In-memory gateway recording the sessions it was asked to open."""

    name = "stripe"

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def create_session(self, amount, currency, metadata, *, title="", success_url=None,
                       cancel_url=None, idempotency_key=None):
        self.calls.append(
            {"amount": amount, "currency": currency, "metadata": metadata,
             "idempotency_key": idempotency_key, "success_url": success_url}
        )
        if self.fail:
            raise GatewayUnavailable("Provider down.")
        return CheckoutSession(
            session_id=f"cs_fake_{metadata['purchase_id']}",
            redirect_url=f"https://pay.example.com/{metadata['purchase_id']}",
        )

    def verify_signature(self, raw_payload, signature_header, secret):
        return False

    def parse_event(self, raw_payload, signature_header):
        raise AuthenticityFailure("Fake gateway does not receive webhooks.")


@override_settings(**PAYMENT_SETTINGS)
class InitiateCheckoutTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("kursadmin", role=Profile.Role.ADMIN)
        cls.student = create_user("student")
        cls.course = create_course(cls.admin, price=Decimal("499.00"))

    def test_initiate_creates_pending_record_with_external_id(self):
        gateway = FakeGateway()
        result = ReconciliationEngine(gateway).initiate(self.student, self.course.pk)

        record = PurchaseRecord.objects.get()
        self.assertEqual(result.purchase.pk, record.pk)
        self.assertEqual(record.status, PurchaseStatus.PENDING)
        self.assertEqual(record.amount, Decimal("499.00"))
        self.assertEqual(record.payment_method, "stripe")
        self.assertEqual(record.external_payment_id, f"cs_fake_{record.pk}")
        self.assertEqual(result.session.redirect_url, f"https://pay.example.com/{record.pk}")

        call = gateway.calls[0]
        self.assertEqual(call["metadata"]["purchase_id"], str(record.pk))
        self.assertEqual(call["metadata"]["course_id"], str(self.course.pk))
        self.assertEqual(call["idempotency_key"], f"purchase-{record.pk}")
        self.assertIn(f"course={self.course.pk}", call["success_url"])

    def test_gateway_failure_leaves_pending_record(self):
        with self.assertRaises(GatewayUnavailable):
            ReconciliationEngine(FakeGateway(fail=True)).initiate(self.student, self.course.pk)

        record = PurchaseRecord.objects.get()
        self.assertEqual(record.status, PurchaseStatus.PENDING)
        self.assertIsNone(record.external_payment_id)
        self.assertFalse(Enrollment.objects.exists())

    def test_unknown_course(self):
        with self.assertRaises(NotFound):
            ReconciliationEngine(FakeGateway()).initiate(self.student, 999999)
        self.assertFalse(PurchaseRecord.objects.exists())

    def test_unpublished_course(self):
        draft = create_course(self.admin, title="Draft", is_published=False)
        with self.assertRaises(NotFound):
            ReconciliationEngine(FakeGateway()).initiate(self.student, draft.pk)

    def test_already_purchased(self):
        engine = ReconciliationEngine(FakeGateway())
        result = engine.initiate(self.student, self.course.pk)
        engine.ledger.transition(result.purchase.pk, PurchaseStatus.PENDING, PurchaseStatus.COMPLETED)

        with self.assertRaises(AlreadyPurchased):
            engine.initiate(self.student, self.course.pk)
        self.assertEqual(PurchaseRecord.objects.count(), 1)


@override_settings(**PAYMENT_SETTINGS)
class StripeReconciliationTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("kursadmin", role=Profile.Role.ADMIN)
        cls.student = create_user("student")
        cls.course = create_course(cls.admin, price=Decimal("499.00"))

    def setUp(self):
        self.engine = ReconciliationEngine(
            StripeGateway(secret_key=STRIPE_SECRET_KEY, webhook_secret=STRIPE_WEBHOOK_SECRET)
        )
        self.record = self.engine.ledger.create_pending(
            self.student.pk, self.course.pk, Decimal("499.00"), "inr", "stripe"
        )
        self.engine.ledger.attach_external_id(self.record.pk, "cs_test_1")

    def _deliver(self, event_type="checkout.session.completed", session_id="cs_test_1", **kwargs):
        payload = stripe_event_payload(event_type, session_id, **kwargs)
        return self.engine.reconcile(payload, stripe_signature(payload))

    def test_success_completes_and_grants_access(self):
        with self.captureOnCommitCallbacks(execute=True):
            result = self._deliver()

        self.assertEqual(result.action, ACTION_COMPLETED)
        self.record.refresh_from_db()
        self.assertEqual(self.record.status, PurchaseStatus.COMPLETED)
        self.assertTrue(self.course.is_enrolled(self.student))
        enrollment = Enrollment.objects.get(user=self.student, course=self.course)
        self.assertEqual(enrollment.purchase_id, self.record.pk)
        self.assertTrue(
            CourseProgress.objects.filter(user=self.student, course=self.course).exists()
        )
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(self.course.title, mail.outbox[0].subject)

    def test_captured_amount_replaces_snapshot(self):
        self._deliver(amount_total=44900)
        self.record.refresh_from_db()
        self.assertEqual(self.record.amount, Decimal("449.00"))

    def test_duplicate_delivery_is_a_no_op(self):
        first = self._deliver()
        second = self._deliver()

        self.assertEqual(first.action, ACTION_COMPLETED)
        self.assertEqual(second.action, ACTION_ALREADY_COMPLETED)
        self.assertEqual(
            PurchaseRecord.objects.filter(status=PurchaseStatus.COMPLETED).count(), 1
        )
        self.assertEqual(Enrollment.objects.filter(user=self.student).count(), 1)

    def test_invalid_signature_changes_nothing(self):
        payload = stripe_event_payload("checkout.session.completed", "cs_test_1")
        with self.assertRaises(AuthenticityFailure):
            self.engine.reconcile(payload, stripe_signature(payload, secret="whsec_wrong"))

        self.record.refresh_from_db()
        self.assertEqual(self.record.status, PurchaseStatus.PENDING)
        self.assertFalse(Enrollment.objects.exists())

    def test_unknown_external_id(self):
        with self.assertRaises(NotFound):
            self._deliver(session_id="cs_unknown")
        self.assertFalse(Enrollment.objects.exists())

    def test_ignored_event(self):
        result = self._deliver(event_type="payment_intent.created")
        self.assertEqual(result.action, ACTION_IGNORED)
        self.record.refresh_from_db()
        self.assertEqual(self.record.status, PurchaseStatus.PENDING)

    def test_failure_then_late_success_stays_failed(self):
        failed = self._deliver(event_type="checkout.session.expired")
        late = self._deliver()

        self.assertEqual(failed.action, ACTION_FAILED)
        self.assertEqual(late.action, ACTION_NO_OP)
        self.record.refresh_from_db()
        self.assertEqual(self.record.status, PurchaseStatus.FAILED)
        self.assertFalse(Enrollment.objects.exists())

    def test_failure_then_late_success_with_retry_enabled(self):
        self.engine.ledger = PurchaseLedger(allow_retry_after_failure=True)
        self._deliver(event_type="checkout.session.async_payment_failed")
        result = self._deliver(event_type="checkout.session.async_payment_succeeded")

        self.assertEqual(result.action, ACTION_COMPLETED)
        self.record.refresh_from_db()
        self.assertEqual(self.record.status, PurchaseStatus.COMPLETED)
        self.assertTrue(self.course.is_enrolled(self.student))

    def test_failure_after_completion_is_ignored(self):
        self._deliver()
        result = self._deliver(event_type="checkout.session.expired")
        self.assertEqual(result.action, ACTION_NO_OP)
        self.record.refresh_from_db()
        self.assertEqual(self.record.status, PurchaseStatus.COMPLETED)

    def test_losing_the_race_is_a_no_op(self):
        # both handlers read the pending record, the other one commits first
        stale_copy = PurchaseRecord.objects.get(pk=self.record.pk)
        self._deliver()

        with mock.patch.object(self.engine.ledger, "find_by_external_id", return_value=stale_copy):
            result = self._deliver()

        self.assertEqual(result.action, ACTION_ALREADY_COMPLETED)
        self.assertEqual(Enrollment.objects.filter(user=self.student).count(), 1)

    def test_losing_the_race_to_a_failure_reports_failed(self):
        stale_copy = PurchaseRecord.objects.get(pk=self.record.pk)
        self._deliver(event_type="checkout.session.expired")

        with mock.patch.object(self.engine.ledger, "find_by_external_id", return_value=stale_copy):
            result = self._deliver()

        self.assertEqual(result.action, ACTION_NO_OP)
        self.assertEqual(result.status, PurchaseStatus.FAILED)
        self.assertFalse(Enrollment.objects.exists())

    def test_refund_revokes_enrollment(self):
        self._deliver()
        refunded = self.engine.refund(self.record.pk, reason="Requested by customer")

        self.assertEqual(refunded.status, PurchaseStatus.REFUNDED)
        self.assertEqual(refunded.refund_amount, Decimal("499.00"))
        self.assertEqual(refunded.refund_reason, "Requested by customer")
        self.assertFalse(self.course.is_enrolled(self.student))

    def test_refund_of_pending_purchase(self):
        with self.assertRaises(StaleState):
            self.engine.refund(self.record.pk)

    def test_refund_amount_above_paid_amount(self):
        self._deliver()
        with self.assertRaises(PurchaseException):
            self.engine.refund(self.record.pk, amount=Decimal("1000.00"))
        self.record.refresh_from_db()
        self.assertEqual(self.record.status, PurchaseStatus.COMPLETED)

    def test_success_after_refund_does_not_reenroll(self):
        self._deliver()
        self.engine.refund(self.record.pk)
        result = self._deliver()

        self.assertEqual(result.action, ACTION_NO_OP)
        self.assertFalse(self.course.is_enrolled(self.student))


@override_settings(**PAYMENT_SETTINGS)
class RazorpayClientConfirmationTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("kursadmin", role=Profile.Role.ADMIN)
        cls.student = create_user("student")
        cls.course = create_course(cls.admin)

    def setUp(self):
        self.engine = ReconciliationEngine(
            RazorpayGateway(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET, RAZORPAY_WEBHOOK_SECRET)
        )
        self.record = self.engine.ledger.create_pending(
            self.student.pk, self.course.pk, Decimal("499.00"), "inr", "razorpay"
        )
        self.engine.ledger.attach_external_id(self.record.pk, "order_123")

    def test_valid_callback_signature_completes(self):
        signature = razorpay_signature(b"order_123|pay_456", secret=RAZORPAY_KEY_SECRET)
        result = self.engine.verify_client_payment("order_123", "pay_456", signature)

        self.assertEqual(result.action, ACTION_COMPLETED)
        self.assertTrue(self.course.is_enrolled(self.student))

    def test_failed_attempt_then_callback_completes(self):
        payload = razorpay_event_payload("payment.failed", "order_123")
        failed_attempt = self.engine.reconcile(payload, razorpay_signature(payload))
        self.assertEqual(failed_attempt.action, ACTION_IGNORED)

        signature = razorpay_signature(b"order_123|pay_789", secret=RAZORPAY_KEY_SECRET)
        result = self.engine.verify_client_payment("order_123", "pay_789", signature)

        self.assertEqual(result.action, ACTION_COMPLETED)
        self.record.refresh_from_db()
        self.assertEqual(self.record.status, PurchaseStatus.COMPLETED)
        self.assertTrue(self.course.is_enrolled(self.student))

    def test_invalid_callback_signature(self):
        with self.assertRaises(AuthenticityFailure):
            self.engine.verify_client_payment("order_123", "pay_456", "deadbeef")
        self.record.refresh_from_db()
        self.assertEqual(self.record.status, PurchaseStatus.PENDING)

    def test_stripe_has_no_client_confirmation(self):
        engine = ReconciliationEngine(StripeGateway(STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET))
        with self.assertRaises(PaymentException):
            engine.verify_client_payment("cs_1", "pi_1", "sig")
