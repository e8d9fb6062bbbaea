"""
Shared fixtures for the e-learning test-suite: users, courses and signed
payment provider payloads.
"""

import hashlib
import hmac
import json
import time
from decimal import Decimal

from django.contrib.auth.models import User

from elearning.courses.models import Course, Lecture
from elearning.users.models import Profile

STRIPE_SECRET_KEY = "sk_test_123"
STRIPE_WEBHOOK_SECRET = "whsec_test_secret"
RAZORPAY_KEY_ID = "rzp_test_key"
RAZORPAY_KEY_SECRET = "rzp_test_secret"
RAZORPAY_WEBHOOK_SECRET = "rzp_webhook_secret"

PAYMENT_SETTINGS = dict(
    STRIPE_SECRET_KEY=STRIPE_SECRET_KEY,
    STRIPE_WEBHOOK_SECRET=STRIPE_WEBHOOK_SECRET,
    RAZORPAY_KEY_ID=RAZORPAY_KEY_ID,
    RAZORPAY_KEY_SECRET=RAZORPAY_KEY_SECRET,
    RAZORPAY_WEBHOOK_SECRET=RAZORPAY_WEBHOOK_SECRET,
    DEFAULT_PAYMENT_METHOD="stripe",
    DEFAULT_CURRENCY="inr",
    PURCHASE_ALLOW_RETRY_AFTER_FAILURE=False,
    EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend",
)


def create_user(username: str, role: str = Profile.Role.STUDENT, **kwargs) -> User:
    user = User.objects.create_user(
        username=username,
        email=kwargs.pop("email", f"{username}@example.com"),
        password=kwargs.pop("password", "Sicheres-Passwort-42"),
        **kwargs,
    )
    user.profile.role = role
    user.profile.save()
    return user


def create_course(owner: User, title: str = "Python Basics", **kwargs) -> Course:
    defaults = dict(
        subtitle="From zero to scripts",
        description="Variables, loops and functions.",
        category="programming",
        level=Course.Level.BEGINNER,
        price=Decimal("499.00"),
        thumbnail_url="https://cdn.example.com/thumbnails/python.png",
        thumbnail_key="thumbnails/python.png",
        is_published=True,
    )
    defaults.update(kwargs)
    return Course.objects.create(owner=owner, title=title, **defaults)


def create_lecture(course: Course, order: int, **kwargs) -> Lecture:
    defaults = dict(
        title=f"Lecture {order}",
        video_url=f"https://cdn.example.com/lectures/{course.pk}/{order}.mp4",
        video_key=f"lectures/{course.pk}/{order}.mp4",
        duration=600,
        is_preview=False,
    )
    defaults.update(kwargs)
    return Lecture.objects.create(course=course, order=order, **defaults)


def stripe_event_payload(
    event_type: str,
    session_id: str,
    amount_total: int = 49900,
    payment_status: str = "paid",
    currency: str = "inr",
) -> bytes:
    return json.dumps(
        {
            "id": f"evt_{session_id}",
            "object": "event",
            "type": event_type,
            "data": {
                "object": {
                    "id": session_id,
                    "object": "checkout.session",
                    "amount_total": amount_total,
                    "currency": currency,
                    "payment_status": payment_status,
                    "metadata": {},
                }
            },
        }
    ).encode("utf-8")


def stripe_signature(payload: bytes, secret: str = STRIPE_WEBHOOK_SECRET, timestamp: int = None) -> str:
    timestamp = timestamp or int(time.time())
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def razorpay_event_payload(event_type: str, order_id: str, amount: int = 49900) -> bytes:
    payment = {
        "id": f"pay_{order_id}",
        "order_id": order_id,
        "amount": amount,
        "currency": "INR",
        "status": "captured" if event_type != "payment.failed" else "failed",
    }
    payload = {"event": event_type, "payload": {"payment": {"entity": payment}}}
    if event_type == "order.paid":
        payload["payload"]["order"] = {
            "entity": {"id": order_id, "amount_paid": amount, "currency": "INR", "status": "paid"}
        }
    return json.dumps(payload).encode("utf-8")


def razorpay_signature(payload: bytes, secret: str = RAZORPAY_WEBHOOK_SECRET) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
