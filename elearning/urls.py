"""
E-Learning Application URL Configuration

URL Structure (mounted under /api/elearning/):
- token/: Authentication endpoints (JWT in cookies)
- users/: Registration, profile and password management
- courses/: Catalog, lectures and reviews
- progress/: Learning progress per course
- purchase/: Checkout, payment webhooks, purchase status and refunds

Author: DSP Development Team
Version: 1.0.0
"""

from typing import List
from django.urls import path, include, URLPattern
from rest_framework_simplejwt.views import TokenVerifyView

from .users import views as user_views
from .courses import views as course_views
from .progress import views as progress_views
from .reviews import views as review_views
from .purchases import views as purchase_views

app_name = "elearning"

# --- User Management URL Patterns ---

users_urlpatterns: List[URLPattern] = [
    path("signup/", user_views.RegistrationView.as_view(), name="signup"),
    path("logout/", user_views.LogoutView.as_view(), name="logout"),
    path("profile/", user_views.ProfileView.as_view(), name="profile"),
    path("change-password/", user_views.ChangePasswordView.as_view(), name="change-password"),
    path("forgot-password/", user_views.ForgotPasswordView.as_view(), name="forgot-password"),
    path(
        "reset-password/<str:uidb64>/<str:token>/",
        user_views.ResetPasswordView.as_view(),
        name="reset-password",
    ),
    path("account/", user_views.DeleteAccountView.as_view(), name="delete-account"),
]

# --- Course Catalog URL Patterns ---

courses_urlpatterns: List[URLPattern] = [
    path("", course_views.CourseCreateView.as_view(), name="course-create"),
    path("search/", course_views.CourseSearchView.as_view(), name="course-search"),
    path("published/", course_views.PublishedCourseListView.as_view(), name="course-published"),
    path("mine/", course_views.MyCoursesView.as_view(), name="course-mine"),
    path("<int:pk>/", course_views.CourseDetailView.as_view(), name="course-detail"),
    path(
        "<int:course_id>/lectures/",
        course_views.LectureListCreateView.as_view(),
        name="course-lectures",
    ),
    path(
        "<int:course_id>/reviews/",
        review_views.CourseReviewsView.as_view(),
        name="course-reviews",
    ),
    path(
        "<int:course_id>/rating/",
        review_views.CourseRatingView.as_view(),
        name="course-rating",
    ),
]

# --- Progress URL Patterns ---

progress_urlpatterns: List[URLPattern] = [
    path("<int:course_id>/", progress_views.CourseProgressView.as_view(), name="progress-detail"),
    path(
        "<int:course_id>/lectures/<int:lecture_id>/",
        progress_views.LectureProgressUpdateView.as_view(),
        name="progress-lecture",
    ),
    path(
        "<int:course_id>/complete/",
        progress_views.CompleteCourseView.as_view(),
        name="progress-complete",
    ),
    path(
        "<int:course_id>/reset/",
        progress_views.ResetCourseProgressView.as_view(),
        name="progress-reset",
    ),
]

# --- Purchase URL Patterns ---

purchase_urlpatterns: List[URLPattern] = [
    path("", purchase_views.PurchasedCoursesView.as_view(), name="purchase-list"),
    path("checkout/", purchase_views.CheckoutView.as_view(), name="purchase-checkout"),
    path("webhook/", purchase_views.StripeWebhookView.as_view(), name="purchase-webhook"),
    path(
        "webhook/razorpay/",
        purchase_views.RazorpayWebhookView.as_view(),
        name="purchase-webhook-razorpay",
    ),
    path(
        "razorpay/verify/",
        purchase_views.RazorpayVerifyPaymentView.as_view(),
        name="purchase-razorpay-verify",
    ),
    path(
        "status/<int:course_id>/",
        purchase_views.PurchaseStatusView.as_view(),
        name="purchase-status",
    ),
    path("<int:pk>/refund/", purchase_views.RefundPurchaseView.as_view(), name="purchase-refund"),
]

# --- Main URL Configuration for E-Learning Application ---

urlpatterns: List[URLPattern] = [
    path("token/", user_views.CustomTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", user_views.CustomTokenRefreshView.as_view(), name="token_refresh"),
    path("token/verify/", TokenVerifyView.as_view(), name="token_verify"),
    path("users/", include((users_urlpatterns, "users"))),
    path("courses/", include((courses_urlpatterns, "courses"))),
    path("progress/", include((progress_urlpatterns, "progress"))),
    path("purchase/", include((purchase_urlpatterns, "purchase"))),
]
