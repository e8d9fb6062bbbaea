"""
E-Learning Application Django Admin Configuration

Admin sections:
- User Management: User administration with profile (role) integration
- Course Catalog: Courses with inline lectures, enrollments
- Learning: Progress and reviews
- Purchases: Read-only purchase ledger

Purchase records are only written by the ledger, so the admin exposes them
read-only; refunds go through the refund API.

Author: DSP Development Team
Version: 1.0.0
"""

from typing import Optional
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from django.utils.translation import gettext_lazy as _
from django.db.models import QuerySet
from django.http import HttpRequest

from .models import (
    Profile,
    Course,
    Lecture,
    Enrollment,
    CourseProgress,
    LectureProgress,
    Review,
    PurchaseRecord,
)

# --- User Management Administration ---


class ProfileInline(admin.StackedInline):
    """Edit role, bio and avatar directly within the user admin."""

    model = Profile
    can_delete = False
    verbose_name_plural = "Profile Information"
    fk_name = "user"
    fields = ("role", "bio", "avatar_url", "last_active")
    readonly_fields = ("last_active",)

    def get_extra(
        self, request: HttpRequest, obj: Optional[User] = None, **kwargs
    ) -> int:
        """Return 0 extra forms since profile should exist or be created automatically."""
        return 0


class UserAdmin(BaseUserAdmin):
    inlines = (ProfileInline,)
    list_display = (
        "username",
        "email",
        "first_name",
        "last_name",
        "get_role",
        "is_staff",
        "is_active",
    )
    list_select_related = ("profile",)
    list_filter = ("is_staff", "is_superuser", "is_active", "profile__role", "date_joined")
    search_fields = ("username", "first_name", "last_name", "email")
    ordering = ("username",)

    @admin.display(description=_("Role"))
    def get_role(self, instance: User) -> Optional[str]:
        try:
            return instance.profile.get_role_display()
        except Profile.DoesNotExist:
            return None

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("profile")


admin.site.unregister(User)
admin.site.register(User, UserAdmin)

# --- Course Catalog Administration ---


class LectureInline(admin.TabularInline):
    model = Lecture
    extra = 0
    fields = ("order", "title", "duration", "is_preview", "video_url")
    ordering = ("order",)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "category",
        "level",
        "price",
        "owner",
        "is_published",
        "total_lectures",
        "created_at",
    )
    list_filter = ("is_published", "level", "category")
    search_fields = ("title", "subtitle", "description")
    readonly_fields = ("total_lectures", "total_duration", "created_at", "updated_at")
    filter_horizontal = ("instructors",)
    inlines = [LectureInline]

    fieldsets = (
        (_("Basic Information"), {"fields": ("title", "subtitle", "description", "category", "level")}),
        (_("Pricing & Publishing"), {"fields": ("price", "is_published", "owner", "instructors")}),
        (_("Media"), {"fields": ("thumbnail_url", "thumbnail_key")}),
        (
            _("Statistics"),
            {"fields": ("total_lectures", "total_duration", "created_at", "updated_at")},
        ),
    )

    def save_formset(self, request, form, formset, change):
        super().save_formset(request, form, formset, change)
        if formset.model is Lecture:
            form.instance.recompute_totals()


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("user", "course", "purchase", "enrolled_at")
    list_filter = ("course",)
    search_fields = ("user__username", "user__email", "course__title")
    raw_id_fields = ("user", "course", "purchase")


# --- Learning Administration ---


class LectureProgressInline(admin.TabularInline):
    model = LectureProgress
    extra = 0
    fields = ("lecture", "is_completed", "watch_time", "last_watched")


@admin.register(CourseProgress)
class CourseProgressAdmin(admin.ModelAdmin):
    list_display = ("user", "course", "completion_percentage", "is_completed", "last_accessed")
    list_filter = ("is_completed",)
    search_fields = ("user__username", "course__title")
    inlines = [LectureProgressInline]


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("course", "user", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("course__title", "user__username", "comment")


# --- Purchase Ledger Administration ---


@admin.register(PurchaseRecord)
class PurchaseRecordAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "user",
        "course",
        "amount",
        "currency",
        "status",
        "payment_method",
        "external_payment_id",
        "created_at",
    )
    list_filter = ("status", "payment_method", "currency")
    search_fields = ("external_payment_id", "user__username", "user__email", "course__title")
    date_hierarchy = "created_at"

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj=None) -> bool:
        return False
