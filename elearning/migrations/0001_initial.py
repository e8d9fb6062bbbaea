from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=100, verbose_name="Title")),
                ("subtitle", models.CharField(blank=True, max_length=200, verbose_name="Subtitle")),
                ("description", models.TextField(blank=True, max_length=5000, verbose_name="Description")),
                ("category", models.CharField(db_index=True, max_length=100, verbose_name="Category")),
                (
                    "level",
                    models.CharField(
                        choices=[("beginner", "Beginner"), ("intermediate", "Intermediate"), ("advanced", "Advanced")],
                        default="beginner",
                        max_length=20,
                        verbose_name="Level",
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="List price in major currency units",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="Price",
                    ),
                ),
                ("thumbnail_url", models.URLField(max_length=500, verbose_name="Thumbnail URL")),
                ("thumbnail_key", models.CharField(blank=True, max_length=500, verbose_name="Thumbnail Storage Key")),
                ("is_published", models.BooleanField(default=False, verbose_name="Published")),
                (
                    "total_duration",
                    models.PositiveIntegerField(
                        default=0, help_text="Sum of lecture durations in seconds", verbose_name="Total Duration"
                    ),
                ),
                ("total_lectures", models.PositiveIntegerField(default=0, verbose_name="Total Lectures")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        help_text="Admin who created the course",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="created_courses",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Owner",
                    ),
                ),
                (
                    "instructors",
                    models.ManyToManyField(
                        blank=True,
                        related_name="instructed_courses",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Instructors",
                    ),
                ),
            ],
            options={
                "verbose_name": "Course",
                "verbose_name_plural": "Courses",
                "db_table": "elearning_course",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["is_published", "category"], name="elearning_course_pub_cat_idx")],
            },
        ),
        migrations.CreateModel(
            name="Lecture",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=100, verbose_name="Title")),
                ("description", models.TextField(blank=True, max_length=500, verbose_name="Description")),
                ("video_url", models.URLField(max_length=500, verbose_name="Video URL")),
                ("video_key", models.CharField(blank=True, max_length=500, verbose_name="Video Storage Key")),
                ("duration", models.PositiveIntegerField(default=0, help_text="Duration in seconds", verbose_name="Duration")),
                (
                    "is_preview",
                    models.BooleanField(
                        default=False,
                        help_text="Preview lectures are visible without enrollment",
                        verbose_name="Preview",
                    ),
                ),
                ("order", models.PositiveIntegerField(verbose_name="Order")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lectures",
                        to="elearning.course",
                        verbose_name="Course",
                    ),
                ),
            ],
            options={
                "verbose_name": "Lecture",
                "verbose_name_plural": "Lectures",
                "db_table": "elearning_lecture",
                "ordering": ["course", "order"],
                "unique_together": {("course", "order")},
            },
        ),
        migrations.CreateModel(
            name="PurchaseRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="Amount",
                    ),
                ),
                ("currency", models.CharField(max_length=3, verbose_name="Currency")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("stripe", "Stripe"), ("razorpay", "Razorpay")],
                        max_length=20,
                        verbose_name="Payment Method",
                    ),
                ),
                (
                    "external_payment_id",
                    models.CharField(
                        blank=True,
                        help_text="Checkout session or order id issued by the payment provider",
                        max_length=255,
                        null=True,
                        unique=True,
                        verbose_name="External Payment ID",
                    ),
                ),
                (
                    "refund_amount",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True, verbose_name="Refund Amount"
                    ),
                ),
                ("refund_reason", models.TextField(blank=True, verbose_name="Refund Reason")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to="elearning.course",
                        verbose_name="Course",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Purchase Record",
                "verbose_name_plural": "Purchase Records",
                "db_table": "elearning_purchase_record",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "course", "status"], name="elearning_purchase_usr_crs_idx")
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "completed")),
                        fields=("user", "course"),
                        name="unique_completed_purchase_per_user_course",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("enrolled_at", models.DateTimeField(auto_now_add=True, verbose_name="Enrolled At")),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to="elearning.course",
                        verbose_name="Course",
                    ),
                ),
                (
                    "purchase",
                    models.ForeignKey(
                        blank=True,
                        help_text="Purchase that granted this enrollment",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="enrollments",
                        to="elearning.purchaserecord",
                        verbose_name="Purchase",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Enrollment",
                "verbose_name_plural": "Enrollments",
                "db_table": "elearning_enrollment",
                "ordering": ["-enrolled_at"],
                "unique_together": {("user", "course")},
            },
        ),
        migrations.AddField(
            model_name="course",
            name="enrolled_students",
            field=models.ManyToManyField(
                blank=True,
                related_name="enrolled_courses",
                through="elearning.Enrollment",
                to=settings.AUTH_USER_MODEL,
                verbose_name="Enrolled Students",
            ),
        ),
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[("student", "Student"), ("instructor", "Instructor"), ("admin", "Admin")],
                        default="student",
                        help_text="Platform role of the user",
                        max_length=20,
                        verbose_name="Role",
                    ),
                ),
                ("bio", models.CharField(blank=True, max_length=200, verbose_name="Bio")),
                ("avatar_url", models.URLField(blank=True, max_length=500, verbose_name="Avatar URL")),
                (
                    "avatar_key",
                    models.CharField(
                        blank=True,
                        help_text="Object storage key used to delete the avatar",
                        max_length=500,
                        verbose_name="Avatar Storage Key",
                    ),
                ),
                ("last_active", models.DateTimeField(default=django.utils.timezone.now, verbose_name="Last Active")),
                (
                    "user",
                    models.OneToOneField(
                        help_text="Associated user account",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "User Profile",
                "verbose_name_plural": "User Profiles",
                "db_table": "elearning_profile",
            },
        ),
        migrations.CreateModel(
            name="CourseProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_completed", models.BooleanField(default=False, verbose_name="Completed")),
                (
                    "completion_percentage",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[django.core.validators.MaxValueValidator(100)],
                        verbose_name="Completion Percentage",
                    ),
                ),
                ("last_accessed", models.DateTimeField(default=django.utils.timezone.now, verbose_name="Last Accessed")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="progress_entries",
                        to="elearning.course",
                        verbose_name="Course",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="course_progress",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Course Progress",
                "verbose_name_plural": "Course Progress",
                "db_table": "elearning_course_progress",
                "ordering": ["-last_accessed"],
                "unique_together": {("user", "course")},
            },
        ),
        migrations.CreateModel(
            name="LectureProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_completed", models.BooleanField(default=False, verbose_name="Completed")),
                ("watch_time", models.PositiveIntegerField(default=0, help_text="Watched seconds", verbose_name="Watch Time")),
                ("last_watched", models.DateTimeField(default=django.utils.timezone.now, verbose_name="Last Watched")),
                (
                    "course_progress",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lecture_progress",
                        to="elearning.courseprogress",
                        verbose_name="Course Progress",
                    ),
                ),
                (
                    "lecture",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="progress_entries",
                        to="elearning.lecture",
                        verbose_name="Lecture",
                    ),
                ),
            ],
            options={
                "verbose_name": "Lecture Progress",
                "verbose_name_plural": "Lecture Progress",
                "db_table": "elearning_lecture_progress",
                "ordering": ["lecture__order"],
                "unique_together": {("course_progress", "lecture")},
            },
        ),
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("comment", models.TextField(max_length=2000, verbose_name="Comment")),
                (
                    "rating",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ],
                        verbose_name="Rating",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reviews",
                        to="elearning.course",
                        verbose_name="Course",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reviews",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Review",
                "verbose_name_plural": "Reviews",
                "db_table": "elearning_review",
                "ordering": ["-created_at"],
                "unique_together": {("user", "course")},
            },
        ),
    ]
