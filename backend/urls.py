"""
URL configuration for the backend project.

- /admin/            Django admin (jazzmin)
- /api/elearning/    E-Learning API
- /api/health/       Health check
"""

from django.contrib import admin
from django.urls import include, path

from core.health import HealthCheckView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/elearning/", include("elearning.urls")),
    path("api/health/", HealthCheckView.as_view(), name="health"),
]
