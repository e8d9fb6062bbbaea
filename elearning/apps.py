"""
E-Learning Application Configuration

Author: DSP Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class ElearningConfig(AppConfig):
    """
    Django app for courses, lectures, purchases, progress and reviews.

    All models of the sub packages are registered under the ``elearning``
    app label through ``elearning/models.py``.
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "elearning"
    verbose_name: str = "E-Learning System"

    def ready(self) -> None:
        # Profile signal receivers
        super().ready()
        from .users import models  # noqa: F401
