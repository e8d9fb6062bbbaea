"""
E-Learning Application Models Registry

This module serves as the central models registry for the E-Learning application.
It imports and exposes all models from the logical submodules so they are
registered with Django's ORM under the single ``elearning`` app label.

Architecture:
- users/: Profiles and roles
- courses/: Courses, lectures and enrollments
- progress/: Learning progress tracking
- reviews/: Course reviews
- purchases/: Purchase ledger

Author: DSP Development Team
Version: 1.0.0
"""

from .users.models import *
from .courses.models import *
from .progress.models import *
from .reviews.models import *
from .purchases.models import *
