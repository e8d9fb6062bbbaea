"""
Health Check Endpoint

GET /api/health/ reports database connectivity; 503 if the database
cannot be reached so load balancers can take the instance out.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
import time

from django.db import DatabaseError, connection
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


class HealthCheckView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        try:
            connection.ensure_connection()
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
            database = "connected"
        except DatabaseError:
            logger.exception("Health check: database unreachable")
            database = "disconnected"

        healthy = database == "connected"
        return Response(
            {
                "status": "healthy" if healthy else "unhealthy",
                "timestamp": timezone.now().isoformat(),
                "uptime": round(time.monotonic() - STARTED_AT, 2),
                "services": {"database": database},
            },
            status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
