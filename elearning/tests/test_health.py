from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from rest_framework import status


class HealthCheckTests(TestCase):
    def test_healthy(self):
        response = self.client.get("/api/health/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["services"]["database"], "connected")

    @mock.patch("core.health.connection")
    def test_database_unreachable(self, mock_connection):
        mock_connection.ensure_connection.side_effect = DatabaseError("down")
        response = self.client.get("/api/health/")
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.json()["services"]["database"], "disconnected")
