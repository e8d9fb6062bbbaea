"""
Test Script für die Token Generierung, richtige Formatierung und das neue
Ausstellen von Access Tokens. Tokens werden für den Login benötigt und
liegen ausschließlich in HTTP-only Cookies.
"""


from django.contrib.auth.models import User
from rest_framework import status
from rest_framework.test import APITestCase

from elearning.users.models import Profile

LOGIN_URL = "/api/elearning/token/"
REFRESH_URL = "/api/elearning/token/refresh/"
LOGOUT_URL = "/api/elearning/users/logout/"
PROFILE_URL = "/api/elearning/users/profile/"


class TokenTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="testUser", password="Sicheres-Passwort-42")
        response = self.client.post(
            LOGIN_URL, {"username": "testUser", "password": "Sicheres-Passwort-42"}, format="json"
        )
        self.login_response = response
        self.access_token = response.cookies.get("access_token")
        self.refresh_token = response.cookies.get("refresh_token")

    def test_tokens_only_in_cookies(self):
        body = self.login_response.json()
        self.assertEqual(self.login_response.status_code, status.HTTP_200_OK)
        self.assertNotIn("access", body)
        self.assertNotIn("refresh", body)
        self.assertEqual(body["username"], "testUser")
        self.assertEqual(body["role"], Profile.Role.STUDENT)
        self.assertTrue(self.access_token["httponly"])

    def test_wrong_password(self):
        response = self.client.post(
            LOGIN_URL, {"username": "testUser", "password": "falsch"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_cookie_authenticates_requests(self):
        response = self.client.get(PROFILE_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["username"], "testUser")

    def test_bearer_header_fallback(self):
        access = self.access_token.value
        self.client.cookies.clear()
        response = self.client.get(PROFILE_URL, HTTP_AUTHORIZATION=f"Bearer {access}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_refresh_token_success(self):
        response = self.client.post(REFRESH_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.cookies.get("access_token"))

    def test_refresh_token_failure(self):
        self.client.cookies["refresh_token"] = "bad token"
        response = self.client.post(REFRESH_URL)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_refresh_token_missing(self):
        del self.client.cookies["refresh_token"]
        response = self.client.post(REFRESH_URL)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_logout_blacklists_refresh_token(self):
        refresh = self.refresh_token.value
        response = self.client.post(LOGOUT_URL)
        self.assertEqual(response.status_code, 205)

        self.client.cookies["refresh_token"] = refresh
        response = self.client.post(REFRESH_URL)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
