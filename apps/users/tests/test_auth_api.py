"""API tests for authentication endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import CustomUser


class AuthAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = CustomUser.objects.create_user(
            email="agent@example.com",
            password="AgentPass123",
            name="Agent",
        )

    def test_login_returns_tokens(self) -> None:
        response = self.client.post(
            reverse("auth:login"),
            {"email": "Agent@Example.com", "password": "AgentPass123"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data["tokens"])
        self.assertIn("refresh", response.data["tokens"])
        self.assertEqual(response.data["user"]["role"], "agent")

    def test_login_with_wrong_password(self) -> None:
        response = self.client.post(
            reverse("auth:login"),
            {"email": "agent@example.com", "password": "wrong"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_access_token_authenticates_requests(self) -> None:
        login = self.client.post(
            reverse("auth:login"),
            {"email": "agent@example.com", "password": "AgentPass123"},
            format="json",
        )
        access = login.data["tokens"]["access"]

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        response = self.client.get(reverse("auth:me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["data"]["email"], "agent@example.com")

    def test_me_requires_authentication(self) -> None:
        response = self.client.get(reverse("auth:me"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_roles(self) -> None:
        admin = CustomUser.objects.create_superuser(email="root@example.com", password="RootPass123")

        self.assertTrue(admin.is_admin())
        self.assertFalse(self.user.is_admin())
        self.assertTrue(self.user.is_agent())
