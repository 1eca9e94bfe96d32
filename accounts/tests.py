from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status
from django.contrib.auth import get_user_model
from .models import Role

User = get_user_model()


class RoleModelTest(TestCase):
    """Test cases for Role model."""

    def setUp(self):
        self.role = Role.objects.create(
            name="test_role",
            description="Test role description"
        )

    def test_role_creation(self):
        """Test that role can be created successfully."""
        self.assertEqual(self.role.name, "test_role")
        self.assertEqual(self.role.description, "Test role description")

    def test_role_str_representation(self):
        """Test the string representation of role."""
        self.assertEqual(str(self.role), "test_role")


class UserModelTest(TestCase):
    """Staff and superuser flags follow the role."""

    def setUp(self):
        self.admin_role, _ = Role.objects.get_or_create(name="admin")
        self.user_role, _ = Role.objects.get_or_create(name="user")

    def test_admin_role_grants_staff_and_superuser(self):
        user = User.objects.create_user(
            username="ops", email="ops@test.com", password="pass12345", role=self.admin_role
        )
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)

    def test_user_role_is_not_staff(self):
        user = User.objects.create_user(
            username="rider", email="rider@test.com", password="pass12345", role=self.user_role
        )
        self.assertFalse(user.is_staff)
        self.assertFalse(user.is_superuser)

    def test_user_without_role(self):
        user = User.objects.create_user(username="norole", email="n@test.com", password="pass12345")
        self.assertFalse(user.is_staff)
        self.assertEqual(str(user), "norole (No Role)")

    def test_create_superuser_assigns_admin_role(self):
        user = User.objects.create_superuser(
            username="root", email="root@test.com", password="pass12345"
        )
        self.assertEqual(user.role.name, "admin")
        self.assertTrue(user.is_superuser)

    def test_create_user_requires_username(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(username="", email="x@test.com", password="pass12345")


class LoginAPITest(APITestCase):
    """Test cases for JWT login and profile."""

    def setUp(self):
        self.user_role, _ = Role.objects.get_or_create(name="user")
        self.user = User.objects.create_user(
            username="testuser",
            email="test@example.com",
            password="testpass123",
            role=self.user_role,
        )
        self.login_url = reverse("login")
        self.profile_url = reverse("profile")

    def test_login_success(self):
        """Valid credentials return a token pair and the user."""
        response = self.client.post(
            self.login_url, {"username": "testuser", "password": "testpass123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data["tokens"])
        self.assertIn("refresh", response.data["tokens"])
        self.assertEqual(response.data["user"]["username"], "testuser")
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login)

    def test_login_invalid_credentials(self):
        response = self.client.post(
            self.login_url, {"username": "testuser", "password": "wrong"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])

    def test_login_inactive_user(self):
        self.user.is_active = False
        self.user.save()
        response = self.client.post(
            self.login_url, {"username": "testuser", "password": "testpass123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_profile_with_access_token(self):
        login = self.client.post(
            self.login_url, {"username": "testuser", "password": "testpass123"}, format="json"
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['tokens']['access']}")
        response = self.client.get(self.profile_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "test@example.com")
        self.assertEqual(response.data["role"]["name"], "user")

    def test_profile_requires_authentication(self):
        response = self.client.get(self.profile_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])

    def test_response_carries_trace_id(self):
        response = self.client.get(self.profile_url)
        self.assertTrue(response.has_header("X-Trace-ID"))
