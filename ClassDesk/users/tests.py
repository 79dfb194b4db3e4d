from django.contrib.auth import authenticate
from django.test import TestCase

from assignments.tests.factories import create_user


class EmailOrUsernameBackendTests(TestCase):
    def setUp(self):
        self.user = create_user("maria", email="Maria@Example.com")

    def test_login_with_username(self):
        self.assertEqual(authenticate(username="maria", password="pass"), self.user)

    def test_login_with_email_is_case_insensitive(self):
        self.assertEqual(authenticate(username="maria@example.com", password="pass"), self.user)

    def test_wrong_password(self):
        self.assertIsNone(authenticate(username="maria", password="nope"))

    def test_shared_email_is_ambiguous(self):
        create_user("maria2", email="maria@example.com")
        self.assertIsNone(authenticate(username="maria@example.com", password="pass"))
        self.assertEqual(authenticate(username="maria", password="pass"), self.user)

    def test_inactive_user(self):
        self.user.is_active = False
        self.user.save()
        self.assertIsNone(authenticate(username="maria", password="pass"))


class PublicSummaryTests(TestCase):
    def test_display_name_falls_back_to_username(self):
        self.assertEqual(create_user("s1").display_name, "s1")
        self.assertEqual(create_user("s2", first_name="Alan", last_name="Turing").display_name, "Alan Turing")

    def test_summary_hides_private_fields(self):
        user = create_user("s1", profile_photo="https://cdn.example.com/s1.png")
        self.assertEqual(user.public_summary(), {
            "id": user.pk,
            "display_name": "s1",
            "profile_photo": "https://cdn.example.com/s1.png",
        })
