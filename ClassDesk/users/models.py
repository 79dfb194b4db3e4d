from django.contrib.auth.models import AbstractUser
from django.db import models

class CustomUser(AbstractUser):
    profile_photo = models.CharField(max_length=512, blank=True)
    bio = models.TextField(blank=True)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    def public_summary(self) -> dict:
        """Fields safe to show to other class members (no email, no password)."""
        return {
            "id": self.pk,
            "display_name": self.display_name,
            "profile_photo": self.profile_photo,
        }

    def __str__(self):
        return self.display_name
