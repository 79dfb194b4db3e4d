# classes/models.py
from django.conf import settings
from django.db import models

from .ids import generate_id


class Classroom(models.Model):
    id = models.CharField(primary_key=True, max_length=32, default=generate_id, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ["name"]


class MembershipQuerySet(models.QuerySet):
    def students(self):
        return self.filter(role=ClassMembership.Role.STUDENT)

    def staff(self):
        return self.filter(role__in=ClassMembership.STAFF_ROLES)

    def role_of(self, user, classroom_id):
        """Role of ``user`` in the class, or None when they are not a member."""
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return (
            self.filter(user_id=user.pk, classroom_id=classroom_id)
            .values_list("role", flat=True)
            .first()
        )


class ClassMembership(models.Model):
    class Role(models.TextChoices):
        STUDENT = "student", "Student"
        TEACHER = "teacher", "Teacher"
        ADMIN = "admin", "Admin"

    STAFF_ROLES = (Role.TEACHER, Role.ADMIN)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="memberships")
    classroom = models.ForeignKey(Classroom, on_delete=models.CASCADE, related_name="memberships")
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.STUDENT)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = MembershipQuerySet.as_manager()

    class Meta:
        unique_together = ("user", "classroom")

    def __str__(self):
        return f"{self.user} in {self.classroom} ({self.role})"


class Announcement(models.Model):
    id = models.CharField(primary_key=True, max_length=32, default=generate_id, editable=False)
    classroom = models.ForeignKey(Classroom, on_delete=models.CASCADE, related_name="announcements")
    author = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL)
    body = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Announcement in {self.classroom}: {self.body[:40]}"
