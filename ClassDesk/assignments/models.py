# assignments/models.py
from django.conf import settings
from django.db import models

from classes.ids import generate_id


class Assignment(models.Model):
    id = models.CharField(primary_key=True, max_length=32, default=generate_id, editable=False)
    classroom = models.ForeignKey("classes.Classroom", related_name="assignments", on_delete=models.CASCADE)
    name = models.CharField(max_length=255, blank=True)
    instructions = models.TextField(blank=True)
    draft = models.BooleanField(default=True)
    # unset until the first publish
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="created_assignments",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name or 'Untitled draft'} - {self.classroom_id}"

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "class_id": self.classroom_id,
            "name": self.name,
            "instructions": self.instructions,
            "draft": self.draft,
            "creator": self.creator_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Submission(models.Model):
    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", "In progress"
        TURNED_IN = "turned_in", "Turned in"
        RETURNED = "returned", "Returned"

    id = models.CharField(primary_key=True, max_length=32, default=generate_id, editable=False)
    assignment = models.ForeignKey(Assignment, related_name="submissions", on_delete=models.CASCADE)
    student = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="submissions", on_delete=models.CASCADE)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.IN_PROGRESS)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["assignment", "student"], name="uq_submission_assignment_student"),
        ]
        ordering = ["created_at"]

    def __str__(self):
        return f"Submission of {self.student} for {self.assignment}"

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "assignment_id": self.assignment_id,
            "student_id": self.student_id,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Notification(models.Model):
    """Outbox row: one email intent per recipient, written with the publish."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SENT = "sent", "Sent"
        GIVEN_UP = "given_up", "Given up"

    id = models.CharField(primary_key=True, max_length=32, default=generate_id, editable=False)
    assignment = models.ForeignKey(Assignment, related_name="notifications", on_delete=models.CASCADE)
    recipient = models.EmailField()
    subject = models.CharField(max_length=512)
    html_body = models.TextField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(blank=True, null=True)
    # set while a retry is scheduled
    next_attempt_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [models.Index(fields=["status", "created_at"], name="ix_notification_status")]

    def __str__(self):
        return f"{self.subject} -> {self.recipient} ({self.status})"
