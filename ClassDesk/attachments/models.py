# attachments/models.py
from pathlib import PurePosixPath

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils.text import get_valid_filename

from classes.ids import generate_id

OWNER_FIELDS = ("assignment", "submission", "announcement")


def _clean_filename(name: str) -> str:
    """Keep only basename, drop leading slashes, and make it filesystem-safe."""
    base = PurePosixPath((name or "")).name.lstrip("/\\.")
    safe = get_valid_filename(base)
    return safe or "file"


def uploaded_file_path(instance, filename):
    """
    Storage key layout: uploads/<uploader id>/<file id>/<filename>.
    The file id segment keeps re-uploads of the same name apart.
    """
    owner = f"user-{instance.uploaded_by_id}" if instance.uploaded_by_id else "anonymous"
    return "/".join(["uploads", owner, instance.id, _clean_filename(filename)])


class UploadedFile(models.Model):
    id = models.CharField(primary_key=True, max_length=32, default=generate_id, editable=False)
    name = models.CharField(max_length=255)
    file = models.FileField(upload_to=uploaded_file_path, max_length=1024)
    content_type = models.CharField(max_length=255, blank=True)
    size = models.PositiveBigIntegerField(default=0)
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.name and self.file:
            self.name = _clean_filename(self.file.name)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        storage = self.file.storage
        if self.file and storage.exists(self.file.name):
            storage.delete(self.file.name)
        super().delete(*args, **kwargs)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.file.url if self.file else "",
            "content_type": self.content_type,
            "size": self.size,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }


class Link(models.Model):
    id = models.CharField(primary_key=True, max_length=32, default=generate_id, editable=False)
    url = models.URLField(max_length=2048)
    title = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title or self.url

    def as_dict(self) -> dict:
        return {"id": self.id, "url": self.url, "title": self.title}


class Attachment(models.Model):
    id = models.CharField(primary_key=True, max_length=32, default=generate_id, editable=False)
    uploader = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="attachments", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    # content: a file, a link, or neither
    file = models.ForeignKey(UploadedFile, null=True, blank=True, related_name="attachments", on_delete=models.CASCADE)
    link = models.ForeignKey(Link, null=True, blank=True, related_name="attachments", on_delete=models.CASCADE)

    # owner: exactly one
    assignment = models.ForeignKey(
        "assignments.Assignment", null=True, blank=True, related_name="attachments", on_delete=models.CASCADE
    )
    submission = models.ForeignKey(
        "assignments.Submission", null=True, blank=True, related_name="attachments", on_delete=models.CASCADE
    )
    announcement = models.ForeignKey(
        "classes.Announcement", null=True, blank=True, related_name="attachments", on_delete=models.CASCADE
    )

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(assignment__isnull=False, submission__isnull=True, announcement__isnull=True)
                    | Q(assignment__isnull=True, submission__isnull=False, announcement__isnull=True)
                    | Q(assignment__isnull=True, submission__isnull=True, announcement__isnull=False)
                ),
                name="ck_attachment_single_owner",
            ),
            models.CheckConstraint(
                condition=Q(file__isnull=True) | Q(link__isnull=True),
                name="ck_attachment_file_xor_link",
            ),
        ]

    def __str__(self):
        return f"Attachment {self.id} on {self.owner_field}"

    @property
    def owner_field(self) -> str | None:
        owners = [f for f in OWNER_FIELDS if getattr(self, f"{f}_id") is not None]
        return owners[0] if len(owners) == 1 else None

    def clean(self):
        owners = [f for f in OWNER_FIELDS if getattr(self, f"{f}_id") is not None]
        if len(owners) != 1:
            raise ValidationError(
                "An attachment needs exactly one owner (assignment, submission or announcement); got %(n)d.",
                code="owner_cardinality",
                params={"n": len(owners)},
            )
        if self.file_id is not None and self.link_id is not None:
            raise ValidationError("An attachment holds a file or a link, not both.", code="content_cardinality")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "uploader": self.uploader_id,
            "owner": self.owner_field,
            "owner_id": getattr(self, f"{self.owner_field}_id") if self.owner_field else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
