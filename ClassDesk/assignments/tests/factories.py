from __future__ import annotations

from uuid import uuid4

from django.contrib.auth import get_user_model

from assignments.models import Assignment
from attachments.models import Attachment, Link, UploadedFile
from classes.models import ClassMembership, Classroom

Role = ClassMembership.Role


def create_user(username: str | None = None, **extra):
    username = username or f"user-{uuid4().hex[:8]}"
    extra.setdefault("email", f"{username}@example.com")
    return get_user_model().objects.create_user(username=username, password="pass", **extra)


def create_classroom(class_id: str | None = None, name: str = "Physics") -> Classroom:
    if class_id:
        return Classroom.objects.create(id=class_id, name=name)
    return Classroom.objects.create(name=name)


def enroll(user, classroom: Classroom, role: str = Role.STUDENT) -> ClassMembership:
    return ClassMembership.objects.create(user=user, classroom=classroom, role=role)


def create_assignment(classroom: Classroom, *, draft: bool = True, creator=None, **fields) -> Assignment:
    if not draft:
        fields.setdefault("name", "Homework")
        fields.setdefault("instructions", "Do the exercises.")
    return Assignment.objects.create(classroom=classroom, draft=draft, creator=creator, **fields)


def create_file(uploader, name: str = "notes.pdf") -> UploadedFile:
    return UploadedFile.objects.create(
        name=name,
        file=f"uploads/user-{uploader.pk}/{name}",
        content_type="application/pdf",
        size=1024,
        uploaded_by=uploader,
    )


def create_link(user, url: str = "https://example.com/reading") -> Link:
    return Link.objects.create(url=url, title="Reading", created_by=user)


def attach(uploader, *, file=None, link=None, **owner) -> Attachment:
    return Attachment.objects.create(uploader=uploader, file=file, link=link, **owner)
