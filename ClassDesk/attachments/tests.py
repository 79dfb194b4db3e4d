import json

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse

from assignments.exceptions import Forbidden, NotFound, ValidationFailed
from assignments.models import Submission
from assignments.tests.factories import (
    Role,
    attach,
    create_assignment,
    create_classroom,
    create_file,
    create_link,
    create_user,
    enroll,
)
from classes.models import Announcement

from . import services
from .aggregators import resolve_attachment, resolve_attachments
from .models import Attachment, Link, uploaded_file_path


class AttachmentModelTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1")
        self.student = create_user("s1")
        self.assignment = create_assignment(self.classroom)
        self.submission = Submission.objects.create(assignment=self.assignment, student=self.student)

    def test_needs_exactly_one_owner(self):
        with self.assertRaises(ValidationError) as ctx:
            attach(self.teacher, link=create_link(self.teacher))
        self.assertEqual(ctx.exception.code, "owner_cardinality")

        with self.assertRaises(ValidationError):
            attach(self.teacher, assignment=self.assignment, submission=self.submission)
        self.assertFalse(Attachment.objects.exists())

    def test_file_and_link_together_are_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            attach(
                self.teacher,
                file=create_file(self.teacher),
                link=create_link(self.teacher),
                assignment=self.assignment,
            )
        self.assertEqual(ctx.exception.code, "content_cardinality")

    def test_database_enforces_single_owner(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Attachment.objects.bulk_create([
                    Attachment(uploader=self.teacher, assignment=self.assignment, submission=self.submission)
                ])

    def test_database_enforces_file_xor_link(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Attachment.objects.bulk_create([
                    Attachment(
                        uploader=self.teacher,
                        assignment=self.assignment,
                        file=create_file(self.teacher),
                        link=create_link(self.teacher),
                    )
                ])

    def test_owner_field(self):
        announcement = Announcement.objects.create(classroom=self.classroom, author=self.teacher, body="Hi")
        self.assertEqual(attach(self.teacher, assignment=self.assignment).owner_field, "assignment")
        self.assertEqual(attach(self.student, submission=self.submission).owner_field, "submission")
        self.assertEqual(attach(self.teacher, announcement=announcement).owner_field, "announcement")

    def test_upload_path_is_namespaced(self):
        f = create_file(self.teacher)
        path = uploaded_file_path(f, "../../etc/My Notes.pdf")
        self.assertEqual(path, f"uploads/user-{self.teacher.pk}/{f.id}/My_Notes.pdf")


class ResolveAttachmentTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1")
        self.assignment = create_assignment(self.classroom)

    def test_file_attachment(self):
        resolved = resolve_attachment(attach(self.teacher, file=create_file(self.teacher), assignment=self.assignment))
        self.assertEqual(resolved["file"]["name"], "notes.pdf")
        self.assertIsNone(resolved["link"])
        self.assertEqual(resolved["attachment"]["owner"], "assignment")

    def test_link_attachment(self):
        resolved = resolve_attachment(attach(self.teacher, link=create_link(self.teacher), assignment=self.assignment))
        self.assertIsNone(resolved["file"])
        self.assertEqual(resolved["link"]["url"], "https://example.com/reading")

    def test_empty_attachment(self):
        resolved = resolve_attachment(attach(self.teacher, assignment=self.assignment))
        self.assertIsNone(resolved["file"])
        self.assertIsNone(resolved["link"])

    def test_resolve_many_keeps_order(self):
        first = attach(self.teacher, file=create_file(self.teacher), assignment=self.assignment)
        second = attach(self.teacher, link=create_link(self.teacher), assignment=self.assignment)
        resolved = resolve_attachments(Attachment.objects.filter(assignment=self.assignment))
        self.assertEqual([r["attachment"]["id"] for r in resolved], [first.id, second.id])
        self.assertEqual(resolve_attachments([]), [])


class AttachmentServiceTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1")
        self.student = create_user("s1")
        self.classmate = create_user("s2")
        enroll(self.teacher, self.classroom, Role.TEACHER)
        enroll(self.student, self.classroom)
        enroll(self.classmate, self.classroom)
        self.assignment = create_assignment(self.classroom, draft=False, creator=self.teacher)
        self.submission = Submission.objects.create(assignment=self.assignment, student=self.student)

    def test_teacher_attaches_file_to_assignment(self):
        f = create_file(self.teacher)
        resolved = services.attach_to_assignment(self.assignment.pk, "C1", self.teacher, file_id=f.pk)
        self.assertEqual(resolved["file"]["id"], f.pk)
        self.assertEqual(self.assignment.attachments.count(), 1)

    def test_student_cannot_attach_to_assignment(self):
        with self.assertRaises(Forbidden):
            services.attach_to_assignment(self.assignment.pk, "C1", self.student, link_id=create_link(self.student).pk)

    def test_file_and_link_together(self):
        with self.assertRaises(ValidationFailed):
            services.attach_to_assignment(
                self.assignment.pk, "C1", self.teacher,
                file_id=create_file(self.teacher).pk, link_id=create_link(self.teacher).pk,
            )

    def test_unknown_content(self):
        with self.assertRaises(NotFound):
            services.attach_to_assignment(self.assignment.pk, "C1", self.teacher, file_id="missing")

    def test_student_attaches_to_own_submission(self):
        resolved = services.attach_to_submission(
            self.submission.pk, "C1", self.student, link_id=create_link(self.student).pk
        )
        self.assertEqual(resolved["attachment"]["owner"], "submission")

    def test_classmate_cannot_attach_to_submission(self):
        with self.assertRaises(Forbidden):
            services.attach_to_submission(
                self.submission.pk, "C1", self.classmate, link_id=create_link(self.classmate).pk
            )

    def test_register_link_validates_url(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.register_link(self.teacher, "not a url")
        self.assertIn("url", ctx.exception.errors)
        self.assertFalse(Link.objects.exists())

    def test_view_registers_link_from_url(self):
        self.client.force_login(self.student)
        url = reverse("attachments:attach_to_submission", args=["C1", self.submission.pk])
        resp = self.client.post(
            url,
            data=json.dumps({"url": "https://example.com/answer", "title": "My answer"}),
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["attachment"]["link"]["title"], "My answer")

    def test_register_link_rejects_non_text_url(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.register_link(self.teacher, 5)
        self.assertIn("url", ctx.exception.errors)
        self.assertFalse(Link.objects.exists())

    def test_view_rejects_non_text_url(self):
        self.client.force_login(self.student)
        url = reverse("attachments:attach_to_submission", args=["C1", self.submission.pk])
        resp = self.client.post(url, data=json.dumps({"url": 5}), content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Attachment.objects.exists())

    def test_forbidden_attach_creates_no_link(self):
        self.client.force_login(self.student)
        url = reverse("attachments:attach_to_assignment", args=["C1", self.assignment.pk])
        resp = self.client.post(
            url, data=json.dumps({"url": "https://example.com/x"}), content_type="application/json"
        )
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(Link.objects.exists())

    def test_attach_to_unknown_submission_creates_no_link(self):
        with self.assertRaises(NotFound):
            services.attach_to_submission("missing", "C1", self.student, url="https://example.com/x")
        self.assertFalse(Link.objects.exists())

    def test_file_and_url_together_create_no_link(self):
        with self.assertRaises(ValidationFailed):
            services.attach_to_submission(
                self.submission.pk, "C1", self.student,
                file_id=create_file(self.student).pk, url="https://example.com/x",
            )
        self.assertFalse(Link.objects.exists())
        self.assertFalse(Attachment.objects.exists())

    def test_cannot_attach_someone_elses_file(self):
        teachers_file = create_file(self.teacher)
        with self.assertRaises(Forbidden):
            services.attach_to_submission(self.submission.pk, "C1", self.student, file_id=teachers_file.pk)
        self.assertFalse(Attachment.objects.exists())

    def test_cannot_attach_someone_elses_link(self):
        students_link = create_link(self.student)
        with self.assertRaises(Forbidden):
            services.attach_to_assignment(self.assignment.pk, "C1", self.teacher, link_id=students_link.pk)
