from unittest.mock import patch

from django.core import mail
from django.db import DatabaseError
from django.test import TestCase, override_settings

from assignments import services
from assignments.exceptions import Forbidden, InternalError, NotFound, ValidationFailed
from assignments.models import Assignment, Notification, Submission
from assignments.notifications import deliver_notification
from attachments.models import Attachment
from comments.models import Comment, PrivateComment

from .factories import (
    Role,
    attach,
    create_assignment,
    create_classroom,
    create_file,
    create_link,
    create_user,
    enroll,
)

HW1 = {"name": "HW1", "instructions": "Read ch1", "draft": False}


class DraftTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1")
        enroll(self.teacher, self.classroom, Role.TEACHER)

    def test_teacher_creates_empty_draft(self):
        assignment_id = services.draft("C1", self.teacher)

        a = Assignment.objects.get(pk=assignment_id)
        self.assertTrue(a.draft)
        self.assertEqual(a.name, "")
        self.assertEqual(a.instructions, "")
        self.assertIsNone(a.creator_id)
        self.assertEqual(Submission.objects.count(), 0)
        self.assertEqual(Notification.objects.count(), 0)

    def test_admin_can_draft(self):
        admin = create_user("a1")
        enroll(admin, self.classroom, Role.ADMIN)
        self.assertTrue(services.draft("C1", admin))

    def test_student_cannot_draft(self):
        student = create_user("s1")
        enroll(student, self.classroom)
        with self.assertRaises(Forbidden):
            services.draft("C1", student)
        self.assertEqual(Assignment.objects.count(), 0)

    def test_non_member_cannot_draft(self):
        with self.assertRaises(Forbidden):
            services.draft("C1", create_user("outsider"))

    def test_unknown_class(self):
        with self.assertRaises(NotFound):
            services.draft("nope", self.teacher)


class PublishTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1")
        enroll(self.teacher, self.classroom, Role.TEACHER)
        self.s1 = create_user("s1")
        self.s2 = create_user("s2")
        enroll(self.s1, self.classroom)
        enroll(self.s2, self.classroom)
        self.assignment = create_assignment(self.classroom, id="abc123")

    def _publish(self, fields=HW1, actor=None):
        with patch("assignments.notifications.enqueue_notifications") as enqueue:
            with self.captureOnCommitCallbacks(execute=True):
                result = services.publish("abc123", "C1", actor or self.teacher, fields)
        return result, enqueue

    def test_publish_scenario(self):
        result, enqueue = self._publish()

        self.assertFalse(result.draft)
        self.assertEqual(result.name, "HW1")
        self.assertEqual(result.instructions, "Read ch1")
        self.assertEqual(result.creator_id, self.teacher.pk)

        subs = Submission.objects.filter(assignment_id="abc123")
        self.assertEqual(subs.count(), 2)
        self.assertEqual({s.student_id for s in subs}, {self.s1.pk, self.s2.pk})
        self.assertTrue(all(s.status == Submission.Status.IN_PROGRESS for s in subs))

        rows = Notification.objects.filter(assignment_id="abc123")
        self.assertEqual(sorted(rows.values_list("recipient", flat=True)), ["s1@example.com", "s2@example.com"])
        enqueue.assert_called_once()
        self.assertEqual(sorted(enqueue.call_args.args[0]), sorted(rows.values_list("id", flat=True)))

    def test_notifications_are_delivered_per_recipient(self):
        self._publish()
        for n in Notification.objects.all():
            self.assertEqual(deliver_notification(n.pk), Notification.Status.SENT)

        self.assertEqual(len(mail.outbox), 2)
        self.assertEqual(sorted(m.to[0] for m in mail.outbox), ["s1@example.com", "s2@example.com"])
        msg = mail.outbox[0]
        self.assertEqual(msg.subject, "New Assignment from t1: HW1")
        html, mimetype = msg.alternatives[0]
        self.assertEqual(mimetype, "text/html")
        self.assertIn("Read ch1", html)

    def test_publish_twice_does_not_duplicate_submissions(self):
        self._publish()
        _, enqueue = self._publish({"instructions": "Read ch1 and ch2"})

        self.assertEqual(Submission.objects.filter(assignment_id="abc123").count(), 2)
        # only the draft -> live transition notifies
        self.assertEqual(Notification.objects.count(), 2)
        enqueue.assert_not_called()
        self.assertEqual(Assignment.objects.get(pk="abc123").instructions, "Read ch1 and ch2")

    def test_republish_with_grown_roster_adds_only_new_students(self):
        self._publish()
        s3 = create_user("s3")
        enroll(s3, self.classroom)
        self._publish(HW1)

        self.assertEqual(Submission.objects.filter(assignment_id="abc123").count(), 3)
        self.assertEqual(Submission.objects.filter(assignment_id="abc123", student=s3).count(), 1)

    def test_creator_is_kept_when_another_teacher_edits(self):
        self._publish()
        other = create_user("t2")
        enroll(other, self.classroom, Role.TEACHER)

        result, _ = self._publish({"name": "HW1 (edited)"}, actor=other)
        self.assertEqual(result.creator_id, self.teacher.pk)
        self.assertEqual(result.name, "HW1 (edited)")

    def test_saving_a_draft_does_not_notify(self):
        result, enqueue = self._publish({"name": "HW1", "draft": True})
        self.assertTrue(result.draft)
        self.assertEqual(Notification.objects.count(), 0)
        enqueue.assert_not_called()

    def test_live_assignment_needs_a_name(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.publish("abc123", "C1", self.teacher, {"name": "   ", "draft": False})
        self.assertIn("name", ctx.exception.errors)
        self.assertEqual(Submission.objects.count(), 0)
        self.assertTrue(Assignment.objects.get(pk="abc123").draft)

    def test_name_must_fit_on_one_line(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.publish("abc123", "C1", self.teacher, {"name": "HW1\nPart 2", "draft": False})
        self.assertEqual(ctx.exception.errors["name"][0]["code"], "multiline")
        self.assertEqual(Notification.objects.count(), 0)
        self.assertTrue(Assignment.objects.get(pk="abc123").draft)

    def test_unknown_assignment(self):
        with self.assertRaises(NotFound):
            services.publish("missing", "C1", self.teacher, HW1)

    def test_assignment_from_another_class(self):
        other = create_classroom("C2")
        enroll(self.teacher, other, Role.TEACHER)
        with self.assertRaises(NotFound):
            services.publish("abc123", "C2", self.teacher, HW1)

    def test_student_cannot_publish(self):
        with self.assertRaises(Forbidden):
            services.publish("abc123", "C1", self.s1, HW1)
        self.assertEqual(Submission.objects.count(), 0)

    def test_failure_rolls_back_fan_out(self):
        with patch.object(Assignment, "save", side_effect=DatabaseError("disk full")):
            with self.assertRaises(InternalError):
                services.publish("abc123", "C1", self.teacher, HW1)

        self.assertEqual(Submission.objects.count(), 0)
        self.assertEqual(Notification.objects.count(), 0)
        a = Assignment.objects.get(pk="abc123")
        self.assertTrue(a.draft)
        self.assertIsNone(a.creator_id)


class DeleteTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1")
        self.other_teacher = create_user("t2")
        self.admin = create_user("a1")
        self.student = create_user("s1")
        enroll(self.teacher, self.classroom, Role.TEACHER)
        enroll(self.other_teacher, self.classroom, Role.TEACHER)
        enroll(self.admin, self.classroom, Role.ADMIN)
        enroll(self.student, self.classroom)

    def test_delete_draft_removes_attachments_and_owned_records(self):
        a = create_assignment(self.classroom)
        attach(self.teacher, file=create_file(self.teacher), assignment=a)
        attach(self.teacher, link=create_link(self.teacher), assignment=a)
        sub = Submission.objects.create(assignment=a, student=self.student)
        attach(self.student, file=create_file(self.student, "answer.pdf"), submission=sub)
        Comment.objects.create(assignment=a, author=self.student, body="Question?")
        PrivateComment.objects.create(submission=sub, author=self.teacher, body="Note")

        services.delete(a.pk, "C1", self.teacher)

        self.assertFalse(Assignment.objects.filter(pk=a.pk).exists())
        self.assertEqual(Attachment.objects.count(), 0)
        self.assertEqual(Submission.objects.count(), 0)
        self.assertEqual(Comment.objects.count(), 0)
        self.assertEqual(PrivateComment.objects.count(), 0)

    def test_student_is_always_forbidden(self):
        for draft in (True, False):
            a = create_assignment(self.classroom, draft=draft, creator=self.teacher)
            with self.assertRaises(Forbidden):
                services.delete(a.pk, "C1", self.student)
            self.assertTrue(Assignment.objects.filter(pk=a.pk).exists())

    def test_non_member_is_forbidden(self):
        a = create_assignment(self.classroom)
        with self.assertRaises(Forbidden):
            services.delete(a.pk, "C1", create_user("outsider"))

    def test_unknown_assignment(self):
        with self.assertRaises(NotFound):
            services.delete("missing", "C1", self.teacher)

    def test_any_teacher_can_delete_a_draft(self):
        a = create_assignment(self.classroom)
        services.delete(a.pk, "C1", self.other_teacher)
        self.assertFalse(Assignment.objects.filter(pk=a.pk).exists())

    @override_settings(ASSIGNMENT_DELETE_POLICY="creator_only")
    def test_creator_only_policy(self):
        a = create_assignment(self.classroom, draft=False, creator=self.teacher)
        with self.assertRaises(Forbidden):
            services.delete(a.pk, "C1", self.other_teacher)
        services.delete(a.pk, "C1", self.teacher)
        self.assertFalse(Assignment.objects.filter(pk=a.pk).exists())

        b = create_assignment(self.classroom, draft=False, creator=self.teacher)
        services.delete(b.pk, "C1", self.admin)
        self.assertFalse(Assignment.objects.filter(pk=b.pk).exists())

    @override_settings(ASSIGNMENT_DELETE_POLICY="protect_own_published")
    def test_protect_own_published_policy(self):
        a = create_assignment(self.classroom, draft=False, creator=self.teacher)
        with self.assertRaises(Forbidden):
            services.delete(a.pk, "C1", self.teacher)
        services.delete(a.pk, "C1", self.other_teacher)
        self.assertFalse(Assignment.objects.filter(pk=a.pk).exists())


class StudentViewTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1", first_name="Ada", last_name="Lovelace", profile_photo="ada.png")
        self.student = create_user("s1")
        enroll(self.teacher, self.classroom, Role.TEACHER)
        enroll(self.student, self.classroom)
        self.assignment = create_assignment(self.classroom, draft=False, creator=self.teacher, name="HW1")
        self.submission = Submission.objects.create(assignment=self.assignment, student=self.student)

    def test_combined_read_model(self):
        attach(self.teacher, file=create_file(self.teacher), assignment=self.assignment)
        attach(self.student, link=create_link(self.student), submission=self.submission)
        Comment.objects.create(assignment=self.assignment, author=self.teacher, body="Due Friday")
        PrivateComment.objects.create(submission=self.submission, author=self.student, body="Can I have more time?")

        view = services.student_view(self.assignment.pk, "C1", self.student)

        self.assertEqual(view["assignment"]["id"], self.assignment.pk)
        self.assertEqual(view["submission"]["id"], self.submission.pk)
        self.assertEqual(len(view["assignment_attachments"]), 1)
        self.assertIsNotNone(view["assignment_attachments"][0]["file"])
        self.assertIsNone(view["assignment_attachments"][0]["link"])
        self.assertEqual(len(view["submission_attachments"]), 1)
        self.assertIsNotNone(view["submission_attachments"][0]["link"])

        commenter = view["comments"][0]["commenter"]
        self.assertEqual(commenter["display_name"], "Ada Lovelace")
        self.assertEqual(commenter["profile_photo"], "ada.png")
        self.assertNotIn("email", commenter)
        self.assertEqual(view["comments"][0]["comment"]["body"], "Due Friday")
        self.assertEqual(view["private_comments"][0]["comment"]["body"], "Can I have more time?")

    def test_other_students_private_comments_are_not_included(self):
        classmate = create_user("s2")
        enroll(classmate, self.classroom)
        theirs = Submission.objects.create(assignment=self.assignment, student=classmate)
        PrivateComment.objects.create(submission=theirs, author=classmate, body="secret")

        view = services.student_view(self.assignment.pk, "C1", self.student)
        self.assertEqual(view["private_comments"], [])

    def test_student_not_enrolled_is_forbidden(self):
        outsider = create_user("s9")
        with self.assertRaises(Forbidden):
            services.student_view(self.assignment.pk, "C1", outsider)

    def test_teacher_is_forbidden(self):
        with self.assertRaises(Forbidden):
            services.student_view(self.assignment.pk, "C1", self.teacher)

    def test_draft_is_hidden(self):
        draft = create_assignment(self.classroom)
        with self.assertRaises(NotFound):
            services.student_view(draft.pk, "C1", self.student)

    def test_unknown_assignment(self):
        with self.assertRaises(NotFound):
            services.student_view("missing", "C1", self.student)

    def test_late_enrolled_student_gets_a_submission(self):
        late = create_user("s3")
        enroll(late, self.classroom)

        view = services.student_view(self.assignment.pk, "C1", late)
        self.assertEqual(view["submission"]["student_id"], late.pk)
        self.assertEqual(view["submission"]["status"], Submission.Status.IN_PROGRESS)
        self.assertEqual(Submission.objects.filter(assignment=self.assignment, student=late).count(), 1)


class TeacherViewTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1")
        self.student = create_user("s1")
        enroll(self.teacher, self.classroom, Role.TEACHER)
        enroll(self.student, self.classroom)
        self.assignment = create_assignment(self.classroom, draft=False, creator=self.teacher)

    def test_no_submissions_is_not_an_error(self):
        view = services.teacher_view(self.assignment.pk, "C1", self.teacher)
        self.assertEqual(view["submissions"], [])
        self.assertEqual(view["assignment_attachments"], [])

    def test_submissions_carry_student_and_attachments(self):
        sub = Submission.objects.create(assignment=self.assignment, student=self.student)
        attach(self.student, file=create_file(self.student, "answer.pdf"), submission=sub)
        attach(self.teacher, link=create_link(self.teacher), assignment=self.assignment)

        view = services.teacher_view(self.assignment.pk, "C1", self.teacher)

        self.assertEqual(len(view["submissions"]), 1)
        entry = view["submissions"][0]
        self.assertEqual(entry["submission"]["id"], sub.pk)
        self.assertEqual(entry["student"]["display_name"], "s1")
        self.assertEqual(entry["attachments"][0]["file"]["name"], "answer.pdf")
        self.assertEqual(view["assignment_attachments"][0]["link"]["url"], "https://example.com/reading")

    def test_student_is_forbidden(self):
        with self.assertRaises(Forbidden):
            services.teacher_view(self.assignment.pk, "C1", self.student)

    def test_teacher_of_another_class_is_forbidden(self):
        other = create_user("t9")
        enroll(other, create_classroom("C2"), Role.TEACHER)
        with self.assertRaises(Forbidden):
            services.teacher_view(self.assignment.pk, "C1", other)
