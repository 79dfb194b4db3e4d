import json

from django.test import TestCase
from django.urls import reverse

from assignments.exceptions import Forbidden, NotFound, ValidationFailed
from assignments.models import Submission
from assignments.tests.factories import Role, create_assignment, create_classroom, create_user, enroll

from . import services
from .aggregators import resolve_comments
from .models import Comment, PrivateComment


class ResolveCommentsTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1", first_name="Ada", last_name="Lovelace")
        self.student = create_user("s1")
        self.assignment = create_assignment(self.classroom, draft=False, creator=self.teacher)

    def test_pairs_comment_with_public_author_summary(self):
        Comment.objects.create(assignment=self.assignment, author=self.teacher, body="Due Friday")
        Comment.objects.create(assignment=self.assignment, author=self.student, body="Thanks")

        resolved = resolve_comments(Comment.objects.filter(assignment=self.assignment))

        self.assertEqual([r["comment"]["body"] for r in resolved], ["Due Friday", "Thanks"])
        self.assertEqual(resolved[0]["commenter"], {
            "id": self.teacher.pk,
            "display_name": "Ada Lovelace",
            "profile_photo": "",
        })
        self.assertEqual(resolved[1]["commenter"]["display_name"], "s1")

    def test_works_for_private_comments(self):
        submission = Submission.objects.create(assignment=self.assignment, student=self.student)
        PrivateComment.objects.create(submission=submission, author=self.student, body="Question")

        resolved = resolve_comments(PrivateComment.objects.filter(submission=submission))
        self.assertEqual(resolved[0]["commenter"]["id"], self.student.pk)
        self.assertEqual(resolved[0]["comment"]["body"], "Question")

    def test_comments_without_author_are_skipped(self):
        orphan = Comment(assignment=self.assignment, author_id=987654, body="ghost")
        with self.assertLogs("comments.aggregators", level="WARNING"):
            self.assertEqual(resolve_comments([orphan]), [])

    def test_empty(self):
        self.assertEqual(resolve_comments([]), [])


class CommentServiceTests(TestCase):
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

    def test_member_posts_comment(self):
        resolved = services.post_comment(self.assignment.pk, "C1", self.classmate, "  When is it due?  ")
        self.assertEqual(resolved["comment"]["body"], "When is it due?")
        self.assertEqual(resolved["commenter"]["id"], self.classmate.pk)
        self.assertEqual(self.assignment.comments.count(), 1)

    def test_outsider_cannot_comment(self):
        with self.assertRaises(Forbidden):
            services.post_comment(self.assignment.pk, "C1", create_user("outsider"), "hi")

    def test_drafts_take_no_comments(self):
        draft = create_assignment(self.classroom)
        with self.assertRaises(NotFound):
            services.post_comment(draft.pk, "C1", self.teacher, "hi")

    def test_empty_body(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.post_comment(self.assignment.pk, "C1", self.student, "   ")
        self.assertIn("body", ctx.exception.errors)

    def test_private_comment_by_owner_and_teacher(self):
        services.post_private_comment(self.submission.pk, "C1", self.student, "Can I have more time?")
        services.post_private_comment(self.submission.pk, "C1", self.teacher, "Yes, until Monday.")
        self.assertEqual(self.submission.private_comments.count(), 2)

    def test_classmate_cannot_post_private_comment(self):
        with self.assertRaises(Forbidden):
            services.post_private_comment(self.submission.pk, "C1", self.classmate, "peek")
        self.assertEqual(PrivateComment.objects.count(), 0)

    def test_private_comment_on_unknown_submission(self):
        with self.assertRaises(NotFound):
            services.post_private_comment("missing", "C1", self.teacher, "hi")

    def test_post_comment_view(self):
        self.client.force_login(self.student)
        url = reverse("comments:post_comment", args=["C1", self.assignment.pk])
        resp = self.client.post(url, data=json.dumps({"body": "Question"}), content_type="application/json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["comment"]["comment"]["body"], "Question")

    def test_post_private_comment_view_forbidden(self):
        self.client.force_login(self.classmate)
        url = reverse("comments:post_private_comment", args=["C1", self.submission.pk])
        resp = self.client.post(url, data=json.dumps({"body": "peek"}), content_type="application/json")
        self.assertEqual(resp.status_code, 403)

    def test_non_text_body(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.post_private_comment(self.submission.pk, "C1", self.student, ["hi"])
        self.assertEqual(ctx.exception.errors["body"][0]["code"], "invalid")

    def test_post_comment_view_rejects_non_text_body(self):
        self.client.force_login(self.student)
        url = reverse("comments:post_comment", args=["C1", self.assignment.pk])
        resp = self.client.post(url, data=json.dumps({"body": 5}), content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("body", resp.json()["errors"])
        self.assertEqual(Comment.objects.count(), 0)
