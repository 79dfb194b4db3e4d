from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ImproperlyConfigured
from django.test import TestCase, override_settings

from assignments import access
from assignments.exceptions import Forbidden
from assignments.models import Submission

from .factories import Role, create_assignment, create_classroom, create_user, enroll


class RoleLookupTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.teacher = create_user("t1")
        self.student = create_user("s1")
        enroll(self.teacher, self.classroom, Role.TEACHER)
        enroll(self.student, self.classroom)

    def test_role_in_class(self):
        self.assertEqual(access.role_in_class(self.teacher, "C1"), Role.TEACHER)
        self.assertEqual(access.role_in_class(self.student, "C1"), Role.STUDENT)
        self.assertIsNone(access.role_in_class(create_user("outsider"), "C1"))
        self.assertIsNone(access.role_in_class(AnonymousUser(), "C1"))

    def test_roles_are_per_class(self):
        other = create_classroom("C2")
        enroll(self.student, other, Role.TEACHER)
        self.assertEqual(access.role_in_class(self.student, "C1"), Role.STUDENT)
        self.assertEqual(access.require_staff(self.student, "C2"), Role.TEACHER)

    def test_require_staff(self):
        self.assertEqual(access.require_staff(self.teacher, "C1"), Role.TEACHER)
        with self.assertRaises(Forbidden):
            access.require_staff(self.student, "C1")

    def test_require_student(self):
        self.assertEqual(access.require_student(self.student, "C1"), Role.STUDENT)
        with self.assertRaises(Forbidden):
            access.require_student(self.teacher, "C1")
        with self.assertRaises(Forbidden):
            access.require_student(create_user("outsider"), "C1")

    def test_require_member(self):
        access.require_member(self.student, "C1")
        access.require_member(self.teacher, "C1")
        with self.assertRaises(Forbidden):
            access.require_member(create_user("outsider"), "C1")


class DeletePolicyTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.creator = create_user("t1")
        self.colleague = create_user("t2")
        self.admin = create_user("a1")
        self.published = create_assignment(self.classroom, draft=False, creator=self.creator)
        self.draft = create_assignment(self.classroom)

    def test_students_never_delete(self):
        student = create_user("s1")
        for policy in access.DELETE_POLICIES:
            self.assertFalse(access.can_delete(student, Role.STUDENT, self.draft, policy))
            self.assertFalse(access.can_delete(student, Role.STUDENT, self.published, policy))
            self.assertFalse(access.can_delete(student, None, self.draft, policy))

    def test_drafts_are_deletable_by_any_staff(self):
        for policy in access.DELETE_POLICIES:
            self.assertTrue(access.can_delete(self.colleague, Role.TEACHER, self.draft, policy))
            self.assertTrue(access.can_delete(self.admin, Role.ADMIN, self.draft, policy))

    def test_creator_only(self):
        policy = access.DELETE_POLICY_CREATOR_ONLY
        self.assertTrue(access.can_delete(self.creator, Role.TEACHER, self.published, policy))
        self.assertFalse(access.can_delete(self.colleague, Role.TEACHER, self.published, policy))
        self.assertTrue(access.can_delete(self.admin, Role.ADMIN, self.published, policy))

    def test_protect_own_published(self):
        policy = access.DELETE_POLICY_PROTECT_OWN_PUBLISHED
        self.assertFalse(access.can_delete(self.creator, Role.TEACHER, self.published, policy))
        self.assertTrue(access.can_delete(self.colleague, Role.TEACHER, self.published, policy))
        self.assertTrue(access.can_delete(self.admin, Role.ADMIN, self.published, policy))

    def test_published_without_creator(self):
        orphan = create_assignment(self.classroom, draft=False)
        self.assertFalse(access.can_delete(self.colleague, Role.TEACHER, orphan, access.DELETE_POLICY_CREATOR_ONLY))
        self.assertTrue(access.can_delete(self.admin, Role.ADMIN, orphan, access.DELETE_POLICY_CREATOR_ONLY))

    @override_settings(ASSIGNMENT_DELETE_POLICY="anyone")
    def test_unknown_policy_is_a_configuration_error(self):
        with self.assertRaises(ImproperlyConfigured):
            access.delete_policy()

    def test_default_policy(self):
        self.assertEqual(access.delete_policy(), access.DELETE_POLICY_CREATOR_ONLY)


class SubmissionAccessTests(TestCase):
    def setUp(self):
        self.classroom = create_classroom("C1")
        self.owner = create_user("s1")
        self.classmate = create_user("s2")
        self.teacher = create_user("t1")
        enroll(self.owner, self.classroom)
        enroll(self.classmate, self.classroom)
        enroll(self.teacher, self.classroom, Role.TEACHER)
        assignment = create_assignment(self.classroom, draft=False)
        self.submission = Submission.objects.create(assignment=assignment, student=self.owner)

    def test_owner_and_staff(self):
        access.require_submission_access(self.owner, self.submission, "C1")
        access.require_submission_access(self.teacher, self.submission, "C1")

    def test_classmate_is_refused(self):
        with self.assertRaises(Forbidden):
            access.require_submission_access(self.classmate, self.submission, "C1")

    def test_owner_after_leaving_class_is_refused(self):
        self.owner.memberships.all().delete()
        with self.assertRaises(Forbidden):
            access.require_submission_access(self.owner, self.submission, "C1")
