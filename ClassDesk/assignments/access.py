# assignments/access.py
import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from classes.models import ClassMembership
from .exceptions import Forbidden

logger = logging.getLogger(__name__)

Role = ClassMembership.Role

# Who may delete a *published* assignment. Drafts follow the plain staff rule.
#   creator_only:          the recorded creator or a class admin
#   protect_own_published: anyone on staff except a teacher who created it
DELETE_POLICY_CREATOR_ONLY = "creator_only"
DELETE_POLICY_PROTECT_OWN_PUBLISHED = "protect_own_published"
DELETE_POLICIES = (DELETE_POLICY_CREATOR_ONLY, DELETE_POLICY_PROTECT_OWN_PUBLISHED)


# -----------------------
# Role lookup
# -----------------------
def role_in_class(user, class_id):
    return ClassMembership.objects.role_of(user, class_id)


def _is_staff(role) -> bool:
    return role in ClassMembership.STAFF_ROLES


def require_staff(user, class_id):
    """Teacher or admin of the class; returns the role."""
    role = role_in_class(user, class_id)
    if not _is_staff(role):
        raise Forbidden("Only teachers and admins of this class can do that.")
    return role


def require_student(user, class_id):
    role = role_in_class(user, class_id)
    if role != Role.STUDENT:
        raise Forbidden("Only students enrolled in this class can do that.")
    return role


def require_member(user, class_id):
    role = role_in_class(user, class_id)
    if role is None:
        raise Forbidden("You are not a member of this class.")
    return role


# -----------------------
# Delete
# -----------------------
def delete_policy() -> str:
    policy = getattr(settings, "ASSIGNMENT_DELETE_POLICY", DELETE_POLICY_CREATOR_ONLY)
    if policy not in DELETE_POLICIES:
        raise ImproperlyConfigured(
            f"ASSIGNMENT_DELETE_POLICY must be one of {', '.join(DELETE_POLICIES)}; got {policy!r}"
        )
    return policy


def can_delete(user, role, assignment, policy: str | None = None) -> bool:
    if not _is_staff(role):
        return False
    if assignment.draft:
        return True

    is_creator = assignment.creator_id is not None and assignment.creator_id == user.pk
    policy = policy or delete_policy()
    if policy == DELETE_POLICY_PROTECT_OWN_PUBLISHED:
        return not (role == Role.TEACHER and is_creator)
    return is_creator or role == Role.ADMIN


def require_can_delete(user, assignment):
    role = role_in_class(user, assignment.classroom_id)
    if role == Role.STUDENT:
        raise Forbidden("Students cannot delete assignments.")
    if not can_delete(user, role, assignment):
        logger.info(
            "Delete of assignment %s refused for user %s (role=%s, policy=%s)",
            assignment.pk, user.pk, role, delete_policy(),
        )
        raise Forbidden("You cannot delete this assignment.")
    return role


# -----------------------
# Submissions
# -----------------------
def can_access_submission(user, role, submission) -> bool:
    """The submission's own student, or class staff."""
    if _is_staff(role):
        return True
    return role == Role.STUDENT and submission.student_id == user.pk


def require_submission_access(user, submission, class_id):
    role = role_in_class(user, class_id)
    if not can_access_submission(user, role, submission):
        raise Forbidden("You cannot access this submission.")
    return role
