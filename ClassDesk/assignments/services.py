# assignments/services.py
"""
Assignment workflow: draft, publish, delete and the two read views.

Every operation takes the verified actor (a user instance) and checks it
against the class roster before touching anything. Multi-step writes run in a
single transaction; e-mail delivery happens after commit on Celery workers.
"""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction

from attachments.aggregators import resolve_attachments
from attachments.models import Attachment
from classes.models import Classroom
from comments.aggregators import resolve_comments
from comments.models import Comment, PrivateComment
from . import access
from .exceptions import InternalError, NotFound, ValidationFailed
from .fanout import ensure_submissions, roster_student_ids
from .forms import AssignmentPublishForm
from .models import Assignment, Submission
from .notifications import queue_assignment_notifications

logger = logging.getLogger(__name__)


def _get_assignment(assignment_id, class_id, *, for_update: bool = False) -> Assignment:
    qs = Assignment.objects.all()
    if for_update:
        qs = qs.select_for_update()
    assignment = qs.filter(pk=assignment_id, classroom_id=class_id).first()
    if assignment is None:
        raise NotFound("Assignment not found.")
    return assignment


# -----------------------
# Draft
# -----------------------
def draft(class_id, actor) -> str:
    """Create an empty draft in the class; returns its id."""
    if not Classroom.objects.filter(pk=class_id).exists():
        raise NotFound("Class not found.")
    access.require_staff(actor, class_id)

    assignment = Assignment.objects.create(classroom_id=class_id, draft=True)
    logger.info("Draft %s created in class %s by user %s", assignment.pk, class_id, actor.pk)
    return assignment.pk


# -----------------------
# Publish / update
# -----------------------
def publish(assignment_id, class_id, actor, fields: dict) -> Assignment:
    """Apply ``fields`` (name, instructions, draft), fan out submissions and notify.

    Loading, fan-out, the field update and the outbox rows commit together or
    not at all. Notifications go out only when this call takes the assignment
    from draft to live.
    """
    access.require_staff(actor, class_id)

    try:
        with transaction.atomic():
            assignment = _get_assignment(assignment_id, class_id, for_update=True)
            was_draft = assignment.draft

            form = AssignmentPublishForm(data=dict(fields or {}), instance=assignment)
            if not form.is_valid():
                raise ValidationFailed(errors=form.errors.get_json_data(), message="Invalid assignment data.")

            students = roster_student_ids(class_id)
            ensure_submissions(assignment, students)

            assignment = form.save(commit=False)
            if assignment.creator_id is None:
                assignment.creator = actor
            assignment.save()

            if was_draft and not assignment.draft:
                emails = (
                    get_user_model().objects.filter(pk__in=students)
                    .order_by("pk")
                    .values_list("email", flat=True)
                )
                queue_assignment_notifications(assignment, assignment.creator, emails)
    except DatabaseError as e:
        logger.exception("publish: assignment %s in class %s failed", assignment_id, class_id)
        raise InternalError("Could not publish the assignment.") from e

    assignment.refresh_from_db()
    logger.info(
        "Assignment %s saved by user %s (draft=%s, roster=%d)",
        assignment.pk, actor.pk, assignment.draft, len(students),
    )
    return assignment


# -----------------------
# Delete
# -----------------------
def delete(assignment_id, class_id, actor) -> None:
    """Delete an assignment together with everything it owns."""
    assignment = _get_assignment(assignment_id, class_id)
    access.require_can_delete(actor, assignment)

    try:
        with transaction.atomic():
            removed, _ = Attachment.objects.filter(assignment=assignment).delete()
            # submissions, their attachments, comments and outbox rows cascade
            assignment.delete()
    except DatabaseError as e:
        logger.exception("delete: assignment %s in class %s failed", assignment_id, class_id)
        raise InternalError("Could not delete the assignment.") from e

    logger.info("Assignment %s deleted by user %s (%d attachment row(s))", assignment_id, actor.pk, removed)


# -----------------------
# Read views
# -----------------------
def student_view(assignment_id, class_id, actor) -> dict:
    access.require_student(actor, class_id)
    assignment = _get_assignment(assignment_id, class_id)
    if assignment.draft:
        raise NotFound("Assignment not found.")

    # students who joined after the publish get their submission on first visit
    ensure_submissions(assignment, [actor.pk])
    submission = Submission.objects.filter(assignment=assignment, student=actor).first()
    if submission is None:
        raise NotFound("Submission not found.")

    comments = Comment.objects.filter(assignment=assignment)
    private_comments = PrivateComment.objects.filter(submission=submission)

    return {
        "assignment": assignment.as_dict(),
        "submission": submission.as_dict(),
        "assignment_attachments": resolve_attachments(Attachment.objects.filter(assignment=assignment)),
        "submission_attachments": resolve_attachments(Attachment.objects.filter(submission=submission)),
        "comments": resolve_comments(comments),
        "private_comments": resolve_comments(private_comments),
    }


def teacher_view(assignment_id, class_id, actor) -> dict:
    access.require_staff(actor, class_id)
    assignment = _get_assignment(assignment_id, class_id)

    submissions = list(
        Submission.objects.filter(assignment=assignment).select_related("student").order_by("created_at", "id")
    )
    by_submission: dict = {s.pk: [] for s in submissions}
    for attachment in Attachment.objects.filter(submission__in=submissions).select_related("file", "link"):
        by_submission[attachment.submission_id].append(attachment)

    return {
        "assignment": assignment.as_dict(),
        "submissions": [
            {
                "submission": s.as_dict(),
                "student": s.student.public_summary(),
                "attachments": resolve_attachments(by_submission[s.pk]),
            }
            for s in submissions
        ],
        "assignment_attachments": resolve_attachments(Attachment.objects.filter(assignment=assignment)),
    }
