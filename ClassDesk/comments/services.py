import logging

from assignments import access
from assignments.exceptions import NotFound, ValidationFailed
from assignments.models import Assignment, Submission
from .aggregators import resolve_comments
from .models import Comment, PrivateComment

logger = logging.getLogger(__name__)

MAX_BODY_LENGTH = 10_000


def _clean_body(body) -> str:
    if body is not None and not isinstance(body, str):
        raise ValidationFailed({"body": [{"message": "Comment must be text.", "code": "invalid"}]})
    body = (body or "").strip()
    if not body:
        raise ValidationFailed({"body": [{"message": "Comment cannot be empty.", "code": "required"}]})
    if len(body) > MAX_BODY_LENGTH:
        raise ValidationFailed({"body": [{"message": "Comment is too long.", "code": "max_length"}]})
    return body


def post_comment(assignment_id, class_id, actor, body) -> dict:
    """Public comment on a published assignment, by any class member."""
    access.require_member(actor, class_id)
    assignment = Assignment.objects.filter(pk=assignment_id, classroom_id=class_id, draft=False).first()
    if assignment is None:
        raise NotFound("Assignment not found.")

    comment = Comment.objects.create(assignment=assignment, author=actor, body=_clean_body(body))
    logger.info("Comment %s posted on assignment %s by user %s", comment.pk, assignment.pk, actor.pk)
    return resolve_comments([comment])[0]


def post_private_comment(submission_id, class_id, actor, body) -> dict:
    """Private comment on a submission, by its student or class staff."""
    submission = (
        Submission.objects.select_related("assignment")
        .filter(pk=submission_id, assignment__classroom_id=class_id)
        .first()
    )
    if submission is None:
        raise NotFound("Submission not found.")
    access.require_submission_access(actor, submission, class_id)

    comment = PrivateComment.objects.create(submission=submission, author=actor, body=_clean_body(body))
    logger.info("Private comment %s posted on submission %s by user %s", comment.pk, submission.pk, actor.pk)
    return resolve_comments([comment])[0]
