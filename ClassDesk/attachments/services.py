import logging

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator
from django.db import transaction

from assignments import access
from assignments.exceptions import Forbidden, NotFound, ValidationFailed
from assignments.models import Assignment, Submission
from .aggregators import resolve_attachment
from .models import Attachment, Link, UploadedFile

logger = logging.getLogger(__name__)


def _invalid(field, message):
    return ValidationFailed({field: [{"message": message, "code": "invalid"}]})


def register_link(actor, url, title: str = "") -> Link:
    if url is not None and not isinstance(url, str):
        raise _invalid("url", "Enter a valid URL.")
    if title is not None and not isinstance(title, str):
        raise _invalid("title", "Title must be text.")
    url = (url or "").strip()
    try:
        URLValidator()(url)
    except ValidationError as e:
        raise ValidationFailed({"url": [{"message": m, "code": "invalid"} for m in e.messages]}) from e
    return Link.objects.create(url=url, title=(title or "").strip()[:255], created_by=actor)


def _content(actor, file_id=None, link_id=None, url=None, title="") -> dict:
    """File or link to attach; a bare ``url`` registers a new link for ``actor``.

    Only content the actor created can be attached.
    """
    if file_id and (link_id or url is not None):
        raise _invalid("__all__", "Attach a file or a link, not both.")
    if link_id and url is not None:
        raise _invalid("__all__", "Send either link_id or url, not both.")

    if file_id:
        uploaded = UploadedFile.objects.filter(pk=file_id).first()
        if uploaded is None:
            raise NotFound("File not found.")
        if uploaded.uploaded_by_id != actor.pk:
            raise Forbidden("You can only attach files you uploaded.")
        return {"file": uploaded}
    if link_id:
        link = Link.objects.filter(pk=link_id).first()
        if link is None:
            raise NotFound("Link not found.")
        if link.created_by_id != actor.pk:
            raise Forbidden("You can only attach links you added.")
        return {"link": link}
    if url is not None:
        return {"link": register_link(actor, url, title)}
    return {}


def attach_to_assignment(assignment_id, class_id, actor, file_id=None, link_id=None, url=None, title="") -> dict:
    access.require_staff(actor, class_id)
    assignment = Assignment.objects.filter(pk=assignment_id, classroom_id=class_id).first()
    if assignment is None:
        raise NotFound("Assignment not found.")

    with transaction.atomic():
        content = _content(actor, file_id, link_id, url, title)
        attachment = Attachment.objects.create(assignment=assignment, uploader=actor, **content)
    logger.info("Attachment %s added to assignment %s by user %s", attachment.pk, assignment.pk, actor.pk)
    return resolve_attachment(attachment)


def attach_to_submission(submission_id, class_id, actor, file_id=None, link_id=None, url=None, title="") -> dict:
    submission = Submission.objects.filter(pk=submission_id, assignment__classroom_id=class_id).first()
    if submission is None:
        raise NotFound("Submission not found.")
    access.require_submission_access(actor, submission, class_id)

    with transaction.atomic():
        content = _content(actor, file_id, link_id, url, title)
        attachment = Attachment.objects.create(submission=submission, uploader=actor, **content)
    logger.info("Attachment %s added to submission %s by user %s", attachment.pk, submission.pk, actor.pk)
    return resolve_attachment(attachment)
