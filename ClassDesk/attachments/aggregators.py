from __future__ import annotations

from typing import Iterable

from .models import Attachment


def resolve_attachment(attachment: Attachment) -> dict:
    """Pair an attachment with its file or link.

    ``file`` is set iff the attachment references a file and ``link`` iff it
    references a link; model constraints keep both from being set together.
    """
    return {
        "attachment": attachment.as_dict(),
        "file": attachment.file.as_dict() if attachment.file_id is not None else None,
        "link": attachment.link.as_dict() if attachment.link_id is not None else None,
    }


def resolve_attachments(attachments: Iterable[Attachment]) -> list[dict]:
    if hasattr(attachments, "select_related"):
        attachments = attachments.select_related("file", "link")
    return [resolve_attachment(a) for a in attachments]
