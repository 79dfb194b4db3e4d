from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol, TypeVar

from django.contrib.auth import get_user_model

logger = logging.getLogger(__name__)


class Commenter(Protocol):
    def get_author_id(self) -> Any: ...

    def as_dict(self) -> dict: ...


C = TypeVar("C", bound=Commenter)


def resolve_comments(comments: Iterable[C]) -> list[dict]:
    """Pair each comment with its author's public summary.

    Works for any comment variant; callers pick the variant by the owner they
    filter on.
    """
    comments = list(comments)
    author_ids = {c.get_author_id() for c in comments}
    authors = get_user_model().objects.in_bulk(author_ids)

    resolved = []
    for comment in comments:
        author = authors.get(comment.get_author_id())
        if author is None:
            logger.warning("Comment %s references missing author %s", comment.pk, comment.get_author_id())
            continue
        resolved.append({"commenter": author.public_summary(), "comment": comment.as_dict()})
    return resolved
