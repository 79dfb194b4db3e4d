from __future__ import annotations

import logging
from typing import Iterable

from classes.models import ClassMembership
from .models import Assignment, Submission

logger = logging.getLogger(__name__)


def roster_student_ids(class_id) -> list:
    """Students currently enrolled in the class."""
    return list(
        ClassMembership.objects.students()
        .filter(classroom_id=class_id)
        .order_by("user_id")
        .values_list("user_id", flat=True)
    )


def ensure_submissions(assignment: Assignment, student_ids: Iterable) -> int:
    """Make sure every student has exactly one submission for ``assignment``.

    Existing (assignment, student) pairs are left alone, so re-running with an
    overlapping roster never duplicates rows. Returns how many were created.
    """
    wanted = set(student_ids)
    if not wanted:
        return 0

    existing = set(
        Submission.objects.filter(assignment=assignment, student_id__in=wanted)
        .values_list("student_id", flat=True)
    )
    missing = sorted(wanted - existing)
    if not missing:
        return 0

    # the unique constraint still guards against a concurrent fan-out
    rows = [Submission(assignment=assignment, student_id=sid) for sid in missing]
    Submission.objects.bulk_create(rows, ignore_conflicts=True)
    # rows skipped as conflicts are not ours; ids are assigned client-side
    created = Submission.objects.filter(pk__in=[r.pk for r in rows]).count()
    logger.info("Fan-out for assignment %s: %d new submission(s)", assignment.pk, created)
    return created
