# assignments/notifications.py
"""
Assignment e-mail notifications, outbox style.

Publishing writes one ``Notification`` row per recipient in the same
transaction as the assignment update. Once that transaction commits, each row
is handed to a Celery worker (``tasks.send_assignment_notification``). Rows
whose hand-off was lost stay ``pending`` and are picked up again by the
``drain_notification_outbox`` beat task, so delivery outcome is always
queryable and never blocks or fails the publish request.
"""
from __future__ import annotations

import logging
import smtplib
from datetime import timedelta
from typing import Iterable

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.html import format_html, strip_tags
from kombu.exceptions import OperationalError

from .models import Assignment, Notification

logger = logging.getLogger(__name__)

EMAIL_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{}</title>
</head>
<body>
    <div style="display: block; align-items: center;">
        <h2 style="font-family: Arial, Helvetica, sans-serif;">{}</h2>
        <br>
        <h4 style="font-family: Arial, Helvetica, sans-serif;">{}</h4>
    </div>
</body>
</html>"""


def max_attempts() -> int:
    return int(getattr(settings, "NOTIFICATION_MAX_ATTEMPTS", 5))


def retry_delay(attempts: int) -> int:
    """Seconds to wait after the ``attempts``-th failure: 30, 60, 120, ... capped at one hour."""
    return min(30 * (2 ** max(attempts - 1, 0)), 3600)


def _one_line(value: str) -> str:
    return " ".join((value or "").split())


def render_assignment_email(sender, assignment: Assignment) -> tuple[str, str]:
    # header values cannot carry line breaks
    subject = _one_line(f"New Assignment from {sender.display_name}: {assignment.name}")
    html = format_html(EMAIL_TEMPLATE, subject, subject, assignment.instructions)
    return subject, str(html)


def _unique_emails(emails: Iterable[str]) -> list[str]:
    seen, out = set(), []
    for email in emails:
        email = (email or "").strip()
        if email and email.lower() not in seen:
            seen.add(email.lower())
            out.append(email)
    return out


def queue_assignment_notifications(assignment: Assignment, sender, emails: Iterable[str]) -> list[Notification]:
    """Write outbox rows; workers are only told about them after commit."""
    recipients = _unique_emails(emails)
    if not recipients:
        return []

    subject, html = render_assignment_email(sender, assignment)
    rows = Notification.objects.bulk_create([
        Notification(assignment=assignment, recipient=r, subject=subject, html_body=html)
        for r in recipients
    ])
    ids = [n.id for n in rows]
    transaction.on_commit(lambda: enqueue_notifications(ids))
    logger.info("Queued %d notification(s) for assignment %s", len(ids), assignment.pk)
    return rows


def enqueue_notifications(notification_ids: Iterable[str]) -> int:
    """Hand rows to the broker; a broker outage leaves them for the outbox drain."""
    from .tasks import send_assignment_notification

    enqueued = 0
    for nid in notification_ids:
        try:
            send_assignment_notification.delay(nid)
            enqueued += 1
        except OperationalError as e:
            logger.warning("Could not enqueue notification %s, leaving it for the drain: %s", nid, e)
    return enqueued


def deliver_notification(notification_id: str) -> str | None:
    """Attempt one delivery. Returns the row's status afterwards."""
    with transaction.atomic():
        n = Notification.objects.select_for_update().filter(pk=notification_id).first()
        if n is None:
            logger.warning("deliver_notification: notification %s not found", notification_id)
            return None
        if n.status != Notification.Status.PENDING:
            return n.status

        n.attempts += 1
        try:
            send_mail(
                n.subject,
                strip_tags(n.html_body),
                settings.DEFAULT_FROM_EMAIL,
                [n.recipient],
                html_message=n.html_body,
            )
        except ValueError as e:
            # BadHeaderError and malformed addresses: retrying cannot help
            n.last_error = str(e) or e.__class__.__name__
            n.status = Notification.Status.GIVEN_UP
            n.next_attempt_at = None
            logger.error("Giving up on notification %s to %s, message rejected: %s",
                         n.pk, n.recipient, n.last_error)
        except (smtplib.SMTPException, OSError) as e:
            n.last_error = str(e) or e.__class__.__name__
            if n.attempts >= max_attempts():
                n.status = Notification.Status.GIVEN_UP
                n.next_attempt_at = None
                logger.error("Giving up on notification %s to %s after %d attempts: %s",
                             n.pk, n.recipient, n.attempts, n.last_error)
            else:
                n.next_attempt_at = timezone.now() + timedelta(seconds=retry_delay(n.attempts))
                logger.warning("Notification %s to %s failed (attempt %d): %s",
                               n.pk, n.recipient, n.attempts, n.last_error)
        else:
            n.status = Notification.Status.SENT
            n.sent_at = timezone.now()
            n.next_attempt_at = None
            n.last_error = ""
            logger.info("Notification %s sent to %s", n.pk, n.recipient)
        n.save(update_fields=["status", "attempts", "last_error", "sent_at", "next_attempt_at"])
        return n.status


def stale_pending_ids(older_than: timedelta | None = None) -> list[str]:
    """Pending rows nobody is going to deliver.

    Either the first hand-off was lost (no attempt yet, created before the
    grace period) or a scheduled retry is overdue by more than the grace
    period. Rows waiting for a retry that is still due are left alone.
    """
    if older_than is None:
        older_than = timedelta(seconds=int(getattr(settings, "NOTIFICATION_STALE_SECONDS", 300)))
    cutoff = timezone.now() - older_than
    return list(
        Notification.objects.filter(status=Notification.Status.PENDING)
        .filter(
            Q(next_attempt_at__isnull=True, created_at__lte=cutoff)
            | Q(next_attempt_at__lte=cutoff)
        )
        .values_list("id", flat=True)
    )
