# assignments/tasks.py
from __future__ import annotations

import logging

from celery import shared_task
from django.utils import timezone

from .models import Notification
from .notifications import deliver_notification, enqueue_notifications, max_attempts, retry_delay, stale_pending_ids

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=None)
def send_assignment_notification(self, notification_id: str) -> dict:
    """Deliver one outbox row; retry with exponential backoff while it stays pending."""
    status = deliver_notification(notification_id)
    if status is None:
        return {"ok": False, "error": "notification_not_found"}

    if status == Notification.Status.PENDING and self.request.retries < max_attempts():
        # follow the schedule stored on the row
        due = Notification.objects.filter(pk=notification_id).values_list("next_attempt_at", flat=True).first()
        if due is not None:
            countdown = max(int((due - timezone.now()).total_seconds()), 0)
        else:
            countdown = retry_delay(self.request.retries + 1)
        raise self.retry(countdown=countdown)

    return {"ok": status == Notification.Status.SENT, "status": status}


@shared_task(bind=True)
def drain_notification_outbox(self) -> dict:
    """Beat safety-net: re-enqueue pending rows whose hand-off or retry was lost."""
    ids = stale_pending_ids()
    dispatched = enqueue_notifications(ids) if ids else 0
    if ids:
        logger.info("drain_notification_outbox: %d stale row(s), %d enqueued", len(ids), dispatched)
    return {"ok": True, "stale": len(ids), "dispatched": dispatched, "ts": timezone.now().isoformat()}
