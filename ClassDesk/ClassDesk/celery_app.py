import os
from celery import Celery # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ClassDesk.settings")

app = Celery("ClassDesk")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

app.conf.beat_schedule = {
    "drain-notification-outbox-every-minute": {
        "task": "assignments.tasks.drain_notification_outbox",
        "schedule": 60.0,
    },
}
