"""Celery application for the inventory and sales service.

Broker and serializer options come from Django settings under the
``CELERY_`` prefix. The outbox relay is the only periodic job.
"""

import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("vendas")
app.config_from_object("django.conf:settings", namespace="CELERY")

app.conf.beat_schedule = {
    "relay-outbox-events": {
        "task": "core.relay_outbox_events",
        "schedule": crontab(minute="*"),
    },
}

app.autodiscover_tasks()
