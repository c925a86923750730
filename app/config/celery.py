"""
Celery configuration for the campus marketplace backend.

Celery runs the realtime delivery hand-off (messaging.tasks) outside the
request cycle, so an HTTP send never waits on the channel layer.

This configuration uses Redis as both the message broker and result backend.
Tasks are auto-discovered from all installed Django apps.

Usage:
    from messaging.tasks import deliver_message_created

    deliver_message_created.apply_async(args=[payload], retry=False)

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Looks for a tasks.py module in each installed app
app.autodiscover_tasks()
