import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core_backend.settings")

app = Celery("core_backend")

# All celery config lives in Django settings under the CELERY_ namespace.
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

app.conf.beat_schedule = {
    # Put FAILED print jobs with attempts left back in the queue
    "retry-failed-print-jobs": {
        "task": "printing.tasks.retry_failed_print_jobs",
        "schedule": crontab(minute="*/5"),
    },
    # Housekeeping: drop PRINTED jobs past the retention window
    "cleanup-old-print-jobs": {
        "task": "printing.tasks.cleanup_old_print_jobs",
        "schedule": crontab(hour=3, minute=30),
    },
}
