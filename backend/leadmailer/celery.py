# leadmailer/celery.py

import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "leadmailer.settings.local")

app = Celery("leadmailer")

# All celery-related settings live in Django settings with a CELERY_ prefix
app.config_from_object("django.conf:settings", namespace="CELERY")

# Looks for tasks.py in each installed app
app.autodiscover_tasks()


# Periodic triggers for the pipeline sweeps.
# Every sweep takes its own lock, so an overlapping beat tick is a no-op.
app.conf.beat_schedule = {
    "dispatch-crawl-batch": {
        "task": "apps.sites.tasks.dispatch_crawl_batch",
        "schedule": crontab(minute=0, hour="*/6"),
        "kwargs": {"limit": 100},
    },
    "validate-pending-contacts": {
        "task": "apps.contacts.tasks.validate_pending_contacts",
        "schedule": crontab(minute=45, hour="*/2"),
        "kwargs": {"limit": 500},
    },
    "create-review-items": {
        "task": "apps.outreach.tasks.create_review_items",
        "schedule": crontab(minute=15),
    },
    "dispatch-approved-items": {
        "task": "apps.outreach.tasks.dispatch_approved_items",
        "schedule": crontab(minute="*/30", hour="8-16", day_of_week="mon-fri"),
        "kwargs": {"batch_size": 10},
    },
    "reset-daily-send-counters": {
        "task": "apps.outreach.tasks.reset_daily_send_counters",
        "schedule": crontab(minute=0, hour=0),
    },
    "disable-unhealthy-accounts": {
        "task": "apps.outreach.tasks.disable_unhealthy_accounts",
        "schedule": crontab(minute=30, hour=0),
    },
    "cleanup-old-review-items": {
        "task": "apps.outreach.tasks.cleanup_old_review_items",
        "schedule": crontab(minute=0, hour=2, day_of_week="sun"),
        "kwargs": {"days": 90},
    },
}
