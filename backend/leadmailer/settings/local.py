# leadmailer/settings/local.py

import os
from .base import *  # noqa: F401, F403

DEBUG = True

SECRET_KEY = "dev-secret-key-not-for-production"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "web", "worker"]

# docker-compose exposes postgres as "db"; outside compose it is on localhost
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.environ.get("DATABASE_NAME", "leadmailer"),
        "USER": os.environ.get("DATABASE_USER", "leadmailer"),
        "PASSWORD": os.environ.get("DATABASE_PASSWORD", "leadmailer"),
        "HOST": os.environ.get("DATABASE_HOST", "localhost"),
        "PORT": os.environ.get("DATABASE_PORT", "5432"),
    }
}

# Flip to True to run the whole pipeline inline from the shell
CELERY_TASK_ALWAYS_EAGER = os.environ.get("CELERY_TASK_ALWAYS_EAGER", "") == "1"

# Print outgoing mail instead of hitting real SMTP servers
LEADMAILER_EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# Send around the clock while developing
LEADMAILER_SEND_WINDOW = {"enabled": False, "start_hour": 8, "end_hour": 17}

LOGGING["loggers"]["apps"]["level"] = os.environ.get("LEADMAILER_LOG_LEVEL", "DEBUG")  # noqa: F405
