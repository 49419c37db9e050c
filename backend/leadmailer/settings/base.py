# leadmailer/settings/base.py

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get("SECRET_KEY", "")
DEBUG = False
ALLOWED_HOSTS: list[str] = []

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "rest_framework",
    "rest_framework.authtoken",
    # Pipeline apps
    "apps.common",
    "apps.blocklist",
    "apps.qualification",
    "apps.sites",
    "apps.contacts",
    "apps.outreach",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
]

ROOT_URLCONF = "leadmailer.urls"
WSGI_APPLICATION = "leadmailer.wsgi.application"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_TZ = True

REST_FRAMEWORK = {
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.TokenAuthentication",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 50,
}

# === Celery ===

CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = CELERY_BROKER_URL
CELERY_TASK_ACKS_LATE = True
CELERY_WORKER_PREFETCH_MULTIPLIER = 1
CELERY_TASK_TIME_LIMIT = 15 * 60
CELERY_TIMEZONE = TIME_ZONE

REDIS_URL = os.environ.get("REDIS_URL", CELERY_BROKER_URL)

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": REDIS_URL,
        "KEY_PREFIX": "leadmailer",
    }
}

# === Pipeline collaborators (dotted paths, swapped out in tests) ===

LEADMAILER_CONTENT_FETCHER = "apps.crawler.fetcher.HttpContentFetcher"
LEADMAILER_DNS_RESOLVER = "apps.contacts.resolvers.DnsPythonResolver"
LEADMAILER_MAIL_TRANSPORT = "apps.outreach.transport.DjangoMailTransport"
LEADMAILER_TEMPLATE_RENDERER = "apps.outreach.templating.PlaceholderRenderer"

# Mail backend used by the transport for each SendAccount connection
LEADMAILER_EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"

# === Pipeline policy ===

# Crawling
LEADMAILER_MAX_CRAWL_ATTEMPTS = 3
LEADMAILER_CRAWL_STALE_AFTER = 30 * 60
LEADMAILER_DEFAULT_PAGE_BUDGET = 10
LEADMAILER_PAGE_BUDGET_MARGIN = 5
LEADMAILER_FETCH_REQUESTS_PER_MINUTE = 30

# Validation
LEADMAILER_DISPOSABLE_DOMAINS: list[str] = []

# Review queue
LEADMAILER_MAX_REVIEW_ITEMS_PER_SITE = 3

# Duplicate prevention
LEADMAILER_DUPLICATE_SHORT_WINDOW_DAYS = 30
LEADMAILER_DUPLICATE_LONG_WINDOW_DAYS = 90
LEADMAILER_MAX_SENDS_PER_SITE = 3
LEADMAILER_MAX_SENDS_PER_EMAIL_DOMAIN = 2

# Sending
LEADMAILER_SEND_WINDOW = {"enabled": True, "start_hour": 8, "end_hour": 17}
LEADMAILER_DISPATCH_CLAIM_TIMEOUT = 10 * 60
LEADMAILER_ACCOUNT_MIN_SUCCESS_RATE = 70
LEADMAILER_ACCOUNT_HEALTH_MIN_SAMPLE = 20
LEADMAILER_SENDER_NAME = os.environ.get("LEADMAILER_SENDER_NAME", "Our Team")
LEADMAILER_SENDER_COMPANY = os.environ.get("LEADMAILER_SENDER_COMPANY", "Company")

# SMTP passwords keyed by SendAccount.credentials_key
LEADMAILER_SMTP_CREDENTIALS: dict[str, str] = {}

# === Logging ===

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "apps": {
            "handlers": ["console"],
            "level": os.environ.get("LEADMAILER_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
