# leadmailer/settings/test.py

from .base import *  # noqa: F401, F403

SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Tasks run inline so hand-offs can be asserted without a broker
CELERY_TASK_ALWAYS_EAGER = True
# Retries re-apply inline; failures surface through EagerResult.get()
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

LEADMAILER_EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
LEADMAILER_SEND_WINDOW = {"enabled": False, "start_hour": 8, "end_hour": 17}

LOGGING["loggers"]["apps"]["level"] = "WARNING"  # noqa: F405

# In-process collaborators; see tests/fakes.py
LEADMAILER_CONTENT_FETCHER = "tests.fakes.FakeContentFetcher"
LEADMAILER_DNS_RESOLVER = "tests.fakes.FakeDnsResolver"
LEADMAILER_MAIL_TRANSPORT = "apps.outreach.transport.DjangoMailTransport"
