# tests/conftest.py

import pytest
from django.core.cache import cache

from apps.common.enums import SiteStatus
from apps.contacts.models import Contact
from apps.outreach.models import EmailTemplate, SendAccount
from apps.qualification.models import RequirementSet
from apps.sites.models import Site

from .fakes import FakeContentFetcher, FakeDnsResolver, FakeMailTransport


@pytest.fixture(autouse=True)
def reset_fakes():
    FakeContentFetcher.reset()
    FakeDnsResolver.reset()
    FakeMailTransport.reset()
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def fake_transport(settings):
    settings.LEADMAILER_MAIL_TRANSPORT = "tests.fakes.FakeMailTransport"
    return FakeMailTransport


@pytest.fixture
def reviewer(django_user_model):
    return django_user_model.objects.create_user(username="reviewer", password="secret")


@pytest.fixture
def template(db):
    return EmailTemplate.objects.create(
        name="Intro",
        subject_template="Quick question about {{ domain }}",
        body_template="Hi {{ contact_name }},\n\nI had a look at {{ website_url }}.\n\n{{ sender_name }}",
        preheader="For {{ website_title }}",
    )


@pytest.fixture
def account(db):
    return SendAccount.objects.create(
        name="Primary",
        host="smtp.example.com",
        username="mailer",
        credentials_key="primary",
        from_address="hello@sender.test",
        from_name="Sender",
        daily_limit=50,
        hourly_limit=10,
        priority=1,
    )


@pytest.fixture
def make_site(db):
    def _make(domain="acme.test", **fields):
        return Site.objects.create(domain=domain, **fields)
    return _make


@pytest.fixture
def make_contact(db):
    def _make(site, email, **fields):
        fields.setdefault("is_validated", True)
        fields.setdefault("is_valid", True)
        return Contact.objects.create(site=site, email=email, **fields)
    return _make


@pytest.fixture
def qualified_site(make_site, template):
    return make_site(
        domain="acme.test",
        status=SiteStatus.COMPLETED,
        is_qualified=True,
        email_template=template,
        title="Acme Hosting",
        page_count=12,
        word_count=1500,
        snapshot_pages=[{"url": "https://acme.test/", "content": "<title>Acme Hosting</title>"}],
    )


@pytest.fixture
def hosting_requirement(db):
    return RequirementSet.objects.create(
        name="Hosting companies",
        priority=10,
        criteria={
            "min_word_count": 500,
            "required_keywords": ["cloud", "hosting"],
            "exclude_keywords": ["casino"],
        },
    )
