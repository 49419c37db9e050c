from datetime import timedelta

import pytest
from django.utils import timezone

from apps.common.enums import SiteStatus
from apps.common.exceptions import TransientError
from apps.crawler.fetcher import FetchedPage
from apps.crawler.platforms import detect_platform
from apps.crawler.text import count_words, strip_tags
from apps.sites.models import Site
from apps.sites.services import (
    InvalidTransition, begin_crawl, complete_crawl, expire_stale_crawls,
    fail_crawl, ingest_domains, mark_for_review, normalize_domain, reset_crawl,
)
from apps.sites.tasks import crawl_site, dispatch_crawl_batch

from .fakes import FakeContentFetcher

HOMEPAGE = """
<html><head><title>Acme Cloud</title>
<link rel="stylesheet" href="/wp-content/themes/acme/style.css"></head>
<body><h1>Cloud hosting</h1><p>Fast and friendly servers.</p>
<script>var tracking = "ignored words here";</script></body></html>
"""


@pytest.mark.django_db
class TestIngestDomains:
    def test_normalizes_and_skips_duplicates(self):
        result = ingest_domains(["https://www.Acme.test/about", "acme.test", "other.test", "not a domain", ""])
        assert result == {"created": 2, "existing": 1, "invalid": ["not a domain"]}
        assert set(Site.objects.values_list("domain", flat=True)) == {"acme.test", "other.test"}
        assert Site.objects.get(domain="acme.test").status == SiteStatus.PENDING

    def test_normalize_domain(self):
        assert normalize_domain("HTTP://www.Example.com:8080/path?q=1") == "example.com"
        assert normalize_domain("shop.example.co.uk") == "shop.example.co.uk"


@pytest.mark.django_db
class TestCrawlTransitions:
    def test_begin_crawl_claims_pending_site_once(self, make_site):
        site = make_site()

        assert begin_crawl(site.id) is True
        assert begin_crawl(site.id) is False

        site.refresh_from_db()
        assert site.status == SiteStatus.CRAWLING
        assert site.crawl_attempts == 1
        assert site.crawl_started_at is not None

    def test_failed_site_can_be_retried_until_attempts_run_out(self, make_site, settings):
        settings.LEADMAILER_MAX_CRAWL_ATTEMPTS = 2
        site = make_site(status=SiteStatus.FAILED, crawl_attempts=1)

        assert begin_crawl(site.id) is True
        site.refresh_from_db()
        fail_crawl(site, "timeout")

        assert begin_crawl(site.id) is False
        site.refresh_from_db()
        assert site.status == SiteStatus.FAILED
        assert site.crawl_attempts == 2

    def test_stale_crawl_claim_can_be_taken_over(self, make_site, settings):
        settings.LEADMAILER_CRAWL_STALE_AFTER = 60
        site = make_site(
            status=SiteStatus.CRAWLING,
            crawl_attempts=1,
            crawl_started_at=timezone.now() - timedelta(minutes=5),
        )
        assert begin_crawl(site.id) is True

    def test_completed_site_is_not_claimable(self, make_site):
        site = make_site(status=SiteStatus.COMPLETED)
        assert begin_crawl(site.id) is False

    def test_complete_crawl_stores_snapshot_and_derived_fields(self, make_site):
        site = make_site()
        begin_crawl(site.id)
        site.refresh_from_db()

        pages = [
            FetchedPage(url="https://acme.test/", content=HOMEPAGE),
            FetchedPage(url="https://acme.test/about", content="<p>About us team</p>"),
        ]
        assert complete_crawl(site, pages) is True

        site.refresh_from_db()
        assert site.status == SiteStatus.COMPLETED
        assert site.page_count == 2
        assert site.word_count == 11
        assert site.detected_platform == "WordPress"
        assert site.title == "Acme Cloud"
        assert site.snapshot_pages[1] == {"url": "https://acme.test/about", "content": "<p>About us team</p>"}
        assert site.crawl_finished_at is not None

    def test_complete_crawl_requires_crawling_state(self, make_site):
        site = make_site()
        assert complete_crawl(site, [FetchedPage(url="https://acme.test/", content="hi")]) is False
        site.refresh_from_db()
        assert site.status == SiteStatus.PENDING
        assert site.page_count == 0

    def test_fail_crawl_keeps_site_with_reason(self, make_site):
        site = make_site()
        begin_crawl(site.id)
        site.refresh_from_db()

        fail_crawl(site, "Could not fetch homepage")

        site.refresh_from_db()
        assert site.status == SiteStatus.FAILED
        assert site.last_crawl_error == "Could not fetch homepage"

    def test_expire_stale_crawls_without_attempts_left(self, make_site, settings):
        settings.LEADMAILER_MAX_CRAWL_ATTEMPTS = 1
        site = make_site(
            status=SiteStatus.CRAWLING,
            crawl_attempts=1,
            crawl_started_at=timezone.now() - timedelta(hours=2),
        )
        assert expire_stale_crawls() == 1
        site.refresh_from_db()
        assert site.status == SiteStatus.FAILED
        assert "abandoned" in site.last_crawl_error

    def test_reset_crawl_only_from_failed(self, make_site):
        failed = make_site(domain="failed.test", status=SiteStatus.FAILED, crawl_attempts=3)
        reset_crawl(failed)
        assert failed.status == SiteStatus.PENDING
        assert failed.crawl_attempts == 0

        with pytest.raises(InvalidTransition):
            reset_crawl(make_site(domain="done.test", status=SiteStatus.COMPLETED))

    def test_mark_for_review(self, make_site, reviewer):
        site = make_site(status=SiteStatus.COMPLETED)
        mark_for_review(site, reviewer)
        assert site.status == SiteStatus.PER_REVIEW

        with pytest.raises(InvalidTransition):
            mark_for_review(make_site(domain="new.test"), reviewer)
        with pytest.raises(InvalidTransition):
            mark_for_review(make_site(domain="other.test", status=SiteStatus.COMPLETED), None)


class TestCorpusHelpers:
    def test_strip_tags_drops_scripts(self):
        assert strip_tags("<p>Hello <b>world</b></p><script>x = 1</script>") == "Hello world"

    def test_count_words(self):
        assert count_words("  one two\nthree  ") == 3
        assert count_words("") == 0

    def test_platform_table_is_ordered(self):
        assert detect_platform('<div id="__next"><img src="/wp-content/a.png"></div>') == "WordPress"
        assert detect_platform("<script src='https://cdn.shopify.com/s.js'></script>") == "Shopify"
        assert detect_platform("<p>plain</p>") is None


@pytest.mark.django_db
class TestCrawlTasks:
    def test_crawl_site_hands_off_to_extraction_and_evaluation(self, make_site, hosting_requirement):
        site = make_site()
        body = "<p>cloud hosting " + "word " * 600 + '<a href="mailto:sales@acme.test">Sales</a></p>'
        FakeContentFetcher.serve("acme.test", [("https://acme.test/", HOMEPAGE), ("https://acme.test/contact", body)])

        result = crawl_site.delay(site.id).get()

        site.refresh_from_db()
        assert result["status"] == SiteStatus.COMPLETED
        assert site.status == SiteStatus.COMPLETED
        assert site.is_qualified is True
        assert site.contacts.filter(email="sales@acme.test").exists()
        assert FakeContentFetcher.calls == [("acme.test", 10)]

    def test_transient_failure_is_retried_then_left_failed(self, make_site, settings):
        settings.LEADMAILER_MAX_CRAWL_ATTEMPTS = 5
        site = make_site()
        FakeContentFetcher.serve("acme.test", TransientError("Connection reset"))

        crawl_site.delay(site.id)

        site.refresh_from_db()
        assert site.status == SiteStatus.FAILED
        assert site.last_crawl_error == "Connection reset"
        assert site.crawl_attempts == crawl_site.max_retries + 1
        assert Site.objects.filter(pk=site.pk).exists()

    def test_unexpected_error_fails_without_retry(self, make_site):
        site = make_site()
        FakeContentFetcher.serve("acme.test", ValueError("bad markup"))

        crawl_site.delay(site.id).get()

        site.refresh_from_db()
        assert site.status == SiteStatus.FAILED
        assert site.last_crawl_error == "Crawl error: bad markup"
        assert site.crawl_attempts == 1

    def test_crawl_of_claimed_site_is_a_no_op(self, make_site):
        site = make_site(status=SiteStatus.CRAWLING, crawl_started_at=timezone.now(), crawl_attempts=1)

        result = crawl_site.delay(site.id).get()

        assert result == {"site_id": site.id, "skipped": True}
        assert FakeContentFetcher.calls == []

    def test_dispatch_crawl_batch_queues_due_sites(self, make_site):
        make_site(domain="a.test")
        make_site(domain="b.test", status=SiteStatus.COMPLETED)
        FakeContentFetcher.serve("a.test", [("https://a.test/", "<p>hello</p>")])

        result = dispatch_crawl_batch.delay(limit=10).get()

        assert result["queued"] == 1
        assert Site.objects.get(domain="a.test").status == SiteStatus.COMPLETED

    def test_dispatch_crawl_batch_skips_while_locked(self, make_site):
        from apps.common.locks import sweep_lock

        make_site(domain="a.test")
        with sweep_lock("crawl-batch") as acquired:
            assert acquired
            assert dispatch_crawl_batch.delay().get() == {"skipped": True}
