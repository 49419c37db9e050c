import pytest
from rest_framework.test import APIClient

from apps.blocklist.models import BlockEntry
from apps.common.enums import ReviewStatus, SiteStatus
from apps.outreach.models import ReviewItem
from apps.sites.models import Site


@pytest.fixture
def api_client(reviewer):
    client = APIClient()
    client.force_authenticate(user=reviewer)
    return client


@pytest.fixture
def pending_items(qualified_site, make_contact, template):
    return [
        ReviewItem.objects.create(
            site=qualified_site,
            contact=make_contact(qualified_site, email),
            template=template,
            subject="Quick question about acme.test",
            body="Hi",
        )
        for email in ("a@acme.test", "b@acme.test")
    ]


@pytest.mark.django_db
class TestReviewApi:
    def test_requires_authentication(self, pending_items):
        response = APIClient().get("/api/v1/review/")
        assert response.status_code in (401, 403)

    def test_list_filters_by_status(self, api_client, pending_items):
        ReviewItem.objects.filter(pk=pending_items[0].pk).update(status=ReviewStatus.REJECTED)

        response = api_client.get("/api/v1/review/", {"status": "pending"})

        assert response.status_code == 200
        assert [row["contact_email"] for row in response.data["results"]] == ["b@acme.test"]

    def test_approve_with_edits(self, api_client, pending_items, reviewer):
        item = pending_items[0]

        response = api_client.post(
            f"/api/v1/review/{item.id}/approve/",
            {"notes": "Looks good", "subject": "Shorter subject"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["changed"] is True
        assert response.data["item"]["status"] == ReviewStatus.APPROVED
        assert response.data["item"]["subject"] == "Shorter subject"
        assert response.data["item"]["reviewed_by"] == reviewer.username

    def test_second_decision_is_reported_unchanged(self, api_client, pending_items):
        item = pending_items[0]
        api_client.post(f"/api/v1/review/{item.id}/reject/", {"notes": "No"}, format="json")

        response = api_client.post(f"/api/v1/review/{item.id}/approve/", {}, format="json")

        assert response.data["changed"] is False
        assert response.data["item"]["status"] == ReviewStatus.REJECTED

    def test_bulk_approve(self, api_client, pending_items):
        ids = [item.id for item in pending_items]

        response = api_client.post("/api/v1/review/bulk-approve/", {"ids": ids}, format="json")

        assert response.status_code == 200
        assert response.data == {"approved": 2}
        assert ReviewItem.objects.filter(status=ReviewStatus.APPROVED).count() == 2

    def test_bulk_reject_validates_payload(self, api_client):
        response = api_client.post("/api/v1/review/bulk-reject/", {"ids": []}, format="json")
        assert response.status_code == 400

    def test_requeue_pending_item_is_rejected(self, api_client, pending_items):
        response = api_client.post(f"/api/v1/review/{pending_items[0].id}/requeue/")
        assert response.status_code == 400


@pytest.mark.django_db
class TestSitesApi:
    def test_ingest(self, api_client):
        response = api_client.post(
            "/api/v1/sites/ingest/",
            {"domains": ["https://www.acme.test", "acme.test", "??"]},
            format="json",
        )

        assert response.status_code == 201
        assert response.data == {"created": 1, "existing": 1, "invalid": ["??"]}
        assert Site.objects.get().status == SiteStatus.PENDING

    def test_crawl_only_from_pending_or_failed(self, api_client, make_site):
        site = make_site(status=SiteStatus.COMPLETED)

        response = api_client.post(f"/api/v1/sites/{site.id}/crawl/")

        assert response.status_code == 400

    def test_flag_for_review(self, api_client, make_site):
        site = make_site(status=SiteStatus.COMPLETED)

        response = api_client.post(f"/api/v1/sites/{site.id}/flag-for-review/")

        assert response.status_code == 200
        assert response.data["status"] == SiteStatus.PER_REVIEW


@pytest.mark.django_db
class TestBlocklistApi:
    def test_create_normalizes_value(self, api_client):
        response = api_client.post(
            "/api/v1/blocklist/entries/",
            {"type": "domain", "value": "Spam.test", "reason": "Complaint"},
            format="json",
        )

        assert response.status_code == 201
        entry = BlockEntry.objects.get()
        assert entry.value == "spam.test"
        assert entry.reason == "Complaint"

    def test_check(self, api_client):
        api_client.post("/api/v1/blocklist/entries/", {"type": "domain", "value": "spam.test"}, format="json")

        response = api_client.post("/api/v1/blocklist/entries/check/", {"email": "x@mail.spam.test"}, format="json")

        assert response.data == {"blocked": True, "reasons": ["Email domain mail.spam.test is blocklisted"]}

    def test_domain_entry_given_as_url(self, api_client):
        api_client.post(
            "/api/v1/blocklist/entries/",
            {"type": "domain", "value": "https://www.Spam.test/unsubscribe"},
            format="json",
        )

        assert BlockEntry.objects.get().value == "spam.test"

    def test_complaint_blocks_the_address(self, api_client):
        response = api_client.post("/api/v1/blocklist/entries/complaint/", {"email": "Angry@acme.test"}, format="json")

        assert response.status_code == 201
        assert response.data["value"] == "angry@acme.test"
        assert response.data["source"] == "auto"
        assert api_client.post(
            "/api/v1/blocklist/entries/check/", {"email": "angry@acme.test"}, format="json",
        ).data["blocked"] is True
