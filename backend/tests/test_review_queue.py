from datetime import timedelta

import pytest
from django.utils import timezone

from apps.blocklist.services import block_email
from apps.common.enums import ContactSource, ReviewStatus
from apps.outreach import review
from apps.outreach.errors import ReviewError
from apps.outreach.models import ReviewItem
from apps.outreach.tasks import cleanup_old_review_items


@pytest.fixture
def make_item(template):
    def _make(site, contact, **fields):
        fields.setdefault("subject", f"Hello {contact.email}")
        fields.setdefault("body", "Body")
        fields.setdefault("priority", contact.priority)
        return ReviewItem.objects.create(site=site, contact=contact, template=template, **fields)
    return _make


@pytest.mark.django_db
class TestCreateReviewItems:
    def _contacts(self, site, make_contact):
        return [
            make_contact(site, "jane@acme.test", name="Jane", priority=95, source_type=ContactSource.CONTACT_PAGE),
            make_contact(site, "sales@acme.test", priority=80),
            make_contact(site, "hello@acme.test", priority=60),
            make_contact(site, "info@acme.test", priority=55),
        ]

    def test_best_contacts_are_queued_up_to_the_cap(self, qualified_site, make_contact):
        self._contacts(qualified_site, make_contact)

        result = review.create_review_items_for_site(qualified_site)

        assert result == {"created": 3, "existing": 0}
        items = ReviewItem.objects.order_by("-priority")
        assert [item.contact.email for item in items] == ["jane@acme.test", "sales@acme.test", "hello@acme.test"]
        assert all(item.status == ReviewStatus.PENDING for item in items)

    def test_rerun_creates_nothing(self, qualified_site, make_contact):
        self._contacts(qualified_site, make_contact)
        review.create_review_items_for_site(qualified_site)

        assert review.create_review_items_for_site(qualified_site) == {"created": 0, "existing": 3}
        assert ReviewItem.objects.count() == 3

    def test_message_is_rendered_from_site_template(self, qualified_site, make_contact):
        make_contact(qualified_site, "jane@acme.test", name="Jane")
        make_contact(qualified_site, "info@acme.test")

        review.create_review_items_for_site(qualified_site)

        jane = ReviewItem.objects.get(contact__email="jane@acme.test")
        assert jane.subject == "Quick question about acme.test"
        assert jane.body.startswith("Hi Jane,\n\nI had a look at https://acme.test.")
        assert jane.preheader == "For Acme Hosting"
        # No name to fill in: the placeholder stays for the reviewer to fix
        info = ReviewItem.objects.get(contact__email="info@acme.test")
        assert info.body.startswith("Hi {{ contact_name }},")

    def test_blocklisted_and_invalid_contacts_are_skipped(self, qualified_site, make_contact):
        make_contact(qualified_site, "ceo@acme.test")
        make_contact(qualified_site, "old@acme.test", is_valid=False)
        make_contact(qualified_site, "new@acme.test", is_validated=False, is_valid=False)
        block_email("ceo@acme.test")

        assert review.create_review_items_for_site(qualified_site)["skipped"] == "No valid contacts"

    def test_site_needs_template_and_qualification(self, make_site, make_contact, template):
        site = make_site(is_qualified=True)
        make_contact(site, "info@acme.test")
        assert review.create_review_items_for_site(site)["skipped"] == "No active email template bound to site"

        other = make_site(domain="other.test", email_template=template)
        assert review.create_review_items_for_site(other)["skipped"] == "Site is not qualified"


@pytest.mark.django_db
class TestReviewDecisions:
    def test_approve_requires_reviewer(self, qualified_site, make_contact, make_item):
        item = make_item(qualified_site, make_contact(qualified_site, "info@acme.test"))

        with pytest.raises(ReviewError):
            review.approve(item, actor=None)
        item.refresh_from_db()
        assert item.status == ReviewStatus.PENDING

    def test_approve_with_edits(self, qualified_site, make_contact, make_item, reviewer):
        item = make_item(qualified_site, make_contact(qualified_site, "info@acme.test"))

        changed = review.approve(
            item, reviewer, notes="Tightened subject",
            modifications={"subject": "Short subject", "status": "sent", "priority": 1},
        )

        assert changed is True
        assert item.status == ReviewStatus.APPROVED
        assert item.subject == "Short subject"
        assert item.priority == 50
        assert item.reviewed_by == reviewer
        assert item.reviewed_at is not None
        assert item.review_notes == "Tightened subject"

    def test_decided_item_is_not_changed_again(self, qualified_site, make_contact, make_item, reviewer):
        item = make_item(qualified_site, make_contact(qualified_site, "info@acme.test"))
        review.approve(item, reviewer)
        approved_at = item.reviewed_at

        assert review.approve(item, reviewer) is False
        assert review.reject(item, reviewer, notes="Too late") is False
        assert item.status == ReviewStatus.APPROVED
        assert item.reviewed_at == approved_at

    def test_bulk_decisions_only_touch_pending_items(self, qualified_site, make_contact, make_item, reviewer):
        pending = make_item(qualified_site, make_contact(qualified_site, "a@acme.test"))
        other = make_item(qualified_site, make_contact(qualified_site, "b@acme.test"))
        sent = make_item(qualified_site, make_contact(qualified_site, "c@acme.test"), status=ReviewStatus.SENT)

        assert review.bulk_reject([pending.id, sent.id], reviewer, notes="Not a fit") == 1
        assert review.bulk_approve([pending.id, other.id, sent.id], reviewer) == 1

        statuses = dict(ReviewItem.objects.values_list("id", "status"))
        assert statuses == {
            pending.id: ReviewStatus.REJECTED,
            other.id: ReviewStatus.APPROVED,
            sent.id: ReviewStatus.SENT,
        }

    def test_requeue_rejected_item(self, qualified_site, make_contact, make_item, reviewer):
        item = make_item(qualified_site, make_contact(qualified_site, "info@acme.test"))
        review.reject(item, reviewer)

        assert review.requeue(item) is True
        assert item.status == ReviewStatus.PENDING
        assert item.reviewed_by is None
        assert review.requeue(item) is False


@pytest.mark.django_db
class TestQueueMaintenance:
    def test_select_dispatchable_orders_and_skips_claimed(self, qualified_site, make_contact, make_item):
        low = make_item(qualified_site, make_contact(qualified_site, "low@acme.test", priority=55),
                        status=ReviewStatus.APPROVED)
        high = make_item(qualified_site, make_contact(qualified_site, "high@acme.test", priority=95),
                         status=ReviewStatus.APPROVED)
        make_item(qualified_site, make_contact(qualified_site, "held@acme.test", priority=99),
                  status=ReviewStatus.APPROVED, claimed_at=timezone.now())
        stale = make_item(qualified_site, make_contact(qualified_site, "stale@acme.test", priority=60),
                          status=ReviewStatus.APPROVED, claimed_at=timezone.now() - timedelta(hours=1))
        make_item(qualified_site, make_contact(qualified_site, "pending@acme.test", priority=100))

        assert review.select_dispatchable(10) == [high, stale, low]
        assert review.select_dispatchable(1) == [high]

    def test_cleanup_keeps_open_items(self, qualified_site, make_contact, make_item):
        old_sent = make_item(qualified_site, make_contact(qualified_site, "a@acme.test"), status=ReviewStatus.SENT)
        old_pending = make_item(qualified_site, make_contact(qualified_site, "b@acme.test"))
        recent = make_item(qualified_site, make_contact(qualified_site, "c@acme.test"), status=ReviewStatus.REJECTED)
        ReviewItem.objects.filter(pk__in=[old_sent.pk, old_pending.pk]).update(
            updated_at=timezone.now() - timedelta(days=120),
        )

        assert review.cleanup_old_items(days=90) == 1
        assert set(ReviewItem.objects.values_list("id", flat=True)) == {old_pending.id, recent.id}

    def test_cleanup_task(self, qualified_site, make_contact, make_item):
        item = make_item(qualified_site, make_contact(qualified_site, "a@acme.test"), status=ReviewStatus.FAILED)
        ReviewItem.objects.filter(pk=item.pk).update(updated_at=timezone.now() - timedelta(days=10))

        assert cleanup_old_review_items.delay(days=7).get() == {"deleted": 1}

    def test_statistics(self, qualified_site, make_contact, make_item):
        make_item(qualified_site, make_contact(qualified_site, "a@acme.test"))
        make_item(qualified_site, make_contact(qualified_site, "b@acme.test"), status=ReviewStatus.SENT)

        stats = review.get_statistics()

        assert stats["total"] == 2
        assert stats["pending"] == 1
        assert stats["sent"] == 1
        assert stats["rejected"] == 0
