import pytest

from apps.common.enums import SiteStatus
from apps.qualification.criteria import CriteriaEvaluator, SiteFacts, normalize_criteria
from apps.qualification.models import RequirementSet, calculate_page_budget
from apps.qualification.services import evaluate_site
from apps.qualification.tasks import evaluate_site as evaluate_site_task


def words(count, *extra):
    return " ".join(["lorem"] * (count - len(extra)) + list(extra))


def facts(word_count=1200, corpus="", page_count=5, platform=None):
    return SiteFacts(page_count=page_count, word_count=word_count, platform=platform, corpus=corpus)


class TestCriteriaEvaluator:
    criteria = {"min_word_count": 500, "required_keywords": ["cloud", "hosting"], "exclude_keywords": ["casino"]}

    def _requirement(self, criteria):
        return RequirementSet(id=1, name="Hosting", priority=1, criteria=criteria)

    def test_all_predicates_pass(self):
        corpus = words(1200, "Cloud", "hosting")
        result = CriteriaEvaluator(facts(corpus=corpus)).evaluate(self._requirement(self.criteria))
        assert result.passed is True
        assert result.missing == []
        assert [r.criterion for r in result.results] == ["min_word_count", "required_keywords", "excluded_keywords"]

    def test_missing_keyword_fails_the_set(self):
        corpus = words(1200, "cloud")
        result = CriteriaEvaluator(facts(corpus=corpus)).evaluate(self._requirement(self.criteria))
        assert result.passed is False
        assert result.missing == ["hosting"]
        keyword_result = result.failed[0]
        assert keyword_result.message == "Missing keywords: hosting"

    def test_excluded_keyword_fails_the_set(self):
        corpus = words(1200, "cloud", "hosting", "Casino")
        result = CriteriaEvaluator(facts(corpus=corpus)).evaluate(self._requirement(self.criteria))
        assert result.passed is False
        assert result.failed[0].found == ["casino"]

    def test_page_and_word_bounds(self):
        evaluator = CriteriaEvaluator(facts(word_count=300, page_count=4))
        results = evaluator.evaluate_criteria({"min_pages": 5, "max_pages": 10, "max_word_count": 1000})
        by_key = {r.criterion: r for r in results}
        assert by_key["min_pages"].matched is False
        assert by_key["min_pages"].message == "Website has only 4 pages (required: 5+)"
        assert by_key["max_pages"].matched is True
        assert by_key["max_word_count"].matched is True

    def test_platform_whitelist_and_blocklist(self):
        evaluator = CriteriaEvaluator(facts(platform="WordPress"))
        assert evaluator.evaluate_criteria({"platforms": ["wordpress", "Joomla"]})[0].matched is True
        assert evaluator.evaluate_criteria({"blocked_platforms": ["WordPress"]})[0].matched is False

    def test_unknown_platform_is_not_whitelisted(self):
        result = CriteriaEvaluator(facts(platform=None)).evaluate_criteria({"platforms": ["WordPress"]})[0]
        assert result.matched is False
        assert "unknown" in result.message

    def test_required_urls_match_page_urls(self):
        corpus = "https://acme.test/\nhome\nhttps://acme.test/pricing\nplans"
        result = CriteriaEvaluator(facts(corpus=corpus)).evaluate_criteria({"required_urls": ["/pricing", "/blog"]})[0]
        assert result.matched is False
        assert result.found == ["/pricing"]
        assert result.missing == ["/blog"]

    def test_set_without_known_predicates_does_not_pass(self):
        result = CriteriaEvaluator(facts()).evaluate(self._requirement({"favourite_colour": "blue"}))
        assert result.passed is False
        assert result.results == []

    def test_malformed_value_fails_only_its_criterion(self):
        result = CriteriaEvaluator(facts(page_count=5)).evaluate(
            self._requirement({"min_pages": "ten", "platforms": 7}),
        )
        assert result.passed is False
        assert [(r.criterion, r.matched) for r in result.results] == [("min_pages", False), ("platforms", False)]
        assert result.results[0].message == "Invalid value for min_pages: 'ten'"

    def test_aliases_and_empty_values(self):
        assert normalize_criteria({"exclude_keywords": ["x"], "min_pages": None, "platforms": []}) == {
            "excluded_keywords": ["x"],
        }


@pytest.mark.django_db
class TestEvaluateSite:
    def _site(self, make_site, content):
        return make_site(
            status=SiteStatus.COMPLETED,
            snapshot_pages=[{"url": "https://acme.test/", "content": content}],
            page_count=1,
            word_count=1200,
        )

    def test_qualifies_when_any_set_passes(self, make_site, hosting_requirement):
        RequirementSet.objects.create(name="Shops", priority=50, criteria={"platforms": ["Shopify"]})
        site = self._site(make_site, "We sell cloud hosting")

        evaluate_site(site)
        site.refresh_from_db()

        assert site.is_qualified is True
        assert site.matched_requirement == hosting_requirement
        assert site.evaluated_at is not None
        details = site.match_details["requirements"]
        assert details[str(hosting_requirement.id)]["passed"] is True
        assert len(details) == 2

    def test_highest_priority_passing_set_is_recorded(self, make_site, hosting_requirement):
        preferred = RequirementSet.objects.create(name="Anything big", priority=99, criteria={"min_word_count": 100})
        site = self._site(make_site, "cloud hosting")

        evaluate_site(site)

        assert site.matched_requirement_id == preferred.id

    def test_failed_evaluation_keeps_details(self, make_site, hosting_requirement):
        site = self._site(make_site, "cloud only")

        evaluate_site(site)
        site.refresh_from_db()

        assert site.is_qualified is False
        assert site.matched_requirement is None
        assert site.match_details["requirements"][str(hosting_requirement.id)]["missing"] == ["hosting"]

    def test_malformed_set_does_not_block_other_sets(self, make_site):
        broken = RequirementSet.objects.create(name="Broken", priority=90, criteria={"min_pages": "ten"})
        valid = RequirementSet.objects.create(name="Any page", priority=10, criteria={"min_pages": 1})
        site = self._site(make_site, "anything")

        result = evaluate_site_task.delay(site.id).get()
        site.refresh_from_db()

        assert result["qualified"] is True
        assert site.matched_requirement == valid
        assert site.evaluated_at is not None
        assert site.match_details["requirements"][str(broken.id)]["criteria"][0]["message"] == (
            "Invalid value for min_pages: 'ten'"
        )

    def test_inactive_sets_are_ignored(self, make_site):
        RequirementSet.objects.create(name="Off", is_active=False, criteria={"min_word_count": 1})
        site = self._site(make_site, "anything")

        evaluate_site(site)

        assert site.is_qualified is False
        assert site.match_details["requirements"] == {}


@pytest.mark.django_db
class TestPageBudget:
    def test_default_without_requirements(self):
        assert calculate_page_budget() == 10

    def test_largest_min_pages_plus_margin(self):
        RequirementSet.objects.create(name="A", criteria={"min_pages": 8})
        RequirementSet.objects.create(name="B", criteria={"min_pages": 20})
        RequirementSet.objects.create(name="C", is_active=False, criteria={"min_pages": 50})
        assert calculate_page_budget() == 25

    def test_budget_never_below_default(self):
        RequirementSet.objects.create(name="A", criteria={"min_pages": 2})
        assert calculate_page_budget() == 10
