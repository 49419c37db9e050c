# apps/qualification/criteria.py

"""
Criteria evaluation.

Each supported criterion key maps to an evaluator in ``CRITERIA``; the
table is evaluated in order and unknown keys are ignored. A requirement set
passes only when every criterion it names passes.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Callable


@dataclass
class SiteFacts:
    """What the evaluator knows about a crawled site."""
    page_count: int
    word_count: int
    platform: str | None
    corpus: str

    def __post_init__(self):
        self._haystack = (self.corpus or "").lower()

    def contains(self, needle: str) -> bool:
        return str(needle).lower() in self._haystack


@dataclass
class CriterionResult:
    criterion: str
    required: Any
    actual: Any
    matched: bool
    message: str
    found: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RequirementResult:
    requirement_id: int | None
    name: str
    priority: int
    passed: bool
    results: list[CriterionResult] = field(default_factory=list)

    @property
    def missing(self) -> list[str]:
        """Required keywords and URL patterns that were not found."""
        return [item for result in self.results for item in result.missing]

    @property
    def failed(self) -> list[CriterionResult]:
        return [result for result in self.results if not result.matched]

    def to_dict(self) -> dict:
        return {
            "requirement_id": self.requirement_id,
            "name": self.name,
            "priority": self.priority,
            "passed": self.passed,
            "missing": self.missing,
            "criteria": [result.to_dict() for result in self.results],
        }


def _as_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [str(v).strip() for v in value if str(v).strip()]


# === Evaluators ===

def min_pages(facts: SiteFacts, required) -> CriterionResult:
    required = int(required)
    actual = facts.page_count
    matched = actual >= required
    message = (
        f"Website has {actual} pages (required: {required}+)"
        if matched else
        f"Website has only {actual} pages (required: {required}+)"
    )
    return CriterionResult("min_pages", required, actual, matched, message)


def max_pages(facts: SiteFacts, required) -> CriterionResult:
    required = int(required)
    actual = facts.page_count
    matched = actual <= required
    message = (
        f"Website has {actual} pages (limit: {required})"
        if matched else
        f"Website has {actual} pages (exceeds limit: {required})"
    )
    return CriterionResult("max_pages", required, actual, matched, message)


def min_word_count(facts: SiteFacts, required) -> CriterionResult:
    required = int(required)
    actual = facts.word_count
    matched = actual >= required
    message = (
        f"Content has {actual} words (required: {required}+)"
        if matched else
        f"Content has only {actual} words (required: {required}+)"
    )
    return CriterionResult("min_word_count", required, actual, matched, message)


def max_word_count(facts: SiteFacts, required) -> CriterionResult:
    required = int(required)
    actual = facts.word_count
    matched = actual <= required
    message = (
        f"Content has {actual} words (limit: {required})"
        if matched else
        f"Content has {actual} words (exceeds limit: {required})"
    )
    return CriterionResult("max_word_count", required, actual, matched, message)


def platforms(facts: SiteFacts, required) -> CriterionResult:
    allowed = _as_list(required)
    actual = facts.platform
    matched = actual is not None and actual.lower() in {p.lower() for p in allowed}
    message = (
        f"Platform '{actual}' is allowed"
        if matched else
        f"Platform '{actual or 'unknown'}' not in allowed list: {', '.join(allowed)}"
    )
    return CriterionResult("platforms", allowed, actual, matched, message)


def blocked_platforms(facts: SiteFacts, required) -> CriterionResult:
    blocked = _as_list(required)
    actual = facts.platform
    matched = actual is None or actual.lower() not in {p.lower() for p in blocked}
    message = (
        f"Platform '{actual or 'unknown'}' is not blocked"
        if matched else
        f"Platform '{actual}' is blocked"
    )
    return CriterionResult("blocked_platforms", blocked, actual, matched, message)


def required_keywords(facts: SiteFacts, required) -> CriterionResult:
    keywords = _as_list(required)
    found = [k for k in keywords if facts.contains(k)]
    missing = [k for k in keywords if k not in found]
    matched = not missing
    message = (
        f"All required keywords found: {', '.join(found)}"
        if matched else
        f"Missing keywords: {', '.join(missing)}"
    )
    return CriterionResult("required_keywords", keywords, found, matched, message, found=found, missing=missing)


def excluded_keywords(facts: SiteFacts, required) -> CriterionResult:
    keywords = _as_list(required)
    found = [k for k in keywords if facts.contains(k)]
    matched = not found
    message = (
        "No excluded keywords found"
        if matched else
        f"Found excluded keywords: {', '.join(found)}"
    )
    return CriterionResult("excluded_keywords", keywords, found, matched, message, found=found)


def required_urls(facts: SiteFacts, required) -> CriterionResult:
    patterns = _as_list(required)
    found = [p for p in patterns if facts.contains(p)]
    missing = [p for p in patterns if p not in found]
    matched = not missing
    message = (
        f"All required URLs found: {', '.join(found)}"
        if matched else
        f"Missing URLs: {', '.join(missing)}"
    )
    return CriterionResult("required_urls", patterns, found, matched, message, found=found, missing=missing)


CRITERIA: list[tuple[str, Callable[[SiteFacts, Any], CriterionResult]]] = [
    ("min_pages", min_pages),
    ("max_pages", max_pages),
    ("min_word_count", min_word_count),
    ("max_word_count", max_word_count),
    ("platforms", platforms),
    ("blocked_platforms", blocked_platforms),
    ("required_keywords", required_keywords),
    ("excluded_keywords", excluded_keywords),
    ("required_urls", required_urls),
]

# Alternative spellings accepted in stored criteria documents
ALIASES = {
    "exclude_keywords": "excluded_keywords",
    "allowed_platforms": "platforms",
    "platform": "platforms",
}


def normalize_criteria(criteria: dict | None) -> dict:
    normalized = {}
    if not isinstance(criteria, dict):
        return normalized
    for key, value in criteria.items():
        key = ALIASES.get(key, key)
        if value is None or value == "" or value == []:
            continue
        normalized[key] = value
    return normalized


class CriteriaEvaluator:
    def __init__(self, facts: SiteFacts, criteria_table=CRITERIA):
        self.facts = facts
        self.criteria_table = criteria_table

    def evaluate_criteria(self, criteria: dict) -> list[CriterionResult]:
        criteria = normalize_criteria(criteria)
        results = []
        for key, evaluator in self.criteria_table:
            if key not in criteria:
                continue
            try:
                results.append(evaluator(self.facts, criteria[key]))
            except (TypeError, ValueError):
                # A malformed value fails its own set only
                results.append(CriterionResult(
                    key, criteria[key], None, False, f"Invalid value for {key}: {criteria[key]!r}",
                ))
        return results

    def evaluate(self, requirement) -> RequirementResult:
        """Evaluate one RequirementSet. A set with no known criteria never passes."""
        results = self.evaluate_criteria(requirement.criteria)
        passed = bool(results) and all(result.matched for result in results)
        return RequirementResult(
            requirement_id=requirement.pk,
            name=requirement.name,
            priority=requirement.priority,
            passed=passed,
            results=results,
        )
