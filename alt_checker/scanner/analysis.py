from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from alt_checker.scanner.aggregator import bucket
from alt_checker.scanner.base import Category, CategoryReport, ImageCandidate
from alt_checker.scanner.classifier import classify
from alt_checker.scanner.policies import ClassificationRulePolicy, FilterPolicy, WindowPolicy
from alt_checker.scanner.utils.image_extractor import extract_candidates
from alt_checker.scanner.utils.placeholder_filter import count_sources, filter_placeholders
from alt_checker.scanner.utils.proximity import SiblingWalker

logger = logging.getLogger(__name__)


class PageAnalyzer:
    """Extract, filter and classify the images of one HTML document."""

    def __init__(
        self,
        window: WindowPolicy | None = None,
        rules: ClassificationRulePolicy | None = None,
        filter_policy: FilterPolicy | None = None,
    ) -> None:
        self.window = window or WindowPolicy()
        self.rules = rules or ClassificationRulePolicy()
        self.filter_policy = filter_policy or FilterPolicy()

    @classmethod
    def from_settings(cls, deep: bool = False) -> PageAnalyzer:
        return cls(
            window=WindowPolicy.from_settings(deep=deep),
            rules=ClassificationRulePolicy.from_settings(),
            filter_policy=FilterPolicy.from_settings(),
        )

    def classify_all(
        self, candidates: list[ImageCandidate],
    ) -> list[tuple[ImageCandidate, Category]]:
        walker = SiblingWalker(self.window)
        classified = []
        for candidate in candidates:
            # Window is only needed for duplicate detection
            nearby = ""
            if candidate.alt and candidate.node is not None:
                nearby = walker.window(candidate.node)
            classified.append((candidate, classify(candidate, nearby, self.rules)))
        return classified

    def analyze(self, html: str, page_url: str) -> CategoryReport:
        soup = BeautifulSoup(html, "lxml")
        raw = extract_candidates(soup, page_url, self.filter_policy.tiny_area)
        frequency = count_sources(raw)
        kept = filter_placeholders(raw, self.filter_policy, frequency)
        report = bucket(self.classify_all(kept), raw_count=len(raw))
        # Snapshot nodes are not needed past this point
        for candidate in kept:
            candidate.node = None
        return report
