"""Turn classified candidates into the page report and the response contract."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from alt_checker.scanner.base import Category, CategoryReport, ImageCandidate, ScanResult
from alt_checker.scanner.errors import ScanError

logger = logging.getLogger(__name__)

BLOCKED_NOTE = "Site blocks headless browsers; only server-rendered images analysed."
FALLBACK_NOTE = "Rendered pass failed; only server-rendered images analysed."


def bucket(
    classified: Iterable[tuple[ImageCandidate, Category]], raw_count: int = 0,
) -> CategoryReport:
    """Group candidates by category; every candidate lands in exactly one list."""
    report = CategoryReport(raw_count=raw_count)
    for candidate, category in classified:
        report.categories[category].append(candidate)
        report.total_images += 1
    report.raw_count = max(report.raw_count, report.total_images)
    return report


def candidate_entry(candidate: ImageCandidate) -> dict[str, Any]:
    entry: dict[str, Any] = {"src": candidate.src, "alt": candidate.alt}
    if candidate.match_snippet:
        entry["matchingSnippet"] = candidate.match_snippet
    if candidate.advisories:
        entry["advisories"] = list(candidate.advisories)
    return entry


def report_payload(report: CategoryReport) -> dict[str, Any]:
    return {
        "totalImages": report.total_images,
        "errorGroups": {
            category.value: [candidate_entry(c) for c in report.categories[category]]
            for category in Category
        },
    }


def build_payload(result: ScanResult) -> dict[str, Any]:
    payload = report_payload(result.report)
    payload["engine"] = result.engine.value
    if result.blocked:
        payload["blocked"] = True
    if result.fallback:
        payload["fallback"] = True
    if result.note:
        payload["note"] = result.note
    return payload


def error_payload(exc: BaseException) -> tuple[dict[str, str], int]:
    """Map an exception to ``({"error": category}, http_status)``.

    Unknown exceptions are reported as ``internal`` without details.
    """
    if isinstance(exc, ScanError):
        return {"error": exc.category}, exc.http_status
    return {"error": "internal"}, 500
