"""Drop decorative and tracking images before classification.

Follows the two-phase shape of ``image_extractor.py``: first count every
source on the page, then filter against the finished counts.
"""
from __future__ import annotations

import logging
import re
from collections import Counter

from alt_checker.scanner.base import ImageCandidate
from alt_checker.scanner.policies import FilterPolicy

logger = logging.getLogger(__name__)

_GIF_DATA_URI_RE = re.compile(r"^data:image/gif;base64,", re.IGNORECASE)
_GIF_RE = re.compile(r"\.gif\b", re.IGNORECASE)
_SVG_RE = re.compile(r"\.svg\b", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def parse_dimension(value: object) -> int:
    """Read an HTML ``width``/``height`` value ("300", "300px"); 0 when unusable."""
    if value is None:
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else 0


def is_too_small(width: object, height: object, tiny_area: int = 9) -> bool:
    """True for declared dimensions of a spacer (area <= ``tiny_area``).

    Both dimensions must be present; a missing one never marks an image small.
    """
    w = parse_dimension(width)
    h = parse_dimension(height)
    return bool(w and h and w * h <= tiny_area)


def is_tiny_gif_uri(src: str, max_length: int = 200) -> bool:
    return bool(_GIF_DATA_URI_RE.match(src)) and len(src) < max_length


def count_sources(candidates: list[ImageCandidate]) -> Counter[str]:
    """Frequency of each resolved source across the whole page."""
    return Counter(c.src for c in candidates if c.src)


def _is_placeholder(
    candidate: ImageCandidate, frequency: Counter[str], policy: FilterPolicy,
) -> bool:
    src = candidate.src
    if not src or candidate.too_small or is_tiny_gif_uri(src, policy.tiny_gif_uri_length):
        return True
    if candidate.alt:
        return False
    seen = frequency.get(src, 0)
    if _GIF_RE.search(src) and seen >= policy.gif_repeat_limit:
        return True
    if _SVG_RE.search(src) and seen >= policy.svg_repeat_limit:
        return True
    return False


def filter_placeholders(
    candidates: list[ImageCandidate],
    policy: FilterPolicy | None = None,
    frequency: Counter[str] | None = None,
) -> list[ImageCandidate]:
    """Return the candidates worth classifying, in their original order."""
    policy = policy or FilterPolicy()
    if frequency is None:
        frequency = count_sources(candidates)
    kept = [c for c in candidates if not _is_placeholder(c, frequency, policy)]
    logger.debug("Placeholder filter kept %d of %d candidates", len(kept), len(candidates))
    return kept
