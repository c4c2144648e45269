"""Rule-based alt-text classification.

Rules run in priority order and the first match wins:

1. ``MISSING_ALT``: no alt text after trimming.
2. ``MATCHING_NEARBY_CONTENT``: the normalized alt text appears verbatim in
   the normalized proximity window.
3. ``FILE_NAME``: the alt text echoes the image file name or ends in an image
   extension.
4. ``MANUAL_CHECK``: everything else.

``ClassificationRulePolicy.filename_first`` swaps rules 2 and 3.
"""
from __future__ import annotations

import logging
import re
from urllib.parse import unquote, urlparse

from alt_checker.scanner.base import Category, ImageCandidate
from alt_checker.scanner.policies import ClassificationRulePolicy
from alt_checker.scanner.utils.text_normalize import normalize_text, normalize_with_offsets

logger = logging.getLogger(__name__)

IMAGE_EXTENSION_RE = re.compile(r"\.(png|jpe?g|webp|gif|bmp|tiff?)$", re.IGNORECASE)

MATCH_OPEN = "[["
MATCH_CLOSE = "]]"

# Advisory heuristics for manual review
_SHORT_ALT_CHARS = 5
_LONG_ALT_CHARS = 125
_KEYWORD_SPLIT_RE = re.compile(r"\s*[,|;]\s*")
_RANDOM_TOKEN_RE = re.compile(r"^(?=.*[a-z])(?=.*\d)[a-z0-9_\-]{12,}$", re.IGNORECASE)

ADVISORY_TOO_SHORT = "too_short"
ADVISORY_TOO_LONG = "too_long"
ADVISORY_KEYWORD_LIST = "keyword_list"
ADVISORY_RANDOM_TOKEN = "random_token"


def base_filename(src: str) -> str:
    """Last path segment of ``src`` without its extension ("" for data URIs)."""
    if src.lower().startswith("data:"):
        return ""
    try:
        path = urlparse(src).path
    except ValueError:
        path = src.split("?", 1)[0]
    name = unquote(path.rstrip("/").rsplit("/", 1)[-1])
    # "photo.large.jpg" -> "photo"
    return name.split(".", 1)[0] if name else ""


def is_filename_alt(alt: str, src: str, strip_punctuation: bool = True) -> bool:
    if IMAGE_EXTENSION_RE.search(alt.strip()):
        return True
    stem = base_filename(src)
    if not stem:
        return False
    normalized_alt = normalize_text(alt, strip_punctuation)
    return bool(normalized_alt) and normalized_alt == normalize_text(stem, strip_punctuation)


def find_duplicate(
    alt: str, nearby_text: str, strip_punctuation: bool = True,
) -> tuple[int, int] | None:
    """Locate the alt text inside ``nearby_text``.

    Returns the ``(start, end)`` span in the original ``nearby_text`` or None.
    """
    needle = normalize_text(alt, strip_punctuation)
    if not needle or not nearby_text:
        # Alt made only of stripped characters can't be matched reliably
        return None
    haystack, offsets = normalize_with_offsets(nearby_text, strip_punctuation)
    position = haystack.find(needle)
    if position < 0:
        return None
    return offsets[position], offsets[position + len(needle) - 1] + 1


def build_snippet(text: str, span: tuple[int, int], context: int = 50) -> str:
    """Excerpt of ``text`` around ``span`` with the match wrapped in ``[[ ]]``."""
    start, end = span
    left = max(0, start - context)
    right = min(len(text), end + context)
    prefix = "..." if left > 0 else ""
    suffix = "..." if right < len(text) else ""
    return (
        f"{prefix}{text[left:start]}{MATCH_OPEN}{text[start:end]}{MATCH_CLOSE}"
        f"{text[end:right]}{suffix}"
    )


def advisories_for(alt: str) -> list[str]:
    """Advisory hints for alt text that still needs a human look."""
    notes: list[str] = []
    text = alt.strip()
    if len(text) < _SHORT_ALT_CHARS:
        notes.append(ADVISORY_TOO_SHORT)
    if len(text) > _LONG_ALT_CHARS:
        notes.append(ADVISORY_TOO_LONG)
    fragments = [f for f in _KEYWORD_SPLIT_RE.split(text) if f]
    if len(fragments) >= 3 and all(len(f.split()) <= 3 for f in fragments):
        notes.append(ADVISORY_KEYWORD_LIST)
    if _RANDOM_TOKEN_RE.match(text):
        notes.append(ADVISORY_RANDOM_TOKEN)
    return notes


def classify(
    candidate: ImageCandidate,
    nearby_text: str = "",
    policy: ClassificationRulePolicy | None = None,
) -> Category:
    """Pick the category for ``candidate`` and record duplicate/advisory details on it.

    Deterministic for the same inputs; the candidate's derived fields are
    reset on every call.
    """
    policy = policy or ClassificationRulePolicy()
    alt = candidate.alt.strip()
    candidate.is_duplicate_of_nearby_text = False
    candidate.match_snippet = None
    candidate.advisories = []

    if not alt:
        return Category.MISSING_ALT

    filename = is_filename_alt(alt, candidate.src, policy.strip_punctuation)
    if policy.filename_first and filename:
        return Category.FILE_NAME

    span = find_duplicate(alt, nearby_text, policy.strip_punctuation)
    if span is not None:
        candidate.is_duplicate_of_nearby_text = True
        candidate.match_snippet = build_snippet(nearby_text, span, policy.snippet_context)
        return Category.MATCHING_NEARBY_CONTENT

    if filename:
        return Category.FILE_NAME

    candidate.advisories = advisories_for(alt)
    return Category.MANUAL_CHECK
