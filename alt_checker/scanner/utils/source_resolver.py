"""Pick the real image URL of an element across lazy-load conventions.

Works on a plain attribute getter so the same code serves BeautifulSoup
tags and attribute maps coming out of a live page.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Callable
from urllib.parse import urljoin

logger = logging.getLogger(__name__)

AttributeGetter = Callable[[str], "str | None"]

# First non-empty attribute wins
SOURCE_ATTRIBUTES: tuple[str, ...] = (
    "data-srcset",
    "srcset",
    "data-src",
    "data-lazy",
    "data-original",
    "data-landscape-url",
    "data-portrait-url",
    "src",
)

# A <picture> <source> only carries candidate sets, never a plain src
PICTURE_SOURCE_ATTRIBUTES: tuple[str, ...] = (
    "data-srcset",
    "srcset",
    "data-landscape-url",
    "data-portrait-url",
)

_SIZE_TEMPLATE_RE = re.compile(r"\{width\}x\{height\}", re.IGNORECASE)
_CSS_URL_RE = re.compile(r"""url\(\s*["']?(.*?)["']?\s*\)""", re.IGNORECASE)

DEFAULT_SIZE_TOKEN = "600x"


def choose_raw_source(
    get_attr: AttributeGetter, attributes: tuple[str, ...] = SOURCE_ATTRIBUTES,
) -> str:
    """Return the first usable token among the lazy-load attributes.

    Candidate sets (``srcset``) keep only their first whitespace-delimited
    token. Commas are left alone: some CDN URLs carry them in the path.
    """
    for name in attributes:
        value = get_attr(name)
        if isinstance(value, list):
            # bs4 may hand back multi-valued attributes as lists
            value = " ".join(value)
        if value and value.strip():
            return value.strip().split()[0]
    return ""


def normalize_size_template(src: str) -> str:
    return _SIZE_TEMPLATE_RE.sub(DEFAULT_SIZE_TOKEN, src)


def resolve_url(raw: str, base_url: str) -> str:
    """Resolve ``raw`` against ``base_url``; malformed input comes back as-is."""
    if not raw:
        return ""
    try:
        return urljoin(base_url, raw)
    except ValueError:
        logger.debug("Could not resolve %r against %s", raw, base_url)
        return raw


def resolve_source(
    get_attr: AttributeGetter, base_url: str, attributes: tuple[str, ...] = SOURCE_ATTRIBUTES,
) -> str:
    return resolve_url(normalize_size_template(choose_raw_source(get_attr, attributes)), base_url)


def background_image_url(style: str | None, base_url: str) -> str:
    """Extract and resolve the ``url(...)`` of an inline background declaration."""
    match = _CSS_URL_RE.search(style or "")
    if match is None:
        return ""
    return resolve_url(normalize_size_template(match.group(1).strip()), base_url)
