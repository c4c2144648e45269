"""Image candidate extraction from an HTML document.

A single public function that accepts a parsed document + page URL and
returns one ``ImageCandidate`` per image-like element, before any filtering.
Used unchanged by the static pass and on the rendered DOM snapshot.
"""
from __future__ import annotations

import logging

from bs4 import BeautifulSoup
from bs4.element import Tag

from alt_checker.scanner.base import ImageCandidate
from alt_checker.scanner.utils.placeholder_filter import is_too_small
from alt_checker.scanner.utils.source_resolver import (
    PICTURE_SOURCE_ATTRIBUTES,
    background_image_url,
    resolve_source,
    resolve_url,
)

logger = logging.getLogger(__name__)

IMAGE_SELECTOR = 'img, picture > source, [style*="background-image"]'


def document_base_url(soup: BeautifulSoup, page_url: str) -> str:
    """Page URL adjusted by a ``<base href>`` when the document declares one."""
    base = soup.find("base", href=True)
    if base is None:
        return page_url
    return resolve_url(base["href"].strip(), page_url) or page_url


def _attr_getter(el: Tag):
    return lambda name: el.get(name)


def _group_alt(el: Tag) -> str:
    """Alt text of the ``<img>`` child of a ``<source>``'s ``<picture>``."""
    parent = el.parent
    if parent is None:
        return ""
    img = parent.find("img", recursive=False)
    if img is None:
        return ""
    return img.get("alt") or ""


def extract_candidates(
    soup: BeautifulSoup, page_url: str, tiny_area: int = 9,
) -> list[ImageCandidate]:
    base_url = document_base_url(soup, page_url)
    candidates: list[ImageCandidate] = []

    for el in soup.select(IMAGE_SELECTOR):
        tag = (el.name or "").lower()
        too_small = False
        if tag == "img":
            src = resolve_source(_attr_getter(el), base_url)
            alt = el.get("alt") or ""
            too_small = is_too_small(el.get("width"), el.get("height"), tiny_area)
        elif tag == "source":
            src = resolve_source(_attr_getter(el), base_url, PICTURE_SOURCE_ATTRIBUTES)
            alt = _group_alt(el)
        else:
            tag = "background"
            src = background_image_url(el.get("style"), base_url)
            alt = ""

        candidates.append(
            ImageCandidate(src=src, alt=alt.strip(), too_small=too_small, tag=tag, node=el)
        )

    logger.debug("Extracted %d image candidates from %s", len(candidates), page_url)
    return candidates
