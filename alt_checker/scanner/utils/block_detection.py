from __future__ import annotations

import re

from bs4 import BeautifulSoup

from alt_checker.scanner.errors import TargetBlockedError, TargetTypoError, TargetUnavailableError

BLOCK_STATUS_CODES = frozenset({401, 403, 429, 503})

# Element ids and inline config only CDN / WAF challenge pages carry
_CHALLENGE_MARKUP = re.compile(
    r"cf-browser-verification"
    r"|_cf_chl_opt"
    r"|px-captcha"
    r"|_incapsula_resource",
    re.IGNORECASE,
)

# Phrases of a challenge page, matched against the <title> and visible text
_CHALLENGE_PHRASES = re.compile(
    r"\bcaptcha\b"
    r"|access denied"
    r"|attention required"
    r"|checking your browser"
    r"|just a moment\.\.\."
    r"|request unsuccessful\. incapsula"
    r"|are you a robot"
    r"|verify you are (?:a )?human"
    r"|unusual traffic"
    r"|pardon our interruption"
    r"|bot detection",
    re.IGNORECASE,
)

# Challenge markers sit near the top of the document
_SCAN_LIMIT = 20_000
# Challenge pages carry little text; longer bodies are real content
_CHALLENGE_TEXT_LIMIT = 2_000
_HIDDEN_TAGS = ["script", "style", "noscript", "template"]


def _title_and_text(body: str) -> tuple[str, str]:
    soup = BeautifulSoup(body, "lxml")
    title = soup.title.get_text(" ", strip=True) if soup.title else ""
    for el in soup(_HIDDEN_TAGS):
        el.decompose()
    if soup.title:
        soup.title.decompose()
    return title, soup.get_text(" ", strip=True)


def looks_blocked(body: str | None) -> bool:
    """True when the body reads like a CAPTCHA / WAF challenge page.

    Script and style contents are ignored, so an ordinary page that loads a
    CAPTCHA widget for its forms does not match. Phrases in the visible text
    only count on short pages.
    """
    if not body:
        return False
    head = body[:_SCAN_LIMIT]
    if _CHALLENGE_MARKUP.search(head):
        return True
    title, text = _title_and_text(head)
    if _CHALLENGE_PHRASES.search(title):
        return True
    return len(text) <= _CHALLENGE_TEXT_LIMIT and _CHALLENGE_PHRASES.search(text) is not None


def check_response(status_code: int, body: str | None, url: str = "") -> bool:
    """Raise for unusable responses; for usable ones report a block-page body.

    - 401/403/429/503, or any error status with a block-page body: blocked
    - other 4xx: typo
    - other non-success statuses: transient
    """
    signature = looks_blocked(body)
    if status_code < 400:
        return signature
    if status_code in BLOCK_STATUS_CODES or signature:
        raise TargetBlockedError(f"HTTP {status_code} from {url}", status_code=status_code)
    if status_code < 500:
        raise TargetTypoError(status_code, url)
    raise TargetUnavailableError(f"HTTP {status_code} from {url}")
