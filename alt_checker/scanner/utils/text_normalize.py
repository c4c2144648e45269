from __future__ import annotations

import re

_KEEP_RE = re.compile(r"[a-z0-9 ]")


def normalize_with_offsets(text: str, strip_punctuation: bool = True) -> tuple[str, list[int]]:
    """Normalize ``text`` for comparison and map each output char to its source index.

    Lowercases, collapses whitespace runs to one space and, when
    ``strip_punctuation`` is set, drops everything outside ``[a-z0-9 ]``.
    """
    out: list[str] = []
    offsets: list[int] = []
    for index, char in enumerate(text):
        if char.isspace():
            if out and out[-1] != " ":
                out.append(" ")
                offsets.append(index)
            continue
        for lowered in char.lower():
            if strip_punctuation and not _KEEP_RE.match(lowered):
                continue
            out.append(lowered)
            offsets.append(index)
    while out and out[-1] == " ":
        out.pop()
        offsets.pop()
    return "".join(out), offsets


def normalize_text(text: str, strip_punctuation: bool = True) -> str:
    return normalize_with_offsets(text, strip_punctuation)[0]
