"""Collect the text surrounding an element for duplicate-content checks.

The walk only needs five things from a node (``is_text``, ``is_element``,
``text_content``, ``previous_sibling``, ``next_sibling``), so it runs the same
over a parsed static document and over a rendered DOM snapshot.
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from alt_checker.scanner.policies import DEFAULT_WINDOW, WORDS, WindowPolicy

_SILENT_TAGS = {"script", "style", "template"}


class TreeNode(Protocol):
    @property
    def is_text(self) -> bool: ...

    @property
    def is_element(self) -> bool: ...

    @property
    def text_content(self) -> str: ...

    @property
    def previous_sibling(self) -> TreeNode | None: ...

    @property
    def next_sibling(self) -> TreeNode | None: ...


class SoupNode:
    """``TreeNode`` over a BeautifulSoup element."""

    __slots__ = ("_node",)

    def __init__(self, node: PageElement) -> None:
        self._node = node

    @staticmethod
    def wrap(node: PageElement | None) -> SoupNode | None:
        return SoupNode(node) if node is not None else None

    @property
    def is_text(self) -> bool:
        # Comments, doctypes and CDATA are strings too, but never rendered
        return isinstance(self._node, NavigableString) and not isinstance(
            self._node, PreformattedString
        )

    @property
    def is_element(self) -> bool:
        return isinstance(self._node, Tag)

    @property
    def text_content(self) -> str:
        if self.is_text:
            return str(self._node)
        if self.is_element and self._node.name not in _SILENT_TAGS:
            return self._node.get_text(" ")
        return ""

    @property
    def previous_sibling(self) -> SoupNode | None:
        return self.wrap(self._node.previous_sibling)

    @property
    def next_sibling(self) -> SoupNode | None:
        return self.wrap(self._node.next_sibling)


def as_tree_node(node: TreeNode | PageElement) -> TreeNode:
    if isinstance(node, PageElement):
        return SoupNode(node)
    return node


class SiblingWalker:
    """Walks sibling chains outward from a node, bounded by a ``WindowPolicy``."""

    def __init__(self, policy: WindowPolicy = DEFAULT_WINDOW) -> None:
        self.policy = policy

    def _units(self, text: str) -> int:
        if self.policy.unit == WORDS:
            return len(text.split())
        return len(text)

    def _grab(
        self, node: TreeNode, step: Callable[[TreeNode], TreeNode | None],
    ) -> list[str]:
        """Texts of successive siblings, nearest first, until the window is full."""
        chunks: list[str] = []
        collected = 0
        current = step(node)
        while current is not None and collected < self.policy.size:
            if current.is_text or current.is_element:
                text = " ".join(current.text_content.split())
                if text:
                    chunks.append(text)
                    collected += self._units(text)
            current = step(current)
        return chunks

    def preceding(self, node: TreeNode | PageElement) -> str:
        chunks = self._grab(as_tree_node(node), lambda n: n.previous_sibling)
        text = " ".join(reversed(chunks))
        if self.policy.unit == WORDS:
            words = text.split()
            return " ".join(words[-self.policy.size:]) if self.policy.size else ""
        return text[-self.policy.size:].lstrip() if self.policy.size else ""

    def following(self, node: TreeNode | PageElement) -> str:
        chunks = self._grab(as_tree_node(node), lambda n: n.next_sibling)
        text = " ".join(chunks)
        if self.policy.unit == WORDS:
            return " ".join(text.split()[: self.policy.size])
        return text[: self.policy.size].rstrip()

    def window(self, node: TreeNode | PageElement) -> str:
        """Preceding text (document order) followed by following text."""
        return " ".join(part for part in (self.preceding(node), self.following(node)) if part)


def collect_window(node: TreeNode | PageElement, policy: WindowPolicy = DEFAULT_WINDOW) -> str:
    """Original-case proximity window, used to build match snippets."""
    return SiblingWalker(policy).window(node)


def extract_nearby_text(
    node: TreeNode | PageElement, policy: WindowPolicy = DEFAULT_WINDOW,
) -> str:
    return collect_window(node, policy).lower()
