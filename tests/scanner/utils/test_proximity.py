"""Tests for the sibling-walking proximity window."""
import pytest
from bs4 import BeautifulSoup

from alt_checker.scanner.policies import CHAR_WINDOW, CHARS, WORDS, WindowPolicy
from alt_checker.scanner.utils.proximity import (
    SiblingWalker,
    SoupNode,
    collect_window,
    extract_nearby_text,
)


def _img(html: str):
    return BeautifulSoup(html, "lxml").find("img")


def test_window_joins_preceding_then_following():
    img = _img("<div><p>One two three</p><img alt='x'><p>four five</p></div>")
    assert collect_window(img) == "One two three four five"


def test_extract_nearby_text_is_lowercased():
    img = _img("<div><h2>Summer SALE</h2><img alt='x'></div>")
    assert extract_nearby_text(img) == "summer sale"


def test_text_nodes_are_included():
    img = _img("<div>Caption  text\n<img alt='x'> more   words</div>")
    assert collect_window(img) == "Caption text more words"


def test_word_window_keeps_words_nearest_the_element():
    img = _img("<div><p>a b c</p><span>d e</span><img alt='x'><p>f g h</p></div>")
    walker = SiblingWalker(WindowPolicy(WORDS, 3))
    assert walker.preceding(img) == "c d e"
    assert walker.following(img) == "f g h"


def test_word_walk_stops_once_window_is_full():
    img = _img("<div><p>far away</p><span>d e</span><img alt='x'></div>")
    walker = SiblingWalker(WindowPolicy(WORDS, 2))
    assert walker.preceding(img) == "d e"


def test_char_window():
    img = _img("<div><p>hello world</p><img alt='x'><p>abc defgh</p></div>")
    walker = SiblingWalker(WindowPolicy(CHARS, 5))
    assert walker.preceding(img) == "world"
    assert walker.following(img) == "abc d"


def test_char_window_preset():
    assert CHAR_WINDOW == WindowPolicy(CHARS, 300)


def test_isolated_element_gives_empty_window():
    img = _img("<div><img alt='x'></div>")
    assert collect_window(img) == ""


def test_comments_and_scripts_are_ignored():
    img = _img("<div><!-- hidden note --><script>var a = 1;</script><img alt='x'><p>visible</p></div>")
    assert collect_window(img) == "visible"


def test_zero_size_window_is_empty():
    img = _img("<div><p>text</p><img alt='x'><p>more</p></div>")
    assert SiblingWalker(WindowPolicy(WORDS, 0)).window(img) == ""


def test_unknown_unit_rejected():
    with pytest.raises(ValueError):
        WindowPolicy("lines", 10)


class _ListNode:
    """Minimal non-soup tree node, as a live DOM adapter would provide."""

    def __init__(self, text, is_text=True):
        self.is_text = is_text
        self.is_element = not is_text
        self.text_content = text
        self.previous_sibling = None
        self.next_sibling = None


def test_walker_accepts_any_tree_node():
    before, target, after = _ListNode("Alpha beta"), _ListNode("", is_text=False), _ListNode("gamma")
    target.previous_sibling, target.next_sibling = before, after
    assert SiblingWalker().window(target) == "Alpha beta gamma"


def test_soup_node_reports_kind():
    soup = BeautifulSoup("<div>text<b>bold</b></div>", "lxml")
    text_node = SoupNode(soup.div.contents[0])
    tag_node = SoupNode(soup.div.contents[1])
    assert text_node.is_text and not text_node.is_element
    assert tag_node.is_element and tag_node.text_content == "bold"
    assert text_node.next_sibling.text_content == "bold"
    assert tag_node.next_sibling is None
