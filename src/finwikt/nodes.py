"""
nodes.py — read-only navigation over a parsed HTML tree.

The extractor never walks BeautifulSoup objects directly; it goes through the
small set of primitives below. All of them treat the tree as read-only: when
text has to be read without some descendants (footnote markers, edit links),
the subtree is cloned first and the clone is pruned.

Only element nodes take part in sibling navigation; whitespace strings
between elements are skipped.
"""

from __future__ import annotations

import copy
import re
from typing import Iterable, Iterator, Optional

from bs4 import BeautifulSoup, Tag

from finwikt.errors import InputContractError
from finwikt.models import Link


HTML_PARSER = "html.parser"

_HEADING_RE = re.compile(r"^h([1-6])$")
_WS_RE = re.compile(r"\s+")


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML document or fragment."""
    return BeautifulSoup(html, HTML_PARSER)


def content_root(doc: BeautifulSoup) -> Tag:
    """The element whose children are the page's top-level content nodes."""
    root = doc.select_one("div.mw-parser-output")
    if root is not None:
        return root
    return doc.body if doc.body is not None else doc


def root_nodes(doc: BeautifulSoup) -> list[Tag]:
    return [child for child in content_root(doc).children if isinstance(child, Tag)]


# =============================================================================
# Primitives
# =============================================================================


def tag_kind(node) -> str:
    """Lower-case tag name, or "" for anything that is not an element."""
    if isinstance(node, Tag):
        return (node.name or "").lower()
    return ""


def text_content(node) -> str:
    if node is None:
        return ""
    return node.get_text()


def normalize_text(text: str) -> str:
    """Drop carriage returns and collapse whitespace runs to single spaces."""
    return _WS_RE.sub(" ", text.replace("\r", "")).strip()


def first_child(node: Tag) -> Optional[Tag]:
    for child in node.children:
        if isinstance(child, Tag):
            return child
    return None


def next_sibling(node: Tag) -> Optional[Tag]:
    for sibling in node.next_siblings:
        if isinstance(sibling, Tag):
            return sibling
    return None


def siblings_from(node: Optional[Tag]) -> Iterator[Tag]:
    """Yield `node` and every following element sibling."""
    while node is not None:
        yield node
        node = next_sibling(node)


def element_children(node: Tag) -> list[Tag]:
    return [child for child in node.children if isinstance(child, Tag)]


def children_matching(node: Tag, selector: str) -> list[Tag]:
    """Descendants of `node` matching a CSS selector, in document order."""
    return node.select(selector)


def attribute(node: Tag, name: str) -> Optional[str]:
    value = node.get(name)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def has_class(node, name: str) -> bool:
    if not isinstance(node, Tag):
        return False
    return name in (node.get("class") or [])


def clone_subtree(node: Tag) -> Tag:
    """Detached deep copy of `node`; changes to it never reach the source tree."""
    return copy.copy(node)


def strip_descendants(node: Tag, selectors: Iterable[str]) -> Tag:
    """Clone `node` and remove every descendant matching any selector."""
    clone = clone_subtree(node)
    for selector in selectors:
        for unwanted in clone.select(selector):
            unwanted.decompose()
    return clone


def is_blank(node: Tag) -> bool:
    return not text_content(node).strip()


def matches(node, selector: str) -> bool:
    """True when `node` itself matches a CSS selector."""
    return isinstance(node, Tag) and node.css.match(selector)


# =============================================================================
# Headings
# =============================================================================


def heading_tag(node) -> Optional[str]:
    """
    The heading tag a node stands for, or None.

    Newer MediaWiki output wraps headings as
    <div class="mw-heading mw-heading3"><h3>...</h3></div>; the wrapper counts
    as the heading it contains.
    """
    kind = tag_kind(node)
    if _HEADING_RE.match(kind):
        return kind
    if kind == "div" and has_class(node, "mw-heading"):
        for child in element_children(node):
            if _HEADING_RE.match(tag_kind(child)):
                return tag_kind(child)
    return None


def heading_level(node) -> Optional[int]:
    tag = heading_tag(node)
    return int(tag[1]) if tag else None


def heading_label(node) -> str:
    """
    The label of a heading node.

    Older markup keeps the label in span.mw-headline, next to an [edit] link;
    newer markup puts it directly in the hN element.
    """
    if heading_tag(node) is None:
        raise InputContractError(f"not a heading: {describe(node)}")
    headline = node.select_one("span.mw-headline")
    if headline is not None:
        return normalize_text(headline.get_text())
    clean = strip_descendants(node, [".mw-editsection"])
    return normalize_text(clean.get_text())


# =============================================================================
# Links and descriptions
# =============================================================================


def link_from(anchor: Tag) -> Link:
    return Link(
        display_text=normalize_text(anchor.get_text()),
        target=anchor.get("href", ""),
        title=anchor.get("title", "") or "",
    )


def links_in(node: Optional[Tag]) -> tuple[Link, ...]:
    """Every anchor with an href inside `node`, in document order."""
    if node is None:
        return ()
    return tuple(link_from(a) for a in node.find_all("a", href=True))


def describe(node, limit: int = 60) -> str:
    """Short one-line label for a node, used in diagnostics."""
    if not isinstance(node, Tag):
        return repr(node)[:limit]
    attrs = []
    if node.get("id"):
        attrs.append(f'id="{node["id"]}"')
    if node.get("class"):
        attrs.append(f'class="{" ".join(node["class"])}"')
    opening = f"<{node.name}{' ' if attrs else ''}{' '.join(attrs)}>"
    text = normalize_text(node.get_text())
    if len(text) > limit:
        text = text[:limit] + "..."
    return f"{opening} {text}".rstrip()
