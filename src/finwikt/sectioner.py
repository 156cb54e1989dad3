"""
sectioner.py — heading-driven sectioning of a flat node sequence.

MediaWiki renders a page body as a flat run of siblings: headings, then
paragraphs, lists and tables, then the next heading. Nesting exists only in
the heading levels. segment_scopes() rebuilds it with a stack:

    h3 Noun            Scope(h3 Noun, nodes=[p, ol], children=[
    p, ol                  Scope(h4 Declension, nodes=[div]),
    h4 Declension          Scope(h4 Synonyms, nodes=[ul])])
    div                Scope(h3 Verb, nodes=[p, ol])
    h4 Synonyms
    ul
    h3 Verb
    p, ol

A heading closes every open scope at its own level or deeper. Nodes before
the first heading belong to no scope and are returned as orphans; they are
reported, never attached.

classify_content() then decides what a scope's own nodes hold: definitions
(a paragraph immediately followed by an ordered list) or a flat list of
items and inflection tables.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from bs4 import Tag

from finwikt.diagnostics import Diagnostics
from finwikt.errors import InputContractError
from finwikt.models import (
    Content,
    ContentUnit,
    Definition,
    Definitions,
    Empty,
    InflectionBlock,
    Item,
    Items,
    Section,
)
from finwikt.nodes import (
    describe,
    element_children,
    heading_label,
    heading_level,
    heading_tag,
    is_blank,
    links_in,
    normalize_text,
    strip_descendants,
    tag_kind,
)
from finwikt.tagger import route_table


logger = logging.getLogger(__name__)

DEFAULT_HEADING_TAGS = frozenset({"h3", "h4", "h5"})
SKIPPED_TAGS = frozenset({"script", "style", "noscript"})
NOISE_TAGS = frozenset({"script", "style", "link", "meta"})
LIST_TAGS = frozenset({"ul", "ol", "dl", "dd", "div"})

Boundary = Callable[[Tag], bool]
DefinitionBuilder = Callable[[Tag, int], Definition]
ContentBuilder = Callable[[list], tuple]


# =============================================================================
# Scopes
# =============================================================================


@dataclass
class Scope:
    """A heading with the nodes it directly owns and its nested scopes."""

    heading: Tag
    level: int
    nodes: list[Tag] = field(default_factory=list)
    children: list[Scope] = field(default_factory=list)

    @property
    def label(self) -> str:
        return heading_label(self.heading)

    def all_nodes(self) -> list[Tag]:
        """Every node under this heading, nested headings included, in document order."""
        result = list(self.nodes)
        for child in self.children:
            result.append(child.heading)
            result.extend(child.all_nodes())
        return result


@dataclass
class Segmentation:
    scopes: list[Scope]
    orphans: list[Tag]


def segment_scopes(nodes: Iterable[Tag], boundary: Optional[Boundary] = None,
                   heading_tags: Iterable[str] = DEFAULT_HEADING_TAGS) -> Segmentation:
    """Partition a sibling sequence into a scope tree, stopping at the boundary."""
    heading_tags = frozenset(heading_tags)
    scopes: list[Scope] = []
    orphans: list[Tag] = []
    stack: list[Scope] = []

    for node in nodes:
        if boundary is not None and boundary(node):
            break
        if heading_tag(node) in heading_tags:
            scope = Scope(heading=node, level=heading_level(node))
            while stack and stack[-1].level >= scope.level:
                stack.pop()
            if stack:
                stack[-1].children.append(scope)
            else:
                scopes.append(scope)
            stack.append(scope)
        elif stack:
            stack[-1].nodes.append(node)
        else:
            orphans.append(node)

    return Segmentation(scopes=scopes, orphans=orphans)


def report_orphans(orphans: list[Tag], diagnostics: Diagnostics) -> None:
    if orphans:
        diagnostics.warn(
            f"{len(orphans)} orphaned nodes before the first heading",
            describe(orphans[0]),
        )


# =============================================================================
# Content classification
# =============================================================================


def plain_definition(li: Tag, rank: int) -> Definition:
    return Definition(rank=rank, text=normalize_text(li.get_text()), links=links_in(li))


def _meaningful(nodes: list[Tag]) -> list[Tag]:
    return [n for n in nodes if tag_kind(n) not in NOISE_TAGS]


def has_definitions(nodes: list[Tag]) -> bool:
    """True when the content opens with a paragraph immediately followed by an ordered list."""
    meaningful = _meaningful(nodes)
    return (
        len(meaningful) >= 2
        and tag_kind(meaningful[0]) == "p"
        and tag_kind(meaningful[1]) == "ol"
    )


def outer_tables(node: Tag) -> list[Tag]:
    """`node` itself if it is a table, else the tables inside it that no other inner table encloses."""
    if tag_kind(node) == "table":
        return [node]
    tables = []
    for table in node.find_all("table"):
        enclosing = table.find_parent("table")
        # skip tables nested in another table that is itself inside `node`
        if enclosing is None or not any(p is node for p in enclosing.parents):
            tables.append(table)
    return tables


def leaf_entries(node: Tag) -> list[Tag]:
    """<li>/<dd> descendants that hold no nested <li>/<dd>."""
    return [
        entry for entry in node.find_all(["li", "dd"])
        if entry.find(["li", "dd"]) is None
    ]


def _item(node: Tag) -> Item:
    return Item(text=normalize_text(node.get_text()), links=links_in(node))


def _route_tables(tables: list[Tag], caption: str, table_dialect: str,
                  diagnostics: Diagnostics) -> list[InflectionBlock]:
    blocks = []
    for table in tables:
        block = route_table(table, table_dialect, diagnostics)
        if block is None:
            continue
        if caption and not block.caption:
            block = dataclasses.replace(block, caption=caption)
        blocks.append(block)
    return blocks


def classify_items(nodes: Iterable[Tag], diagnostics: Diagnostics, table_dialect: str = "en",
                   inflection_table: Optional[Callable[[Tag], bool]] = None) -> list[ContentUnit]:
    """
    Turn content nodes into items and inflection blocks, in document order.

    With `inflection_table` given, only tables it accepts are tagged; other
    tables are read as text.
    """
    units: list[ContentUnit] = []
    for node in nodes:
        kind = tag_kind(node)
        if kind in SKIPPED_TAGS:
            continue
        if kind == "table" and (inflection_table is None or inflection_table(node)):
            units.extend(_route_tables([node], "", table_dialect, diagnostics))
            continue
        if is_blank(node):
            continue

        if kind == "p":
            units.append(_item(node))
        elif kind in LIST_TAGS:
            tables = outer_tables(node) if kind == "div" else []
            if inflection_table is not None:
                tables = [t for t in tables if inflection_table(t)]
            if tables:
                caption = normalize_text(strip_descendants(node, ["table"]).get_text())
                blocks = _route_tables(tables, caption, table_dialect, diagnostics)
                if blocks:
                    units.extend(blocks)
                    continue
            leaves = leaf_entries(node)
            if leaves:
                units.extend(_item(leaf) for leaf in leaves if not is_blank(leaf))
            else:
                units.append(_item(node))
        else:
            units.append(_item(node))
    return units


def classify_content(nodes: list[Tag], diagnostics: Diagnostics, table_dialect: str = "en",
                     definition_builder: DefinitionBuilder = plain_definition,
                     ) -> tuple[Content, tuple[InflectionBlock, ...]]:
    """
    Decide what a scope's own nodes hold.

    Returns the content and any inflection blocks that sit beside a
    definition list (tables after the <ol>).
    """
    if has_definitions(nodes):
        meaningful = _meaningful(nodes)
        ol = meaningful[1]
        items = [li for li in element_children(ol) if tag_kind(li) == "li"]
        definitions = tuple(definition_builder(li, rank) for rank, li in enumerate(items, 1))

        position = next(i for i, n in enumerate(nodes) if n is ol)
        rest = nodes[position + 1:]
        tables = [t for node in rest if tag_kind(node) not in SKIPPED_TAGS for t in outer_tables(node)]
        blocks = _route_tables(tables, "", table_dialect, diagnostics)
        return Definitions(definitions), tuple(blocks)

    units = classify_items(nodes, diagnostics, table_dialect)
    return (Items(tuple(units)) if units else Empty()), ()


# =============================================================================
# Sections
# =============================================================================


def scope_to_section(scope: Scope, build_content: ContentBuilder,
                     diagnostics: Diagnostics) -> Optional[Section]:
    """
    Convert a scope and its children into a Section.

    An input-contract failure drops only this scope; siblings are unaffected.
    """
    try:
        heading = scope.label
        content, tables = build_content(scope.nodes)
    except InputContractError as e:
        diagnostics.warn(f"section skipped: {e}", describe(scope.heading))
        return None

    subsections = [scope_to_section(child, build_content, diagnostics) for child in scope.children]
    return Section(
        heading=heading,
        content=content,
        subsections=tuple(s for s in subsections if s is not None),
        tables=tables,
        level=scope.level,
    )


def segment(nodes: Iterable[Tag], boundary: Optional[Boundary] = None,
            heading_tags: Iterable[str] = DEFAULT_HEADING_TAGS,
            build_content: Optional[ContentBuilder] = None,
            diagnostics: Optional[Diagnostics] = None) -> list[Section]:
    """
    Partition a sibling sequence into a section tree.

    Never raises on malformed input: orphaned nodes, unknown tables and
    unusable sections are recorded on `diagnostics` and skipped.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()
    if build_content is None:
        def build_content(scope_nodes):
            return classify_content(scope_nodes, diagnostics)

    segmentation = segment_scopes(nodes, boundary, heading_tags)
    report_orphans(segmentation.orphans, diagnostics)

    sections = [scope_to_section(scope, build_content, diagnostics) for scope in segmentation.scopes]
    return [s for s in sections if s is not None]
