"""
fiwikt.py — Wikisanakirja (Finnish Wiktionary) layout of a Finnish term.

Wikisanakirja is regular: under the "Suomi" h2 every h3 is a part of speech
and every h4/h5 below it a section (Etymologia, Taivutus, Käännökset, ...).
The entry's own nodes hold the headword line and the definition list:

    h3 Substantiivi
      p  <b>koira</b> (10)            headword, inflection class as info
      ol <li>...</li>                 definitions, examples in a nested <dl>
      h4 Taivutus
        table.wikitable (20 rows)     declension
      h4 Käännökset
        ul                            only "englanti:" items are kept

Verbs have no conjugation table on the term page. The headword line links to
a separate appendix page (Liite:Verbitaivutus/suomi/<verb>), which is fetched
and extracted on its own.
"""

import logging
from typing import Callable, Optional

from bs4 import Tag

from finwikt.config import DialectConfig
from finwikt.definitions import fi_definition
from finwikt.diagnostics import Diagnostics
from finwikt.errors import FetchError, InputContractError, TableShapeError
from finwikt.models import Definitions, Empty, Entry, InflectionBlock, Item, Items, Section
from finwikt.nodes import (
    describe,
    first_child,
    heading_tag,
    links_in,
    normalize_text,
    parse_html,
    strip_descendants,
    tag_kind,
    text_content,
)
from finwikt.sectioner import Scope, classify_items, outer_tables, report_orphans, segment_scopes
from finwikt.tagger import extract_table, is_fi_declension_table


logger = logging.getLogger(__name__)

Fetcher = Callable[[str], str]


def headword_line(nodes: list[Tag]) -> Optional[Tag]:
    """First paragraph whose first element is bold."""
    for node in nodes:
        if tag_kind(node) == "p" and tag_kind(first_child(node)) == "b":
            return node
    return None


# =============================================================================
# Conjugation appendix
# =============================================================================


def conjugation_tables(html: str, source: str = "") -> tuple[list[InflectionBlock], Diagnostics]:
    """
    Extract the mood and nominal-form tables of a verb conjugation page.

    The page is parsed and tagged independently of the page that linked to
    it; the returned diagnostics belong to this extraction only.
    """
    diagnostics = Diagnostics(source)
    doc = parse_html(html)
    error = doc.select_one("p.error")
    if error is not None:
        diagnostics.warn(f"conjugation page error: {normalize_text(error.get_text())}")
        return [], diagnostics

    blocks = []
    for table in doc.find_all("table"):
        try:
            block = extract_table(table, "fi-conjugation", diagnostics)
        except TableShapeError:
            # layout tables share the page with the conjugation tables
            continue
        if block.morphemes:
            blocks.append(block)
    logger.debug(f"{len(blocks)} conjugation tables from {source or 'page'}")
    return blocks, diagnostics


# =============================================================================
# Entries and sections
# =============================================================================


class FiPageBuilder:
    """Builds entries and page-level sections from the nodes of one language section."""

    def __init__(self, dialect: DialectConfig, diagnostics: Diagnostics,
                 fetch: Optional[Fetcher] = None):
        self.dialect = dialect
        self.diagnostics = diagnostics
        self.fetch = fetch

    def section(self, scope: Scope) -> Optional[Section]:
        """A section under an entry; None for sections without any text."""
        subsections = [s for s in (self.section(child) for child in scope.children) if s is not None]
        if not subsections and not any(text_content(node).strip() for node in scope.nodes):
            return None
        try:
            heading = scope.label
        except InputContractError as e:
            self.diagnostics.warn(f"section skipped: {e}", describe(scope.heading))
            return None

        units = classify_items(scope.nodes, self.diagnostics, "fi", is_fi_declension_table)
        translations = self.dialect.translations
        if translations is not None and heading == translations.heading:
            units = [
                u for u in units
                if not isinstance(u, Item) or u.text.startswith(translations.keep_prefix)
            ]

        return Section(
            heading=heading,
            content=Items(tuple(units)) if units else Empty(),
            subsections=tuple(subsections),
            level=scope.level,
        )

    def definitions(self, nodes: list[Tag]):
        for node in nodes:
            if tag_kind(node) == "ol":
                items = node.find_all("li", recursive=False)
                return Definitions(tuple(
                    fi_definition(li, rank, self.dialect.primary_language)
                    for rank, li in enumerate(items, 1)
                ))
        return Empty()

    def declension_tables(self, nodes: list[Tag]) -> list[InflectionBlock]:
        blocks = []
        for node in nodes:
            for table in outer_tables(node):
                if is_fi_declension_table(table):
                    blocks.append(extract_table(table, "fi", self.diagnostics))
        return blocks

    def conjugation(self, headword: str, line: Optional[Tag]) -> list[InflectionBlock]:
        """Tables from the verb's conjugation appendix page, when the headword links to it."""
        links = self.dialect.conjugation
        if links is None or line is None:
            return []
        if not any(link.target.startswith(links.link_prefix) for link in links_in(line)):
            return []

        url = links.url_for(headword)
        if self.fetch is None:
            self.diagnostics.note("conjugation page not fetched", url)
            return []
        try:
            html = self.fetch(url)
        except FetchError as e:
            self.diagnostics.warn(f"conjugation page unavailable: {e}", url)
            return []

        blocks, sub_diagnostics = conjugation_tables(html, url)
        self.diagnostics.extend(sub_diagnostics.records)
        return blocks

    def entry(self, scope: Scope) -> Entry:
        """
        Build one part-of-speech entry.

        Raises:
            InputContractError: If the scope holds no nodes at all
        """
        category = scope.label
        if not scope.nodes and not scope.children:
            raise InputContractError(f"empty entry scope '{category}'")
        if not self.dialect.is_part_of_speech(category):
            self.diagnostics.warn(f"unknown word category {category}", describe(scope.heading))

        line = headword_line(scope.nodes)
        headword = info = ""
        if line is not None:
            headword = normalize_text(first_child(line).get_text())
            rest = strip_descendants(line, [])
            first_child(rest).decompose()
            info = normalize_text(rest.get_text())

        tables = self.declension_tables(scope.nodes) + self.conjugation(headword, line)
        subsections = [self.section(child) for child in scope.children]
        return Entry(
            heading=category,
            content=self.definitions(scope.nodes),
            subsections=tuple(s for s in subsections if s is not None),
            tables=tuple(tables),
            level=scope.level,
            category=category,
            headword=headword,
            info=info,
            links=links_in(line),
        )

    def build(self, nodes: list[Tag]) -> tuple[list[Entry], list[Section]]:
        segmentation = segment_scopes(nodes, None, self.dialect.heading_tags)
        report_orphans(segmentation.orphans, self.diagnostics)

        entries: list[Entry] = []
        sections: list[Section] = []
        for scope in segmentation.scopes:
            if heading_tag(scope.heading) in self.dialect.entry_tags:
                try:
                    entries.append(self.entry(scope))
                except InputContractError as e:
                    self.diagnostics.warn(f"entry skipped: {e}", describe(scope.heading))
            else:
                section = self.section(scope)
                if section is not None:
                    sections.append(section)
        return entries, sections


def build_page(nodes: list[Tag], dialect: DialectConfig, diagnostics: Diagnostics,
               fetch: Optional[Fetcher] = None) -> tuple[list[Entry], list[Section]]:
    return FiPageBuilder(dialect, diagnostics, fetch).build(nodes)
