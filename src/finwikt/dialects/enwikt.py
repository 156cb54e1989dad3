"""
enwikt.py — English Wiktionary layout of a Finnish term.

Under the "Finnish" h2 the English Wiktionary puts h3 sections. On a page
with a single etymology the h3s are the parts of speech themselves:

    h2 Finnish
      h3 Etymology, h3 Pronunciation
      h3 Noun             <- entry
        h4 Declension, h4 Synonyms

With several etymologies every part of speech moves one level down:

    h2 Finnish
      h3 Etymology 1
        h4 Noun           <- entry, parent_heading "Etymology 1"
          h5 Declension
      h3 Etymology 2
        h4 Verb           <- entry, parent_heading "Etymology 2"

There is no reliable way to tell the two apart from structure alone, so the
second layout is handled explicitly (nested_categories in the dialect
configuration).
"""

import dataclasses
import logging
from typing import Optional

from bs4 import Tag

from finwikt.config import DialectConfig
from finwikt.definitions import en_definition
from finwikt.diagnostics import Diagnostics
from finwikt.errors import InputContractError
from finwikt.models import Definitions, Empty, Entry, Section
from finwikt.nodes import describe, links_in, normalize_text, strip_descendants, tag_kind
from finwikt.sectioner import (
    Scope,
    classify_content,
    report_orphans,
    scope_to_section,
    segment_scopes,
)


logger = logging.getLogger(__name__)

HEADWORD_SELECTORS = ("strong.headword", "b")


def headword_line(nodes: list[Tag]) -> Optional[Tag]:
    """The paragraph carrying the headword, if any."""
    for node in nodes:
        if tag_kind(node) == "p" and any(node.select_one(s) for s in HEADWORD_SELECTORS):
            return node
    return None


def headword_parts(line: Optional[Tag]) -> tuple[str, str]:
    """Headword text and the rest of the headword line (gender, inflection class, ...)."""
    if line is None:
        return "", ""
    for selector in HEADWORD_SELECTORS:
        head = line.select_one(selector)
        if head is not None:
            headword = normalize_text(head.get_text())
            rest = strip_descendants(line, [selector])
            return headword, normalize_text(rest.get_text())
    return "", normalize_text(line.get_text())


class EnPageBuilder:
    """Builds entries and page-level sections from the nodes of one language section."""

    def __init__(self, dialect: DialectConfig, diagnostics: Diagnostics):
        self.dialect = dialect
        self.diagnostics = diagnostics

    def build_content(self, nodes):
        def definition(li, rank):
            return en_definition(
                li, rank, self.diagnostics,
                self.dialect.primary_language, self.dialect.secondary_language,
            )

        return classify_content(nodes, self.diagnostics, "en", definition)

    def section(self, scope: Scope) -> Optional[Section]:
        return scope_to_section(scope, self.build_content, self.diagnostics)

    def is_category(self, section: Section) -> bool:
        return (
            self.dialect.is_part_of_speech(section.heading)
            or isinstance(section.content, Definitions)
        )

    def entry(self, scope: Scope, section: Section, parent_heading: Optional[str] = None) -> Entry:
        """
        Promote a category section to an Entry.

        Raises:
            InputContractError: If the scope holds no nodes at all
        """
        if not scope.nodes and not scope.children:
            raise InputContractError(f"empty entry scope '{section.heading}'")
        line = headword_line(scope.nodes)
        headword, info = headword_parts(line)
        fields = {f.name: getattr(section, f.name) for f in dataclasses.fields(Section)}
        return Entry(
            **fields,
            category=section.heading,
            headword=headword,
            info=info,
            links=links_in(line),
            parent_heading=parent_heading,
        )

    def build(self, nodes: list[Tag]) -> tuple[list[Entry], list[Section]]:
        segmentation = segment_scopes(nodes, None, self.dialect.heading_tags)
        report_orphans(segmentation.orphans, self.diagnostics)

        entries: list[Entry] = []
        sections: list[Section] = []
        for scope in segmentation.scopes:
            try:
                heading = scope.label
                content, tables = self.build_content(scope.nodes)
            except InputContractError as e:
                self.diagnostics.warn(f"section skipped: {e}", describe(scope.heading))
                continue
            children = [(child, self.section(child)) for child in scope.children]
            children = [(child, sub) for child, sub in children if sub is not None]
            section = Section(
                heading=heading,
                content=content,
                subsections=tuple(sub for _, sub in children),
                tables=tables,
                level=scope.level,
            )

            if self.is_category(section):
                self.add_entry(entries, scope, section)
            elif self.dialect.nested_categories and any(self.is_category(sub) for _, sub in children):
                kept = []
                for child, sub in children:
                    if self.is_category(sub):
                        self.add_entry(entries, child, sub, parent_heading=heading)
                    else:
                        kept.append(sub)
                remainder = dataclasses.replace(section, subsections=tuple(kept))
                if kept or not isinstance(content, Empty) or tables:
                    sections.append(remainder)
            else:
                sections.append(section)

        logger.debug(f"{len(entries)} entries, {len(sections)} sections")
        return entries, sections

    def add_entry(self, entries: list[Entry], scope: Scope, section: Section,
                  parent_heading: Optional[str] = None) -> None:
        try:
            entries.append(self.entry(scope, section, parent_heading))
        except InputContractError as e:
            self.diagnostics.warn(f"entry skipped: {e}", describe(scope.heading))


def build_page(nodes: list[Tag], dialect: DialectConfig, diagnostics: Diagnostics,
               fetch=None) -> tuple[list[Entry], list[Section]]:
    return EnPageBuilder(dialect, diagnostics).build(nodes)
