"""
models.py — the typed tree extracted from a dictionary page.

Every object here is built once during a single walk over a page and never
mutated afterwards, so all dataclasses are frozen and use tuples for their
ordered children.

Shape of a result:

    PageResult
      ├─ entries: Entry (a Section bound to a part of speech)
      │    ├─ content: Definitions | Items | Empty
      │    ├─ tables: InflectionBlock (tables beside a definition list)
      │    └─ subsections: Section ...
      ├─ sections: Section (page-level, e.g. Etymology, Pronunciation)
      └─ diagnostics: Diagnostic
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union


REDLINK_MARKER = "redlink=1"


@dataclass(frozen=True)
class Link:
    """An anchor collected from the page."""

    display_text: str
    target: str
    title: str = ""

    @property
    def is_redlink(self) -> bool:
        """True for links to pages that do not exist yet."""
        return REDLINK_MARKER in self.target


@dataclass(frozen=True)
class Item:
    """Unclassified leaf of informational content."""

    text: str
    links: tuple[Link, ...] = ()


@dataclass(frozen=True)
class Example:
    """
    A usage example: the sentence in the described language and its gloss.

    Which language is primary depends on the dialect that produced it; the
    language codes record that explicitly. `note` holds parenthetical
    annotations lifted out of the primary sentence (see examples.bracket_split).
    """

    primary_text: str
    secondary_text: str = ""
    note: str = ""
    links: tuple[Link, ...] = ()
    secondary_links: tuple[Link, ...] = ()
    primary_language: str = ""
    secondary_language: str = ""


@dataclass(frozen=True)
class Note:
    """A definition note that is not an example (often 'a = b' usage hints)."""

    text: str
    primary_text: str = ""
    secondary_text: str = ""
    links: tuple[Link, ...] = ()
    secondary_links: tuple[Link, ...] = ()


@dataclass(frozen=True)
class Definition:
    rank: int
    text: str
    examples: tuple[Example, ...] = ()
    notes: tuple[Note, ...] = ()
    links: tuple[Link, ...] = ()


@dataclass(frozen=True)
class Morpheme:
    """A surface form tagged with ordered grammatical attributes."""

    surface_form: str
    attributes: tuple[str, ...] = ()
    links: tuple[Link, ...] = ()


@dataclass(frozen=True)
class InflectionBlock:
    """Morphemes read from one inflection table."""

    shape: str
    morphemes: tuple[Morpheme, ...] = ()
    caption: str = ""


# Content units inside an Items content
ContentUnit = Union[Item, InflectionBlock]


@dataclass(frozen=True)
class Definitions:
    definitions: tuple[Definition, ...]


@dataclass(frozen=True)
class Items:
    units: tuple[ContentUnit, ...]

    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(u for u in self.units if isinstance(u, Item))

    @property
    def blocks(self) -> tuple[InflectionBlock, ...]:
        return tuple(u for u in self.units if isinstance(u, InflectionBlock))


@dataclass(frozen=True)
class Empty:
    pass


Content = Union[Definitions, Items, Empty]


def content_blocks(content: Content) -> tuple[InflectionBlock, ...]:
    """Inflection blocks carried directly by a content value."""
    if isinstance(content, Items):
        return content.blocks
    if isinstance(content, (Definitions, Empty)):
        return ()
    raise TypeError(f"not a content value: {content!r}")


@dataclass(frozen=True)
class Section:
    heading: str
    content: Content = field(default_factory=Empty)
    subsections: tuple[Section, ...] = ()
    tables: tuple[InflectionBlock, ...] = ()
    level: int = 0

    @property
    def definitions(self) -> tuple[Definition, ...]:
        if isinstance(self.content, Definitions):
            return self.content.definitions
        return ()

    @property
    def items(self) -> tuple[Item, ...]:
        if isinstance(self.content, Items):
            return self.content.items
        return ()

    def walk(self) -> Iterator[Section]:
        """Yield this section and every nested subsection, depth first."""
        yield self
        for sub in self.subsections:
            yield from sub.walk()

    def blocks(self) -> Iterator[InflectionBlock]:
        """Every inflection block in this section's tree, in document order."""
        for section in self.walk():
            yield from section.tables
            yield from content_blocks(section.content)

    def inflections(self) -> tuple[Morpheme, ...]:
        return tuple(m for block in self.blocks() for m in block.morphemes)


@dataclass(frozen=True)
class Entry(Section):
    """A top-level section bound to a lexical category."""

    category: str = ""
    headword: str = ""
    info: str = ""
    links: tuple[Link, ...] = ()
    parent_heading: Optional[str] = None


class Severity(str, Enum):
    NOTE = "note"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    message: str
    context: str = ""


@dataclass(frozen=True)
class PageResult:
    term: str
    entries: tuple[Entry, ...] = ()
    sections: tuple[Section, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    dialect: str = ""
    language: str = ""
    error: str = ""

    @property
    def has_language(self) -> bool:
        """True when the page had a section for the requested language."""
        return bool(self.entries or self.sections)

    @property
    def is_empty(self) -> bool:
        """True for an error page or a page that yielded no content."""
        return bool(self.error) or not (self.entries or self.sections)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity is Severity.WARNING)
