"""
page.py — extraction of one language section from a Wiktionary page.

    doc = parse_html(html)
    result = extract_page(root_nodes(doc), "Finnish", term="koira")

The language section is the run of top-level nodes after the h2 naming the
language, up to the next h2 for another language or a stop tag. Everything
inside it is handed to the dialect's page builder.
"""

import html as html_lib
import logging
from typing import Callable, Optional, Sequence, Union

from bs4 import Tag

from finwikt.config import DialectConfig, dialect_for_marker, get_dialect
from finwikt.diagnostics import Diagnostics
from finwikt.dialects import builder_for
from finwikt.models import PageResult
from finwikt.nodes import (
    heading_label,
    heading_tag,
    matches,
    normalize_text,
    parse_html,
    root_nodes,
    tag_kind,
)


logger = logging.getLogger(__name__)

ERROR_PAGE = '<html><head></head><body><p class="error">{message}</p></body></html>'

Fetcher = Callable[[str], str]


def error_page(message: str) -> str:
    """A minimal page standing in for one that could not be retrieved."""
    return ERROR_PAGE.format(message=html_lib.escape(message))


def is_language_heading(node, language_marker: str) -> bool:
    return (
        heading_tag(node) == "h2"
        and language_marker.lower() in heading_label(node).lower()
    )


def make_boundary(language_marker: str, stop_tags: Sequence[str] = ("noscript",)):
    """End-of-section predicate: another language's h2, or a stop tag."""
    marker = language_marker.lower()
    stops = frozenset(t.lower() for t in stop_tags)

    def boundary(node) -> bool:
        if heading_tag(node) == "h2" and marker not in heading_label(node).lower():
            return True
        return tag_kind(node) in stops

    return boundary


def language_section(nodes: Sequence[Tag], start: int, language_marker: str,
                     dialect: DialectConfig) -> list[Tag]:
    """Nodes after nodes[start] up to the boundary, minus skipped boxes."""
    boundary = make_boundary(language_marker, dialect.stop_tags)
    section = []
    for node in nodes[start + 1:]:
        if boundary(node):
            break
        if any(matches(node, selector) for selector in dialect.skip_selectors):
            continue
        if is_language_heading(node, language_marker):
            # a repeated heading for the same language does not end the section
            continue
        section.append(node)
    return section


def _resolve_dialect(dialect: Union[DialectConfig, str, None], language_marker: str) -> DialectConfig:
    if dialect is None:
        return dialect_for_marker(language_marker)
    if isinstance(dialect, str):
        return get_dialect(dialect)
    return dialect


def extract_page(root_nodes: Sequence[Tag], language_marker: str, *, term: str = "",
                 dialect: Union[DialectConfig, str, None] = None,
                 fetch: Optional[Fetcher] = None) -> PageResult:
    """
    Extract the entries of one language from a page's top-level nodes.

    Args:
        root_nodes: Top-level content nodes, in document order
        language_marker: Text identifying the language's h2 ("Finnish", "Suomi")
        term: The page's term, copied into the result
        dialect: Dialect config or code; defaults to the one using this marker
        fetch: Callable returning the HTML at a URL, for linked sub-pages

    Recoverable problems end up in the result's diagnostics; nothing is raised
    for malformed pages.
    """
    dialect = _resolve_dialect(dialect, language_marker)
    diagnostics = Diagnostics(f"{dialect.code}:{term}" if term else dialect.code)
    nodes = [n for n in root_nodes if isinstance(n, Tag)]

    starts = [i for i, node in enumerate(nodes) if is_language_heading(node, language_marker)]
    if not starts:
        diagnostics.note(f"no {language_marker} section")
        return PageResult(
            term=term,
            diagnostics=diagnostics.freeze(),
            dialect=dialect.code,
            language=language_marker,
        )
    if len(starts) > 1:
        diagnostics.warn(f"{len(starts)} {language_marker} headings, reading on from the first")

    section = language_section(nodes, starts[0], language_marker, dialect)
    build = builder_for(dialect.code)
    entries, sections = build(section, dialect, diagnostics, fetch)

    logger.info(
        f"{dialect.code}:{term or '?'}: {len(entries)} entries, "
        f"{len(sections)} sections, {len(diagnostics.warnings)} warnings"
    )
    return PageResult(
        term=term,
        entries=tuple(entries),
        sections=tuple(sections),
        diagnostics=diagnostics.freeze(),
        dialect=dialect.code,
        language=language_marker,
    )


def extract_html(html: str, dialect: Union[DialectConfig, str] = "en", *,
                 fetch: Optional[Fetcher] = None) -> PageResult:
    """
    Parse a whole page and extract its entries.

    An error page (<p class="error">) gives an empty result with `error` set.
    """
    dialect = _resolve_dialect(dialect, "")
    doc = parse_html(html)

    error = doc.select_one("p.error")
    if error is not None:
        message = normalize_text(error.get_text())
        diagnostics = Diagnostics(dialect.code)
        diagnostics.note(f"error page: {message}")
        return PageResult(
            term="",
            diagnostics=diagnostics.freeze(),
            dialect=dialect.code,
            language=dialect.language_marker,
            error=message,
        )

    h1 = doc.select_one("h1#firstHeading") or doc.find("h1")
    term = normalize_text(h1.get_text()) if h1 is not None else ""
    return extract_page(
        root_nodes(doc),
        dialect.language_marker,
        term=term,
        dialect=dialect,
        fetch=fetch,
    )
