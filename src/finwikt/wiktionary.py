"""
wiktionary.py — one result per term across Wiktionary editions.

    result = get_term("koira")            # fi entries first, then en
    result = get_term("koira", ("en",))   # English Wiktionary only
"""

import logging
from typing import Callable, Optional, Sequence

from finwikt.fetch import download, fetch_term_page
from finwikt.models import PageResult
from finwikt.page import extract_html


logger = logging.getLogger(__name__)

DEFAULT_DIALECTS = ("fi", "en")


def combine(term: str, results: Sequence[PageResult]) -> PageResult:
    """
    Concatenate the entries and sections of several results.

    Only results that found the language contribute entries; diagnostics of
    every result are kept.
    """
    found = [r for r in results if not r.is_empty]
    return PageResult(
        term=next((r.term for r in found if r.term), term),
        entries=tuple(e for r in found for e in r.entries),
        sections=tuple(s for r in found for s in r.sections),
        diagnostics=tuple(d for r in results for d in r.diagnostics),
        dialect="+".join(r.dialect for r in results),
        language=next((r.language for r in found), ""),
    )


def get_term(term: str, dialects: Sequence[str] = DEFAULT_DIALECTS, *,
             page_fetch: Optional[Callable[[str, str], str]] = None,
             fetch: Optional[Callable[[str], str]] = download) -> PageResult:
    """
    Extract a term from each requested edition and combine the results.

    Args:
        term: The term to look up
        dialects: Edition codes, in the order their entries are wanted
        page_fetch: Returns a term page's HTML for (term, dialect);
                    defaults to fetch_term_page
        fetch: Returns the HTML at a URL, for linked sub-pages
    """
    page_fetch = page_fetch or fetch_term_page
    results = []
    for code in dialects:
        html = page_fetch(term, code)
        results.append(extract_html(html, code, fetch=fetch))
    combined = combine(term, results)
    logger.info(f"{term}: {len(combined.entries)} entries from {', '.join(dialects)}")
    return combined
