"""
listing.py — building the list of Finnish terms from English Wiktionary.

Two kinds of meta-pages list terms, and neither is a superset of the other:

    Index:Finnish/a, Index:Finnish/b, ...     alphabetical indexes
    Category:Finnish_language and below       the category tree

Each page contributes terms (entry anchors) and follow-up pages (links to
other index or category pages). Both are crawled breadth first with a
visited set; the term list only ever grows and keeps first-seen order.

    terms = crawl_all(get_config().listing, fetch=download)
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from finwikt.config import ListingConfig
from finwikt.errors import FetchError
from finwikt.models import REDLINK_MARKER
from finwikt.nodes import attribute, normalize_text, parse_html


logger = logging.getLogger(__name__)

Fetcher = Callable[[str], str]
ProgressCallback = Callable[["CrawlState", str], None]


# =============================================================================
# Page parsing
# =============================================================================


def _selected_anchors(html: str, selector: str):
    if not selector:
        return []
    return parse_html(html).select(selector)


def entries_from_index(html: str, listing: ListingConfig) -> list[str]:
    """Terms listed on an index page; links to missing pages are dropped."""
    return [
        normalize_text(a.get_text())
        for a in _selected_anchors(html, listing.index_entry_selector)
        if REDLINK_MARKER not in (attribute(a, "href") or "")
    ]


def links_from_index(html: str, listing: ListingConfig) -> list[str]:
    """Other index pages linked from an index page, as absolute URLs."""
    urls = []
    for a in _selected_anchors(html, listing.index_link_selector):
        href = attribute(a, "href")
        if href:
            urls.append(absolute_url(href, listing.base_url))
    return urls


def entries_from_category(html: str, listing: ListingConfig) -> list[str]:
    """
    Terms listed on a category page.

    Missing pages and namespaced titles (Appendix:..., Template:...) are
    dropped.
    """
    terms = []
    for a in _selected_anchors(html, listing.category_entry_selector):
        if REDLINK_MARKER in (attribute(a, "href") or ""):
            continue
        text = normalize_text(a.get_text())
        if text and ":" not in text:
            terms.append(text)
    return terms


def links_from_category(html: str, listing: ListingConfig) -> list[str]:
    """Subcategory and next-page links of a category page, as absolute URLs."""
    host = _host(listing.base_url)
    urls = []
    for a in _selected_anchors(html, listing.category_link_selector):
        href = attribute(a, "href") or ""
        if href.startswith("/wiki/") or (host and host in href):
            urls.append(absolute_url(href, listing.base_url))
    return urls


def _host(base_url: str) -> str:
    return base_url.split("//", 1)[-1].rstrip("/")


def absolute_url(href: str, base_url: str) -> str:
    """
    Make a page link absolute.

        //en.wiktionary.org/wiki/X  ->  http://en.wiktionary.org/wiki/X
        /wiki/X                     ->  <base_url>/wiki/X
    """
    if href.startswith("//"):
        return "http:" + href
    if href.startswith("http://") or href.startswith("https://"):
        return href
    return base_url.rstrip("/") + href


# =============================================================================
# Crawling
# =============================================================================


@dataclass
class CrawlState:
    """Progress of one crawl; terms are append-only and de-duplicated."""

    terms: list[str] = field(default_factory=list)
    visited: set[str] = field(default_factory=set)
    pending: deque = field(default_factory=deque)
    failed: list[str] = field(default_factory=list)
    _seen: set[str] = field(default_factory=set, repr=False)

    def add_terms(self, terms: Iterable[str]) -> int:
        """Append unseen terms; returns how many were new."""
        added = 0
        for term in terms:
            if term not in self._seen:
                self._seen.add(term)
                self.terms.append(term)
                added += 1
        return added

    def enqueue(self, urls: Iterable[str]) -> int:
        added = 0
        for url in urls:
            if url not in self.visited and url not in self.pending:
                self.pending.append(url)
                added += 1
        return added


def crawl(start_urls: Iterable[str], fetch: Fetcher,
          entries: Callable[[str], list[str]], links: Callable[[str], list[str]],
          *, state: Optional[CrawlState] = None, limit: Optional[int] = None,
          progress: Optional[ProgressCallback] = None) -> CrawlState:
    """
    Visit pages breadth first, collecting terms and following links.

    Args:
        start_urls: Pages to begin with
        fetch: Returns the HTML at a URL; may raise FetchError
        entries: Terms listed on a page's HTML
        links: Follow-up page URLs found in a page's HTML
        state: State to continue from (terms are shared across crawls)
        limit: Stop once this many terms are known
        progress: Called after every page with the state and the page URL

    A page that cannot be fetched is logged and skipped.
    """
    if state is None:
        state = CrawlState()
    state.enqueue(start_urls)

    while state.pending:
        if limit is not None and len(state.terms) >= limit:
            logger.info(f"Term limit {limit} reached, {len(state.pending)} pages not visited")
            break
        url = state.pending.popleft()
        state.visited.add(url)
        try:
            html = fetch(url)
        except FetchError as e:
            logger.warning(f"{url}: {e}")
            state.failed.append(url)
            continue

        page_terms = entries(html)
        new_terms = state.add_terms(page_terms)
        new_pages = state.enqueue(links(html))
        logger.debug(
            f"{url} page entries:{len(page_terms)} new:{new_terms} "
            f"total:{len(state.terms)} new pages:{new_pages} remaining:{len(state.pending)}"
        )
        if progress is not None:
            progress(state, url)

    if limit is not None and len(state.terms) > limit:
        del state.terms[limit:]
    return state


def crawl_all(listing: ListingConfig, fetch: Fetcher, *, limit: Optional[int] = None,
              progress: Optional[ProgressCallback] = None) -> list[str]:
    """
    Terms from the category tree and the alphabetical index, in that order,
    without duplicates.
    """
    state = crawl(
        listing.category_urls, fetch,
        lambda html: entries_from_category(html, listing),
        lambda html: links_from_category(html, listing),
        limit=limit, progress=progress,
    )
    crawl(
        listing.index_urls, fetch,
        lambda html: entries_from_index(html, listing),
        lambda html: links_from_index(html, listing),
        state=state, limit=limit, progress=progress,
    )
    logger.info(
        f"{len(state.terms)} terms from {len(state.visited)} pages "
        f"({len(state.failed)} failed)"
    )
    return state.terms
