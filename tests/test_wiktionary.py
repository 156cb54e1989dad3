"""Tests for combining the results of several Wiktionary editions."""

from finwikt.models import Entry, Item, Items, PageResult, Severity
from finwikt.page import error_page
from finwikt.wiktionary import combine, get_term


class TestGetTerm:

    def test_editions_combined_in_order(self, fi_page, en_page):
        pages = {"fi": fi_page, "en": en_page}
        requested = []

        def page_fetch(term, dialect):
            requested.append((term, dialect))
            return pages[dialect]

        result = get_term("koira", page_fetch=page_fetch, fetch=None)
        assert requested == [("koira", "fi"), ("koira", "en")]
        assert result.dialect == "fi+en"
        assert result.language == "Suomi"
        assert [e.category for e in result.entries] == ["Substantiivi", "Verbi", "Noun"]
        assert [s.heading for s in result.sections] == ["Etymology"]

    def test_single_edition(self, en_page):
        result = get_term("koira", ("en",), page_fetch=lambda term, dialect: en_page, fetch=None)
        assert result.dialect == "en"
        assert [e.category for e in result.entries] == ["Noun"]

    def test_missing_edition_keeps_diagnostics(self, en_page):
        pages = {"fi": error_page("404:Not Found"), "en": en_page}
        result = get_term("koira", page_fetch=lambda term, dialect: pages[dialect], fetch=None)
        assert [e.category for e in result.entries] == ["Noun"]
        assert result.language == "Finnish"
        assert (Severity.NOTE, "error page: 404:Not Found") in [
            (d.severity, d.message) for d in result.diagnostics
        ]


class TestCombine:

    def test_nothing_found(self):
        result = combine("koira", [PageResult(term=""), PageResult(term="koira", dialect="en")])
        assert result.term == "koira"
        assert result.entries == ()
        assert not result.has_language

    def test_untitled_page_with_entries_kept(self):
        """A page without a title heading still contributes what it found."""
        noun = Entry("Noun", Items((Item("dog"),)), category="Noun")
        result = combine("koira", [PageResult(term="", entries=(noun,), dialect="en", language="Finnish")])
        assert result.term == "koira"
        assert result.entries == (noun,)
        assert result.language == "Finnish"

    def test_error_results_contribute_nothing(self):
        noun = Entry("Noun", Items((Item("dog"),)), category="Noun")
        failed = PageResult(term="", entries=(noun,), error="503:Service Unavailable")
        assert failed.is_empty
        assert combine("koira", [failed]).entries == ()


class TestPageResult:

    def test_empty_without_content(self):
        assert PageResult(term="koira").is_empty

    def test_content_without_term_is_not_empty(self):
        noun = Entry("Noun", category="Noun")
        assert not PageResult(term="", entries=(noun,)).is_empty
