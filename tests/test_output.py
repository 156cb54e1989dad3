"""Tests for JSON serialization of extraction results."""

import orjson

from finwikt.models import Diagnostic, Empty, Entry, Item, Items, PageResult, Section, Severity
from finwikt.output import dumps, to_dict, write_jsonl
from finwikt.page import extract_html


class TestToDict:

    def test_content_kinds(self, en_page):
        data = orjson.loads(dumps(extract_html(en_page, "en")))
        noun = data["entries"][0]
        assert noun["content"]["kind"] == "definitions"
        assert noun["content"]["definitions"][0]["text"] == "dog"
        declension, synonyms = noun["subsections"]
        assert declension["content"]["kind"] == "items"
        assert declension["content"]["units"][0]["kind"] == "table"
        assert declension["content"]["units"][0]["shape"] == "noun_declension"
        first = synonyms["content"]["units"][0]
        assert (first["kind"], first["text"]) == ("item", "hauva")
        assert first["links"][0]["target"] == "/wiki/hauva"

    def test_empty_content(self):
        assert to_dict(Section("Anagrams")) == {
            "heading": "Anagrams",
            "content": {"kind": "empty"},
            "subsections": [],
            "tables": [],
            "level": 0,
        }

    def test_entry_fields_and_severity(self):
        result = PageResult(
            term="koira",
            entries=(Entry("Noun", Items((Item("x"),)), category="Noun"),),
            diagnostics=(Diagnostic(Severity.WARNING, "unknown table"),),
        )
        data = to_dict(result)
        assert data["entries"][0]["category"] == "Noun"
        assert data["entries"][0]["parent_heading"] is None
        assert data["diagnostics"] == [{"severity": "warning", "message": "unknown table", "context": ""}]

    def test_plain_values(self):
        assert to_dict(Empty()) == {"kind": "empty"}
        assert to_dict(("a", 1)) == ["a", 1]


class TestDumps:

    def test_indent_and_sorted_keys(self):
        raw = dumps(PageResult(term="koira"), indent=True, sort_keys=True)
        assert raw.startswith(b"{\n  ")
        keys = list(orjson.loads(raw))
        assert keys == sorted(keys)

    def test_non_ascii_kept(self):
        assert "pidetty nelijälkainen".encode("utf-8") in dumps(
            PageResult(term="pidetty nelijälkainen")
        )


class TestWriteJsonl:

    def test_one_line_per_result(self, temp_dir):
        path = temp_dir / "out" / "terms.jsonl"
        count = write_jsonl([PageResult(term="koira"), PageResult(term="kissa")], path)
        assert count == 2
        lines = path.read_bytes().splitlines()
        assert [orjson.loads(line)["term"] for line in lines] == ["koira", "kissa"]

    def test_empty_input(self, temp_dir):
        path = temp_dir / "empty.jsonl"
        assert write_jsonl([], path) == 0
        assert path.read_bytes() == b""
