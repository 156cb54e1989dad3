"""Tests for heading-driven sectioning and content classification."""

from finwikt.diagnostics import Diagnostics
from finwikt.models import Definitions, Empty, InflectionBlock, Item, Items
from finwikt.nodes import parse_html
from finwikt.sectioner import (
    classify_content,
    classify_items,
    has_definitions,
    outer_tables,
    segment,
    segment_scopes,
)


def top_nodes(html: str):
    return [n for n in parse_html(html).children if getattr(n, "name", None)]


# ─────────────────────────────────────────────────────────────────────────────
# Segmentation
# ─────────────────────────────────────────────────────────────────────────────

class TestSegment:
    """Heading levels rebuild the nesting that the flat markup lacks."""

    def test_nesting_follows_heading_levels(self):
        nodes = top_nodes(
            "<h3>Noun</h3><p>koira</p><ol><li>dog</li></ol>"
            "<h4>Declension</h4><p>like koira</p>"
            "<h4>Synonyms</h4><ul><li>hauva</li></ul>"
            "<h3>Verb</h3><p>koiria</p><ol><li>to dog</li></ol>"
        )
        sections = segment(nodes)
        assert [s.heading for s in sections] == ["Noun", "Verb"]
        assert [s.heading for s in sections[0].subsections] == ["Declension", "Synonyms"]
        assert sections[1].subsections == ()

    def test_heading_closes_deeper_scopes(self):
        nodes = top_nodes("<h3>A</h3><h4>B</h4><h5>C</h5><h4>D</h4><p>d</p>")
        (a,) = segment(nodes)
        assert [s.heading for s in a.subsections] == ["B", "D"]
        assert [s.heading for s in a.subsections[0].subsections] == ["C"]

    def test_every_node_in_exactly_one_scope(self):
        nodes = top_nodes("<h3>A</h3><p>1</p><h4>B</h4><p>2</p><p>3</p><h3>C</h3><p>4</p>")
        segmentation = segment_scopes(nodes)
        owned = []
        for scope in segmentation.scopes:
            owned.append(scope.heading)
            owned.extend(scope.all_nodes())
        assert len(owned) == len(nodes)
        assert all(any(o is n for o in owned) for n in nodes)

    def test_orphans_reported_not_attached(self):
        diagnostics = Diagnostics()
        nodes = top_nodes("<p>stray</p><div>box</div><h3>Noun</h3><p>koira</p>")
        sections = segment(nodes, diagnostics=diagnostics)
        assert len(sections) == 1
        assert sections[0].items[0].text == "koira"
        assert [d.message for d in diagnostics.warnings] == ["2 orphaned nodes before the first heading"]

    def test_boundary_stops_segmentation(self):
        nodes = top_nodes("<h3>A</h3><p>a</p><hr><h3>B</h3><p>b</p>")
        sections = segment(nodes, boundary=lambda n: n.name == "hr")
        assert [s.heading for s in sections] == ["A"]

    def test_wrapped_headings(self):
        """Newer MediaWiki wraps headings in div.mw-heading."""
        nodes = top_nodes(
            '<div class="mw-heading mw-heading3"><h3 id="Noun">Noun</h3>'
            '<span class="mw-editsection">[edit]</span></div><p>koira</p>'
        )
        (section,) = segment(nodes)
        assert section.heading == "Noun"
        assert section.level == 3

    def test_edit_links_not_in_label(self):
        nodes = top_nodes('<h3>Noun<span class="mw-editsection">[edit]</span></h3><p>koira</p>')
        assert segment(nodes)[0].heading == "Noun"

    def test_empty_input(self):
        assert segment([]) == []


# ─────────────────────────────────────────────────────────────────────────────
# Content classification
# ─────────────────────────────────────────────────────────────────────────────

class TestClassifyContent:

    def test_paragraph_then_list_is_definitions(self):
        nodes = top_nodes("<p>koira</p><ol><li>dog</li><li>cur</li></ol>")
        assert has_definitions(nodes)
        content, tables = classify_content(nodes, Diagnostics())
        assert isinstance(content, Definitions)
        assert [(d.rank, d.text) for d in content.definitions] == [(1, "dog"), (2, "cur")]
        assert tables == ()

    def test_list_without_paragraph_is_items(self):
        nodes = top_nodes("<ol><li>dog</li></ol>")
        assert not has_definitions(nodes)
        content, _ = classify_content(nodes, Diagnostics())
        assert isinstance(content, Items)
        assert [i.text for i in content.items] == ["dog"]

    def test_no_nodes_is_empty(self):
        content, tables = classify_content([], Diagnostics())
        assert isinstance(content, Empty)
        assert tables == ()

    def test_tables_beside_definitions(self, en_noun_declension_table):
        nodes = top_nodes(
            "<p>koira</p><ol><li>dog</li></ol>"
            f'<div class="NavFrame">{en_noun_declension_table}</div>'
        )
        content, tables = classify_content(nodes, Diagnostics())
        assert isinstance(content, Definitions)
        assert [t.shape for t in tables] == ["noun_declension"]

    def test_unknown_table_warns_and_continues(self, build_table):
        diagnostics = Diagnostics()
        nodes = top_nodes("<p>see below</p>" + build_table([["a"], ["b"]]) + "<p>after</p>")
        content, _ = classify_content(nodes, diagnostics)
        assert [i.text for i in content.items] == ["see below", "after"]
        assert [d.message for d in diagnostics.warnings] == ["unknown table"]


class TestClassifyItems:

    def test_leaf_list_entries_become_items(self):
        nodes = top_nodes("<ul><li>hauva<ul><li>puppy talk</li></ul></li><li>rakki</li></ul>")
        units = classify_items(nodes, Diagnostics())
        assert [u.text for u in units] == ["puppy talk", "rakki"]

    def test_scripts_and_blank_nodes_skipped(self):
        nodes = top_nodes("<script>var x;</script><p> </p><p>text</p>")
        assert [u.text for u in classify_items(nodes, Diagnostics())] == ["text"]

    def test_div_table_caption(self, en_noun_declension_table):
        nodes = top_nodes(f'<div class="NavFrame"><div class="NavHead">Inflection</div>{en_noun_declension_table}</div>')
        (block,) = classify_items(nodes, Diagnostics())
        assert isinstance(block, InflectionBlock)
        assert block.caption == "Inflection"

    def test_one_row_translations_table_kept_as_items(self):
        """A layout table with no inflection shape leaves its list text as items."""
        diagnostics = Diagnostics()
        nodes = top_nodes(
            '<div class="NavFrame"><div class="NavHead">dog</div>'
            '<table class="translations"><tr>'
            "<td><ul><li>French: chien</li></ul></td>"
            "<td><ul><li>Swedish: hund</li></ul></td>"
            "</tr></table></div>"
        )
        units = classify_items(nodes, diagnostics)
        assert units == [Item("French: chien"), Item("Swedish: hund")]
        assert [d.message for d in diagnostics.warnings] == ["unknown table"]

    def test_predicate_limits_tagged_tables(self, build_table):
        """Tables the predicate rejects are read as text, without warnings."""
        diagnostics = Diagnostics()
        nodes = top_nodes(build_table([["plain layout table"]]))
        units = classify_items(nodes, diagnostics, "fi", lambda table: False)
        assert units == [Item("plain layout table")]
        assert len(diagnostics) == 0

    def test_items_keep_links(self):
        nodes = top_nodes('<p>see <a href="/wiki/hauva" title="hauva">hauva</a></p>')
        (item,) = classify_items(nodes, Diagnostics())
        assert item.links[0].target == "/wiki/hauva"
        assert item.links[0].title == "hauva"


class TestOuterTables:

    def test_nested_tables_not_listed(self, element):
        node = element(
            "<div><table><tr><td><table><tr><td>inner</td></tr></table></td></tr></table>"
            "<table><tr><td>second</td></tr></table></div>"
        )
        tables = outer_tables(node)
        assert len(tables) == 2
        assert all(t.find_parent("table") is None for t in tables)

    def test_table_itself(self, element):
        node = element("<table><tr><td>a</td></tr></table>")
        assert outer_tables(node) == [node]
