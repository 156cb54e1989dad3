"""Pytest configuration and shared fixtures.

Pages are written without whitespace between elements where example and
table markup is matched structurally, the way MediaWiki emits it.
"""
import tempfile
from pathlib import Path

import pytest

from finwikt.config import reset_config
from finwikt.nodes import parse_html


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from the packaged configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ─────────────────────────────────────────────────────────────────────────────
# Markup helpers
# ─────────────────────────────────────────────────────────────────────────────

def _cell(cell) -> str:
    """
    One cell from a compact notation.

        "text"                     <td>text</td>
        "!text"                    <th>text</th>
        ("!text", {"rowspan": 2})  <th rowspan="2">text</th>
    """
    attrs = {}
    if isinstance(cell, tuple):
        cell, attrs = cell
    tag = "td"
    if cell.startswith("!"):
        tag, cell = "th", cell[1:]
    attr_text = "".join(f' {k}="{v}"' for k, v in attrs.items())
    return f"<{tag}{attr_text}>{cell}</{tag}>"


def table_html(rows, css_class: str = "", tbody: bool = False) -> str:
    body = "".join("<tr>" + "".join(_cell(c) for c in row) + "</tr>" for row in rows)
    if tbody:
        body = f"<tbody>{body}</tbody>"
    class_attr = f' class="{css_class}"' if css_class else ""
    return f"<table{class_attr}>{body}</table>"


@pytest.fixture
def build_table():
    """Build table markup from rows of compact cell notation."""
    return table_html


@pytest.fixture
def element():
    """Parse a fragment and return its first element."""
    def parse(html: str):
        return parse_html(html).find(True)
    return parse


def page_html(title: str, body: str) -> str:
    return (
        "<html><head><title>" + title + "</title></head><body>"
        f'<h1 id="firstHeading">{title}</h1>'
        f'<div id="mw-content-text"><div class="mw-parser-output">{body}</div></div>'
        "</body></html>"
    )


def h(level: int, label: str) -> str:
    anchor = label.replace(" ", "_")
    return (
        f'<h{level}><span class="mw-headline" id="{anchor}">{label}</span>'
        f'<span class="mw-editsection">[edit]</span></h{level}>'
    )


# ─────────────────────────────────────────────────────────────────────────────
# Inflection tables
# ─────────────────────────────────────────────────────────────────────────────

FI_CASES = [
    ("nominatiivi", "koira", "koirat"),
    ("genetiivi", "koiran", "koirien<br>koirain"),
    ("partitiivi", "koiraa", "koiria"),
    ("akkusatiivi", "koira<br>koiran", "koirat"),
    None,
    ("inessiivi", "koirassa", "koirissa"),
    ("elatiivi", "koirasta", "koirista"),
    ("illatiivi", "koiraan", "koiriin"),
    None,
    ("adessiivi", "koiralla", "koirilla"),
    ("ablatiivi", "koiralta", "koirilta"),
    ("allatiivi", "koiralle", "koirille"),
    None,
    ("essiivi", "koirana", "koirina"),
    ("translatiivi", "koiraksi", "koiriksi"),
    ("abessiivi", "koiratta", "koiritta"),
    ("instruktiivi", "–", "koirin"),
    ("komitatiivi", "–", "koirine-<br>+"),
]


def _fi_declension_rows():
    groups = iter(["sisäpaikallissijat", "ulkopaikallissijat", "muut sijamuodot"])
    rows = [
        [("!Taivutus", {"colspan": 3})],
        ["!sijamuoto", "!yksikkö", "!monikko"],
    ]
    for case in FI_CASES:
        if case is None:
            rows.append([(f"!{next(groups)}", {"colspan": 3})])
        else:
            name, singular, plural = case
            rows.append([f"!{name}", singular, plural])
    return rows


@pytest.fixture
def fi_declension_table():
    """A 20-row Wikisanakirja declension table for "koira"."""
    return table_html(_fi_declension_rows(), css_class="wikitable", tbody=True)


EN_CASES = [
    "genitive", "partitive", "inessive", "elative", "illative", "adessive",
    "ablative", "allative", "essive", "translative", "instructive", "abessive",
    "comitative",
]


@pytest.fixture
def en_noun_declension_table():
    """A 22-row {{fi-decl}} table: title, notes, number header, cases."""
    rows = [[("!Inflection of koira", {"colspan": 4})]]
    rows += [[("kotus type 10/koira", {"colspan": 4})] for _ in range(4)]
    rows.append([("!", {"colspan": 2}), "!singular", "!plural"])
    rows.append([("!nominative", {"colspan": 2}), "koira", "koirat"])
    rows.append([("!accusative", {"rowspan": 2}), "!nom.", "koira", ("koirat", {"rowspan": 2})])
    rows.append(["!gen.", "koiran"])
    for case in EN_CASES:
        singular = "—" if case in ("instructive", "comitative") else f"koira-{case}"
        rows.append([(f"!{case}", {"colspan": 2}), singular, f"koirat-{case}"])
    return table_html(rows)


@pytest.fixture
def en_verb_conjugation_table():
    """
    A 66-row {{fi-conj}} table, filled in only where the test reads it.

    Columns: 0 person/labels, 1-4 finite forms, 4 participle tense, 5-6 participles.
    """
    blank = ["!"] * 6
    rows = [["!conjugation of puhua", *blank]]
    rows.append(["!indicative mood", *blank])
    rows.append(["!", "!present tense", "!present tense", "!perfect", "!perfect", "!", "!"])
    rows.append(["!", "!positive", "!negative", "!positive", "!negative", "!", "!"])
    rows.append(["!1st sing.", "minä puhun", "en puhu", "olen puhunut", "en ole puhunut", "!", "!"])
    while len(rows) < 50:
        rows.append([f"!row {len(rows)}", *blank])
    rows.append(["!nominal forms", *blank])
    rows.append(["!", *blank])
    rows.append(["!", "!", "!active", "!passive", "!", "!active", "!passive"])
    rows.append(["!first", "!", "!", "!", "!present", "puhuva", "puhuttava"])
    rows.append(["!", *blank])
    rows.append(["!second", "!inessive", "puhuessa", "puhuttaessa", "!", "!", "!"])
    while len(rows) < 66:
        rows.append([f"!row {len(rows)}", *blank])
    return table_html(rows)


@pytest.fixture
def en_pronoun_table():
    """A one-row frame around a two-panel pronoun declension table."""
    inner = table_html([
        ["!case", "!singular", "!plural", "!case", "!singular", "!plural"],
        ["!nominative", "minä", "me", "!accusative", "minut", "meidät"],
        ["!genitive", "minun, mun", "meidän", "!partitive", "minua", "meitä"],
    ])
    return f"<table><tr><td>{inner}</td></tr></table>"


@pytest.fixture
def mood_table():
    """An indicative table from a Liite:Verbitaivutus page (simple tenses)."""
    persons = [
        ("minä", "puhun", "en puhu", "olen puhunut"),
        ("sinä", "puhut", "et puhu", "olet puhunut"),
        ("hän", "puhuu", "ei puhu", "on puhunut"),
        ("me", "puhumme", "emme puhu", "olemme puhuneet"),
        ("te", "puhutte<br>puhuttekos", "ette puhu", "olette puhuneet"),
    ]
    rows = [
        [("!Indikatiivi", {"colspan": 7})],
        [("!preesens", {"colspan": 3}), "!", ("!perfekti", {"colspan": 3})],
        ["!persoona", "!myönteinen", "!kielteinen", "!", "!persoona", "!myönteinen", "!kielteinen"],
    ]
    for person, positive, negative, perfect in persons:
        rows.append([f"!{person}", positive, negative, "!", f"!{person}",
                     f"{perfect}<sup>1</sup>", "–"])
    return table_html(rows)


@pytest.fixture
def verbid_table():
    """The nominal forms (infinitives and participles) table of a conjugation page."""
    rows = [
        ["!infinitiivit", "!partisiipit"],
        ["!", "!aktiivi", "!passiivi"],
        [("!1.", {"colspan": 2}), ("puhua", {"colspan": 2}), "!preesens", "puhuva", "puhuttava"],
        ["!pitkä 1.", "puhuakseen"],
        [("!2.", {"rowspan": 2}), "!inessiivi", "!akt.", "puhuessa", "!agentti", "puhuma"],
        ["!instruktiivi", "puhuen"],
    ]
    while len(rows) < 15:
        rows.append([f"!rivi {len(rows)}"])
    return table_html(rows)


# ─────────────────────────────────────────────────────────────────────────────
# Pages
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def en_page(en_noun_declension_table):
    """English Wiktionary page with one Finnish noun and a Swedish section after it."""
    body = (
        h(2, "Finnish")
        + '<div class="sister-wikipedia">Finnish Wikipedia has an article on koira</div>'
        + h(3, "Etymology")
        + "<p>From Proto-Finnic <i>koira</i>.</p>"
        + h(3, "Noun")
        + '<p><strong class="headword" lang="fi">koira</strong> (genitive koiran, partitive koiraa)</p>'
        + "<ol>"
        + '<li><a href="/wiki/dog" title="dog">dog</a>'
        + '<dl><dd><i>Koira haukkuu.</i><dl><dd>The dog barks.</dd></dl></dd></dl></li>'
        + '<li>(derogatory) <a href="/wiki/cur">cur</a>'
        + '<dl><dd><a href="/wiki/rakki">rakki</a> = <a href="/wiki/mutt">mutt</a></dd></dl></li>'
        + "</ol>"
        + h(4, "Declension")
        + f'<div class="NavFrame">{en_noun_declension_table}</div>'
        + h(4, "Synonyms")
        + '<ul><li><a href="/wiki/hauva">hauva</a></li><li><a href="/wiki/rakki">rakki</a></li></ul>'
        + h(2, "Swedish")
        + h(3, "Noun")
        + "<p><b>koira</b></p><ol><li>not Finnish</li></ol>"
    )
    return page_html("koira", body)


@pytest.fixture
def en_nested_page():
    """A page with two etymologies, each carrying its own part of speech."""
    body = (
        h(2, "Finnish")
        + h(3, "Etymology 1")
        + "<p>From Proto-Finnic <i>kuusi</i>.</p>"
        + h(4, "Noun")
        + '<p><strong class="headword">kuusi</strong> (genitive kuusen)</p>'
        + "<ol><li>spruce</li></ol>"
        + h(5, "Synonyms")
        + "<ul><li>kuusipuu</li></ul>"
        + h(3, "Etymology 2")
        + "<p>From Proto-Uralic.</p>"
        + h(4, "Numeral")
        + '<p><strong class="headword">kuusi</strong></p>'
        + "<ol><li>six</li></ol>"
        + h(3, "Anagrams")
        + "<ul><li>suuki</li></ul>"
    )
    return page_html("kuusi", body)


@pytest.fixture
def fi_page(fi_declension_table):
    """Wikisanakirja page with a noun entry and a verb entry linking to its conjugation."""
    body = (
        h(2, "Suomi")
        + h(3, "Substantiivi")
        + "<p><b>koira</b> (10)</p>"
        + "<ol>"
        + '<li>kotieläimenä pidetty <a href="/wiki/nelij%C3%A4lkainen">nelijälkainen</a> petoeläin'
        + "<dl><dd>Koira haukkuu.</dd><dd>Koira on ihmisen paras ystävä.</dd></dl></li>"
        + "<li>halveksittu ihminen</li>"
        + "</ol>"
        + h(4, "Taivutus")
        + fi_declension_table
        + h(4, "Käännökset")
        + "<ul><li>englanti: dog</li><li>ruotsi: hund</li></ul>"
        + h(4, "Etymologia")
        + h(3, "Verbi")
        + '<p><b>puhua</b> (61) <a href="/wiki/Liite:Verbitaivutus/suomi/puhua">taivutus</a></p>'
        + "<ol><li>ilmaista ajatuksiaan sanoin</li></ol>"
        + h(2, "Ruotsi")
        + h(3, "Substantiivi")
        + "<p><b>koira</b></p><ol><li>ei suomea</li></ol>"
    )
    return page_html("koira", body)


@pytest.fixture
def conjugation_page(mood_table, verbid_table):
    """A Liite:Verbitaivutus page: layout table, mood table, nominal forms table."""
    layout = "<table><tr><td>Taivutustyyppi 61</td><td>puhua</td><td>puhun</td></tr></table>"
    return page_html("Liite:Verbitaivutus/suomi/puhua", layout + mood_table + verbid_table)
