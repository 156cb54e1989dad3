"""
tagger.py — morphological tags from inflection tables.

A table is first classified by its raw shape (row count, header-row cell
count). The shape selects one tagging function that reads each data cell and
looks up its grammatical attributes at fixed coordinates of the table.

All row and column numbers below are reverse-engineered from specific table
families and break silently if those templates change. Any table that does not
have exactly the expected shape is reported as unknown instead of tagged.

    en   {{fi-conj}} verb conjugation   66 rows   virtual-grid lookups
    en   {{fi-decl}} noun declension    22 rows   virtual-grid lookups
    en   pronoun declension             1 row     wrapper around the real table
    fi   taivutus (declension)          20 rows   table.wikitable
    fi-conjugation  Liite:Verbitaivutus mood tables and the nominal forms table
"""

import logging
from enum import Enum
from typing import Callable, Iterable, Optional

from bs4 import Tag

from finwikt.diagnostics import Diagnostics
from finwikt.errors import OutOfRange, TableShapeError
from finwikt.grid import Cell, Table, cell_text, own_rows, row_cells
from finwikt.models import InflectionBlock, Link, Morpheme
from finwikt.nodes import describe, element_children, has_class, links_in, normalize_text, tag_kind


logger = logging.getLogger(__name__)

# Attribute value used when a lookup falls outside the table
SENTINEL = "?"

TABLE_DIALECTS = ("en", "fi", "fi-conjugation")


class TableShape(str, Enum):
    VERB_CONJUGATION = "verb_conjugation"
    NOUN_DECLENSION = "noun_declension"
    PRONOUN_DECLENSION = "pronoun_declension"
    FI_DECLENSION = "fi_declension"
    MOOD_CONJUGATION = "mood_conjugation"
    VERBID = "verbid"


# =============================================================================
# Lookups
# =============================================================================


class Lookup:
    """Attribute lookups on one table that degrade to SENTINEL with a warning."""

    def __init__(self, table: Table, diagnostics: Diagnostics):
        self.table = table
        self.diagnostics = diagnostics

    def _missing(self, kind: str, e: OutOfRange) -> str:
        self.diagnostics.warn(
            f"{kind} lookup out of range at ({e.row}, {e.col})",
            describe(self.table.node),
        )
        return SENTINEL

    def grid(self, row: int, col: int) -> str:
        """Text of the cell covering virtual coordinate (row, col)."""
        try:
            return self.table.grid.text_at(row, col)
        except OutOfRange as e:
            return self._missing("grid", e)

    def raw(self, row: int, col: int) -> str:
        """Text of the col-th cell in the row-th <tr>."""
        try:
            return self.table.raw_cell(row, col).raw_text
        except OutOfRange as e:
            return self._missing("raw", e)

    def raw_cell(self, row: int, col: int) -> Optional[Cell]:
        try:
            return self.table.raw_cell(row, col)
        except OutOfRange as e:
            self._missing("raw", e)
            return None

    def coordinates(self, cell: Cell) -> tuple[int, int]:
        return self.table.grid.logical_coordinates(cell)


def cell_links(cell: Cell, surface_form: str, exclude: Iterable[str] = ()) -> tuple[Link, ...]:
    """Links in the cell whose text occurs in `surface_form`."""
    exclude = tuple(exclude)
    return tuple(
        link for link in links_in(cell.source)
        if link.display_text
        and link.display_text in surface_form
        and not any(marker in link.target for marker in exclude)
    )


def split_all(cells: Iterable[Cell], *delimiters: str) -> list[Cell]:
    """Split every cell on each delimiter in turn."""
    result = list(cells)
    for delimiter in delimiters:
        result = [piece for cell in result for piece in cell.split(delimiter)]
    return result


# =============================================================================
# en.wiktionary
# =============================================================================

# {{fi-conj}}: mood and tense blocks above row 50, nominal forms below.
# Data rows per block: 4-10, 13-19, 23-29, 33-39, 43-49.
NOMINAL_FORMS_ROW = 50
VALENCE_ROW = 3
ACTIVITY_ROW = 52
PARTICIPLE_TENSE_COL = 4
INFINITIVE_COLS = 4
LAST_ACTIVE_PARTICIPLE_ROW = 54
# Participle cells from this row on are footnotes
PARTICIPLE_FOOTNOTE_ROW = 57
INFINITIVE_CASE_ROWS = range(55, 65)
INFINITIVE_ACTIVITY_ROWS = range(55, 63)


def _tense_row(row: int) -> int:
    if row <= 10:
        return 2
    if row <= 19:
        return 11
    if row <= 29:
        return 21
    if row <= 39:
        return 31
    return 41


def _mood_row(row: int) -> int:
    if row <= 19:
        return 1
    if row <= 29:
        return 20
    if row <= 39:
        return 30
    return 40


def tag_verb_conjugation(table: Table, lookup: Lookup) -> list[Morpheme]:
    """Finite forms get [person, valence, tense, mood]; nominal forms their type."""
    morphemes = []
    data_cells = [c for c in table.cells() if c.is_data]
    for cell in split_all(data_cells, "\n"):
        if cell.is_placeholder:
            continue
        row, col = lookup.coordinates(cell)

        if row < NOMINAL_FORMS_ROW:
            attributes = [
                lookup.grid(row, 0),
                lookup.grid(VALENCE_ROW, col),
                lookup.grid(_tense_row(row), col),
                lookup.grid(_mood_row(row), 0),
            ]
        elif col < INFINITIVE_COLS:
            attributes = [lookup.grid(row, 0) + " infinitive"]
            if row in INFINITIVE_CASE_ROWS:
                attributes.append(lookup.grid(row, 1))
                if row in INFINITIVE_ACTIVITY_ROWS:
                    attributes.append(lookup.grid(ACTIVITY_ROW, col))
        else:
            if row >= PARTICIPLE_FOOTNOTE_ROW:
                continue
            tense = lookup.grid(row, PARTICIPLE_TENSE_COL)
            if row <= LAST_ACTIVE_PARTICIPLE_ROW:
                attributes = [lookup.grid(ACTIVITY_ROW, col), tense, "participle"]
            else:
                attributes = [tense, "participle"]

        surface = cell.raw_text
        morphemes.append(Morpheme(surface, tuple(attributes), cell_links(cell, surface)))
    return morphemes


# {{fi-decl}}: rows 0-4 are title and notes, row 5 holds singular/plural
NUMBER_ROW = 5
SECONDARY_CASE_ROWS = (7, 8)
SECONDARY_CASE_COL = 2


def tag_noun_declension(table: Table, lookup: Lookup) -> list[Morpheme]:
    """Declined forms get [case, number], plus the accusative variant where present."""
    morphemes = []
    for cell in split_all(table.cells(), "\n"):
        if not cell.is_data or cell.is_placeholder:
            continue
        row, col = lookup.coordinates(cell)
        if row < NUMBER_ROW:
            continue
        attributes = [lookup.grid(row, 0), lookup.grid(NUMBER_ROW, col)]
        if row in SECONDARY_CASE_ROWS and col == SECONDARY_CASE_COL:
            secondary = lookup.grid(row, 1)
            if secondary:
                attributes.append(secondary)
        surface = cell.raw_text
        morphemes.append(Morpheme(surface, tuple(attributes), cell_links(cell, surface)))
    return morphemes


# Pronoun tables are two case/number panels side by side; column 3 is the
# case header of the right-hand panel.
PRONOUN_HEADER_COLS = (0, 3)


def tag_pronoun_declension(table: Table, lookup: Lookup) -> list[Morpheme]:
    morphemes = []
    for cell in split_all(table.cells(), ",", "\n"):
        if not cell.is_data or cell.is_placeholder:
            continue
        row, col = lookup.coordinates(cell)
        if row == 0 or col in PRONOUN_HEADER_COLS:
            continue
        case_col = 0 if col <= 2 else 3
        attributes = (lookup.grid(row, case_col), lookup.grid(0, col))
        surface = cell.raw_text
        morphemes.append(Morpheme(surface, attributes, cell_links(cell, surface)))
    return morphemes


# =============================================================================
# fi.wiktionary
# =============================================================================

FI_DECLENSION_ROWS = 20
FI_HEADER_ROWS = (0, 1, 6, 10, 14)
FI_NUMBER_ROW = 1


def _is_unsplittable(cell: Cell) -> bool:
    # Plural comitative is written "-\n+" (stem + possessive suffix), one form
    return cell.row == 19 and cell.column == 2 and "-\n+" in cell.raw_text


def tag_fi_declension(table: Table, lookup: Lookup) -> list[Morpheme]:
    """Declined forms get [case, number]; case from column 0, number from row 1."""
    morphemes = []
    for raw in table.cells():
        if raw.column == 0 or raw.is_placeholder:
            continue
        row, col = lookup.coordinates(raw)
        if row in FI_HEADER_ROWS:
            continue
        pieces = [raw] if _is_unsplittable(raw) else raw.split("\n")
        for cell in pieces:
            if cell.is_placeholder:
                continue
            surface = cell.raw_text.replace("\n", " ")
            attributes = (lookup.grid(row, 0), lookup.grid(FI_NUMBER_ROW, col))
            morphemes.append(Morpheme(surface, attributes, cell_links(cell, surface)))
    return morphemes


# Liite:Verbitaivutus mood tables: row 0 names the mood, rows 1-10 the
# simple tenses and rows 11-20 the compound ones. Columns 0 and 4 hold
# persons, column 3 separates the two tense panels.
MOOD_HEADER_COLS = (0, 3, 4)
MOOD_EMPTY_FORMS = ("–", '-"-')
TE_ROWS = (7, 17)
CONJUGATION_LINK_EXCLUDE = ("index.php",)
CONJUGATION_STRIP = ("sup", "a.external")


def tag_mood_conjugation(table: Table, lookup: Lookup) -> list[Morpheme]:
    """Finite forms get [mood, tense, person, valence]."""
    mood = lookup.raw(0, 0).lower()
    candidates = [
        c for c in table.cells()
        if c.column not in MOOD_HEADER_COLS and not c.is_header and c.raw_text.strip()
    ]
    morphemes = []
    for cell in split_all(candidates, "\n"):
        if not cell.raw_text or cell.raw_text in MOOD_EMPTY_FORMS:
            continue
        row, col = cell.row, cell.column
        tense = lookup.raw(1 if row <= 10 else 11, 0 if col < 4 else 2)
        if row in TE_ROWS:
            # Plural and polite "te"/"Te" share one row
            full_text = cell_text(cell.source, CONJUGATION_STRIP)
            polite = "\n" in full_text and full_text.endswith(cell.raw_text)
            person = "Te" if polite else "te"
        else:
            person = lookup.raw(row, 0)
        valence = lookup.raw(2 if row <= 10 else 12, col)
        surface = cell.raw_text
        links = cell_links(cell, surface, exclude=CONJUGATION_LINK_EXCLUDE)
        morphemes.append(Morpheme(surface, (mood, tense, person, valence), links))
    return morphemes


VERBID_ROWS = 15
VERBID_INFINITIVE_COLS = 4
VERBID_ACTIVE_COL = 3
VERBID_CASE_ROWS = range(4, 14)
VERBID_VOICE_ROWS = (4, 11)
VERBID_PARTICIPLE_VOICE_ROWS = (2, 3)


def infinitive_ordinal(row: int) -> str:
    if row == 2:
        return "1."
    if row == 3:
        return "pitkä 1."
    if row <= 5:
        return "2."
    if row <= 11:
        return "3."
    if row <= 13:
        return "4."
    return "5."


def _voice(cell: Cell) -> str:
    return "aktiivi" if cell.column == VERBID_ACTIVE_COL else "passiivi"


def tag_verbid(table: Table, lookup: Lookup) -> list[Morpheme]:
    """Infinitives and participles from the nominal forms table."""
    candidates = [
        c for c in table.cells()
        if not c.is_header
        and not c.has_attribute("rowspan")
        and c.raw_text != "–"
        and c.raw_text.strip()
    ]
    morphemes = []
    for cell in split_all(candidates, "\n"):
        if not cell.raw_text:
            continue
        row = cell.row
        first = lookup.raw_cell(row, 0)
        first_spans_rows = first is not None and first.has_attribute("rowspan")
        attributes = []

        # Rowspans shift raw column numbers, so the infinitive/participle
        # split uses the span column
        if table.span_column(cell) < VERBID_INFINITIVE_COLS:
            attributes.append(f"{infinitive_ordinal(row)} infinitiivi")
            if row in VERBID_CASE_ROWS:
                if first_spans_rows:
                    attributes.append(lookup.raw(row, 1))
                else:
                    attributes.append(first.raw_text if first is not None else SENTINEL)
                if row in VERBID_VOICE_ROWS:
                    attributes.append(_voice(cell))
        else:
            if row in VERBID_PARTICIPLE_VOICE_ROWS:
                attributes.append(lookup.raw(row, 2))
                attributes.append(_voice(cell))
            else:
                attributes.append(lookup.raw(row, 4 if first_spans_rows else 3))
            attributes.append("partisiippi")

        surface = cell.raw_text
        links = cell_links(cell, surface, exclude=CONJUGATION_LINK_EXCLUDE)
        morphemes.append(Morpheme(surface, tuple(attributes), links))
    return morphemes


# =============================================================================
# Shape classification and extraction
# =============================================================================


TAGGERS: dict[TableShape, Callable[[Table, Lookup], list[Morpheme]]] = {
    TableShape.VERB_CONJUGATION: tag_verb_conjugation,
    TableShape.NOUN_DECLENSION: tag_noun_declension,
    TableShape.PRONOUN_DECLENSION: tag_pronoun_declension,
    TableShape.FI_DECLENSION: tag_fi_declension,
    TableShape.MOOD_CONJUGATION: tag_mood_conjugation,
    TableShape.VERBID: tag_verbid,
}

EN_SHAPES_BY_ROWS = {
    66: TableShape.VERB_CONJUGATION,
    22: TableShape.NOUN_DECLENSION,
    1: TableShape.PRONOUN_DECLENSION,
}


def is_fi_declension_table(node: Tag) -> bool:
    """A wikitable whose body has exactly the 20 rows of the declension template."""
    if tag_kind(node) != "table" or not has_class(node, "wikitable"):
        return False
    children = element_children(node)
    if not children or tag_kind(children[0]) != "tbody":
        return False
    return len(element_children(children[0])) == FI_DECLENSION_ROWS


def _header_cell_count(node: Tag) -> int:
    rows = own_rows(node)
    return len(row_cells(rows[0])) if rows else 0


def classify_table(node: Tag, dialect: str = "en") -> TableShape:
    """
    Shape of an inflection table, judged from raw structure only.

    Raises:
        TableShapeError: If the table matches no known shape for the dialect
    """
    if tag_kind(node) != "table":
        raise TableShapeError(f"not a table: {describe(node)}")

    n_rows = len(own_rows(node))
    if dialect == "en":
        shape = EN_SHAPES_BY_ROWS.get(n_rows)
        # A one-row table is a pronoun declension only as a frame around the real one
        if shape is TableShape.PRONOUN_DECLENSION and node.find("table") is None:
            shape = None
        if shape is not None:
            return shape
    elif dialect == "fi":
        if is_fi_declension_table(node):
            return TableShape.FI_DECLENSION
    elif dialect == "fi-conjugation":
        header_cells = _header_cell_count(node)
        if header_cells == 1:
            return TableShape.MOOD_CONJUGATION
        if header_cells == 2 and n_rows == VERBID_ROWS:
            return TableShape.VERBID
    else:
        raise TableShapeError(f"unknown table dialect '{dialect}'")

    raise TableShapeError(f"unknown {dialect} table shape ({n_rows} rows): {describe(node)}")


def _caption(node: Tag, shape: TableShape) -> str:
    caption = node.find("caption")
    if caption is not None:
        return normalize_text(caption.get_text())
    if shape is TableShape.MOOD_CONJUGATION:
        rows = own_rows(node)
        return normalize_text(rows[0].get_text()) if rows else ""
    return ""


def extract_table(node: Tag, dialect: str = "en",
                  diagnostics: Optional[Diagnostics] = None) -> InflectionBlock:
    """
    Tag every data cell of an inflection table.

    Raises:
        TableShapeError: If the table's shape is not recognized
    """
    if diagnostics is None:
        diagnostics = Diagnostics()
    shape = classify_table(node, dialect)

    target = node.find("table") if shape is TableShape.PRONOUN_DECLENSION else node

    strip = CONJUGATION_STRIP if dialect == "fi-conjugation" else ("sup",)
    table = Table.from_node(target, strip=strip)
    morphemes = TAGGERS[shape](table, Lookup(table, diagnostics))
    logger.debug(f"{shape.value}: {len(morphemes)} morphemes from {describe(node, 30)}")
    return InflectionBlock(shape=shape.value, morphemes=tuple(morphemes), caption=_caption(node, shape))


def route_table(node: Tag, dialect: str, diagnostics: Diagnostics) -> Optional[InflectionBlock]:
    """extract_table, with unknown shapes reported as a warning instead of raised."""
    try:
        return extract_table(node, dialect, diagnostics)
    except TableShapeError:
        diagnostics.warn("unknown table", describe(node))
        return None
