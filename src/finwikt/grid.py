"""
grid.py — virtual grids for HTML tables with row and column spans.

HTML tables are not grids once cells carry rowspan/colspan: the header cell
that names a block of rows appears only once, at the head of the first row,
and later rows start "part way across". Inflection tables lean on this
heavily, so attribute lookup is done against a virtual grid in which every
(row, column) coordinate maps to the cell covering it:

    <tr><th rowspan=2>A</th><td>b</td></tr>     (0,0) A   (0,1) b
    <tr><td>c</td></tr>                         (1,0) A   (1,1) c

Cells are placed in source order, row by row. Within a row a column cursor
skips coordinates already claimed by a rowspan from an earlier row. When
spans overlap in malformed markup, the first claim on a coordinate wins.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence

from bs4 import Tag

from finwikt.errors import OutOfRange
from finwikt.nodes import clone_subtree, tag_kind


logger = logging.getLogger(__name__)

# Dash glyphs tables use for "no such form"
PLACEHOLDERS = frozenset({"—", "–"})


# =============================================================================
# Cells
# =============================================================================


def parse_span(value) -> int:
    """colspan/rowspan attribute as an int; anything invalid or < 1 is 1."""
    if value is None:
        return 1
    try:
        span = int(str(value).strip())
    except ValueError:
        return 1
    return span if span >= 1 else 1


def cell_text(node: Tag, strip: Iterable[str] = ("sup",)) -> str:
    """
    Text of a table cell with footnote markers removed.

    The cell is cloned before pruning; <br> becomes a newline so stacked
    alternative forms can be split later.
    """
    clone = clone_subtree(node)
    for selector in strip:
        for unwanted in clone.select(selector):
            unwanted.decompose()
    for br in clone.find_all("br"):
        br.replace_with("\n")
    return clone.get_text().strip()


@dataclass(frozen=True, eq=False)
class Cell:
    """
    One raw table cell.

    `column` and `row` are raw positions: the cell's index within its <tr> and
    the <tr>'s index within the table. Cells compare by identity; split
    siblings are distinct objects that keep the parent's positions and spans.
    """

    raw_text: str
    column: int
    row: int
    colspan: int = 1
    rowspan: int = 1
    source: Optional[Tag] = field(default=None, repr=False)

    @classmethod
    def from_node(cls, node: Tag, column: int, row: int,
                  strip: Iterable[str] = ("sup",)) -> Cell:
        return cls(
            raw_text=cell_text(node, strip),
            column=column,
            row=row,
            colspan=parse_span(node.get("colspan")),
            rowspan=parse_span(node.get("rowspan")),
            source=node,
        )

    @property
    def key(self) -> tuple[int, int]:
        """Raw (row, column) position, shared by split siblings."""
        return (self.row, self.column)

    @property
    def is_header(self) -> bool:
        return tag_kind(self.source) == "th"

    @property
    def is_data(self) -> bool:
        return tag_kind(self.source) == "td"

    @property
    def is_placeholder(self) -> bool:
        """True for cells that stand for a missing form."""
        text = self.raw_text.strip()
        return not text or text in PLACEHOLDERS

    def has_attribute(self, name: str) -> bool:
        return self.source is not None and self.source.has_attr(name)

    def split(self, delimiter: str = "\n") -> list[Cell]:
        """
        Split a cell holding several stacked entries into one cell per entry.

        Each piece is trimmed; everything except the text is shared with this
        cell. A cell without the delimiter comes back as a single-item list.
        """
        if delimiter not in self.raw_text:
            return [self]
        return [
            dataclasses.replace(self, raw_text=piece.strip())
            for piece in self.raw_text.split(delimiter)
        ]


# =============================================================================
# Virtual grid
# =============================================================================


class VirtualGrid:
    """Mapping from virtual (row, col) to the cell that covers it."""

    def __init__(self):
        self._cells: dict[tuple[int, int], Cell] = {}
        # raw (row, column) -> top-left virtual coordinate
        self._origins: dict[tuple[int, int], tuple[int, int]] = {}

    def _claim(self, row: int, col: int, cell: Cell) -> bool:
        coord = (row, col)
        if coord in self._cells:
            logger.debug(f"overlapping span at {coord}, keeping first cell")
            return False
        self._cells[coord] = cell
        origin = self._origins.get(cell.key)
        if origin is None or coord < origin:
            self._origins[cell.key] = coord
        return True

    def cell_at(self, row: int, col: int) -> Cell:
        try:
            return self._cells[(row, col)]
        except KeyError:
            raise OutOfRange(row, col) from None

    def get(self, row: int, col: int, default: Optional[Cell] = None) -> Optional[Cell]:
        return self._cells.get((row, col), default)

    def text_at(self, row: int, col: int) -> str:
        return self.cell_at(row, col).raw_text

    def logical_coordinates(self, cell: Cell) -> tuple[int, int]:
        """
        Top-left virtual coordinate of a cell.

        Split siblings resolve to the coordinate of the cell they came from.
        """
        try:
            return self._origins[cell.key]
        except KeyError:
            raise OutOfRange(cell.row, cell.column) from None

    def coordinates_of(self, cell: Cell) -> list[tuple[int, int]]:
        """Every virtual coordinate covered by `cell` (or its split parent)."""
        return sorted(coord for coord, c in self._cells.items() if c.key == cell.key)

    @property
    def n_rows(self) -> int:
        return max((r for r, _ in self._cells), default=-1) + 1

    @property
    def n_cols(self) -> int:
        return max((c for _, c in self._cells), default=-1) + 1

    def items(self):
        return self._cells.items()

    def __contains__(self, coord) -> bool:
        return coord in self._cells

    def __len__(self) -> int:
        return len(self._cells)


def virtualize(rows: Sequence[Sequence[Cell]]) -> VirtualGrid:
    """
    Expand raw rows of cells into a virtual grid.

    Rows are processed in source order, each with a column cursor that starts
    at 0. A cell claims `colspan` free coordinates in its own row, stepping
    over coordinates already taken by rowspans from above, and then the same
    columns in the next `rowspan - 1` rows.
    """
    grid = VirtualGrid()
    for row_index, row in enumerate(rows):
        vcol = 0
        for cell in row:
            cols = []
            remaining = cell.colspan
            while remaining > 0:
                if (row_index, vcol) in grid:
                    vcol += 1
                    continue
                grid._claim(row_index, vcol, cell)
                cols.append(vcol)
                remaining -= 1
            for extra in range(1, cell.rowspan):
                for col in cols:
                    grid._claim(row_index + extra, col, cell)
    return grid


# =============================================================================
# Tables
# =============================================================================


def own_rows(table: Tag) -> list[Tag]:
    """The <tr> elements of `table` itself, excluding rows of nested tables."""
    return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]


def row_cells(tr: Tag) -> list[Tag]:
    return tr.find_all(["th", "td"], recursive=False)


@dataclass
class Table:
    """A table element with its raw rows and virtual grid."""

    node: Tag
    rows: list[list[Cell]]
    grid: VirtualGrid

    @classmethod
    def from_node(cls, node: Tag, strip: Iterable[str] = ("sup",)) -> Table:
        strip = tuple(strip)
        rows = [
            [Cell.from_node(td, col, row, strip) for col, td in enumerate(row_cells(tr))]
            for row, tr in enumerate(own_rows(node))
        ]
        return cls(node=node, rows=rows, grid=virtualize(rows))

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    def cells(self) -> Iterator[Cell]:
        for row in self.rows:
            yield from row

    def raw_cell(self, row: int, col: int) -> Cell:
        """Cell by raw position (index in row, row index)."""
        if not 0 <= row < len(self.rows) or not 0 <= col < len(self.rows[row]):
            raise OutOfRange(row, col)
        return self.rows[row][col]

    def span_column(self, cell: Cell) -> int:
        """Column of `cell` counting the colspans of the cells to its left in its row."""
        return sum(left.colspan for left in self.rows[cell.row][: cell.column])
