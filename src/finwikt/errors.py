"""
Exception hierarchy for finwikt.

Recoverable conditions (unknown table shapes, out-of-range grid lookups,
unmatched example markup) are raised close to where they are detected and
caught by the unit that owns them, which records a Diagnostic and carries on.
Only InputContractError is allowed to abort an entry or section under
construction; page-level code catches it and moves to the next sibling.
"""


class FinwiktError(Exception):
    """Base class for all finwikt errors."""


class OutOfRange(FinwiktError, LookupError):
    """A virtual-grid or raw-row lookup fell outside the populated table."""

    def __init__(self, row: int, col: int):
        super().__init__(f"no cell at ({row}, {col})")
        self.row = row
        self.col = col


class TableShapeError(FinwiktError):
    """A table matched none of the known inflection-table shapes."""


class ExampleShapeError(FinwiktError):
    """An example block matched none of the known example shapes."""

    def __init__(self, fragment: str):
        super().__init__(f"unknown example shape: {fragment}")
        self.fragment = fragment


class InputContractError(FinwiktError):
    """A builder was handed input it cannot work with (empty scope, non-heading)."""


class ConfigError(FinwiktError):
    """Dialect configuration is missing or malformed."""


class FetchError(FinwiktError):
    """A page could not be retrieved."""
