"""
finwikt - Finnish dictionary entries from Wiktionary HTML.

    from finwikt import extract_html
    result = extract_html(html, "en")
    for entry in result.entries:
        print(entry.category, [d.text for d in entry.definitions])
"""

from finwikt.errors import (
    ConfigError,
    ExampleShapeError,
    FetchError,
    FinwiktError,
    InputContractError,
    OutOfRange,
    TableShapeError,
)
from finwikt.examples import bracket_split
from finwikt.grid import virtualize
from finwikt.page import extract_html, extract_page
from finwikt.sectioner import segment
from finwikt.tagger import extract_table

__version__ = "0.3.0"

__all__ = [
    "ConfigError",
    "ExampleShapeError",
    "FetchError",
    "FinwiktError",
    "InputContractError",
    "OutOfRange",
    "TableShapeError",
    "bracket_split",
    "extract_html",
    "extract_page",
    "extract_table",
    "segment",
    "virtualize",
]
