"""
Definition builders for the two dialects.

Both take one <li> of a definition list and its 1-based rank. The <li> is
cloned before example lists are cut out of it, so the page tree is never
modified.
"""

import logging
from typing import Optional

from bs4 import Tag

from finwikt.diagnostics import Diagnostics
from finwikt.errors import ExampleShapeError
from finwikt.examples import examples_in, notes_in, simple_example
from finwikt.models import Definition
from finwikt.nodes import links_in, normalize_text, strip_descendants


logger = logging.getLogger(__name__)

EN_DEFINITION_STRIP = ("span.HQToggle",)


def _outer_lists(root: Tag, name: str) -> list[Tag]:
    """<name> descendants of `root` not nested inside another <name> under root."""
    outer = []
    for node in root.find_all(name):
        enclosing = node.find_parent(name)
        if enclosing is None or not any(p is root for p in enclosing.parents):
            outer.append(node)
    return outer


def en_definition(li: Tag, rank: int, diagnostics: Optional[Diagnostics] = None,
                  primary_language: str = "fi", secondary_language: str = "en") -> Definition:
    """
    One en.wiktionary definition.

    Every <dl> in the item contributes its examples; notes come from the
    first <dl> only. An example block of unknown shape costs the definition
    its examples but not the definition itself.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()
    clone = strip_descendants(li, EN_DEFINITION_STRIP)
    dls = _outer_lists(clone, "dl")

    examples = []
    notes = []
    if dls:
        try:
            for dl in dls:
                examples.extend(examples_in(dl, primary_language, secondary_language))
        except ExampleShapeError as e:
            diagnostics.warn("unknown example shape, examples dropped", e.fragment[:200])
            examples = []
        notes = notes_in(dls[0])
        for dl in dls:
            dl.decompose()

    return Definition(
        rank=rank,
        text=normalize_text(clone.get_text()),
        examples=tuple(examples),
        notes=tuple(notes),
        links=links_in(clone),
    )


def fi_definition(li: Tag, rank: int, primary_language: str = "fi") -> Definition:
    """
    One fi.wiktionary definition; every <dd> of its first <dl> is a
    single-language example.
    """
    clone = strip_descendants(li, ())
    dl = clone.find("dl")
    examples = ()
    if dl is not None:
        examples = tuple(simple_example(dd, primary_language) for dd in dl.find_all("dd"))
        dl.decompose()
    return Definition(
        rank=rank,
        text=normalize_text(clone.get_text()),
        examples=examples,
        links=links_in(clone),
    )
