"""
Usage examples and definition notes.

On en.wiktionary an example is a Finnish sentence with its English gloss,
written in one of three nested-list shapes:

    <dd>Finnish sentence<dl><dd>English sentence</dd></dl></dd>          (nested)
    <dd><i>Finnish sentence</i>...<dl><dd>English sentence</dd></dl></dd> (italic)
    <dd><ul><li>Finnish sentence<ul><li>English</li></ul></li></ul></dd>  (list)

Shapes are matched against the serialized fragment, most specific first.
Children of a definition's <dl> without a nested list are notes.
"""

import re
from typing import Optional

from bs4 import Tag

from finwikt.errors import ExampleShapeError
from finwikt.models import Example, Link, Note
from finwikt.nodes import links_in, normalize_text, parse_html


ANNOTATION_SEPARATOR = "|"


def _open(tag: str) -> str:
    """Opening tag pattern that tolerates attributes."""
    return rf"<{tag}(?:\s[^>]*)?>"


# Order matters: the first shape that matches wins
EXAMPLE_SHAPES = [
    (
        "nested",
        re.compile(
            _open("dd") + r"(?P<primary>.+?)" + _open("dl") + _open("dd")
            + r"(?P<secondary>.+?)</dd></dl></dd>"
        ),
    ),
    (
        "italic",
        re.compile(
            _open("dd") + r"[^<]*" + _open("i") + r"(?P<primary>.+?)</i>(?P<extra>.*)"
            + _open("dl") + r"[^<]*" + _open("dd") + r"(?P<secondary>.+?)</dd>",
            re.DOTALL,
        ),
    ),
    (
        "list",
        re.compile(
            _open("dd") + r"[^<]*" + _open("ul") + r"[^<]*" + _open("li")
            + r"(?P<primary>.+?)" + _open("ul") + r"[^<]*" + _open("li")
            + r"(?P<secondary>.+?)</li>[^<]*</ul>[^<]*</li>[^<]*</ul>[^<]*</dd>",
            re.DOTALL,
        ),
    ),
]


def bracket_split(text: str) -> tuple[str, str]:
    """
    Separate parenthetical annotations from a sentence.

    Returns the sentence without its parenthesized parts and the annotations,
    each prefixed with the offset in the plain text where it occurred:

        >>> bracket_split("Lorum (ipsum) sic (dolor) amet.")
        ('Lorum sic amet.', '[6](ipsum)|[10](dolor)')

    The offset is taken before the space ahead of the parenthesis is dropped.
    Nested parentheses stay inside their outermost annotation.
    """
    output = ""
    annotations: list[str] = []
    current = ""
    depth = 0

    for ch in text:
        if ch == "(":
            if depth == 0:
                current = f"[{len(output)}]("
                if output.endswith(" "):
                    output = output[:-1]
            else:
                current += ch
            depth += 1
        elif ch == ")" and depth > 0:
            depth -= 1
            current += ch
            if depth == 0:
                annotations.append(current)
                current = ""
        elif depth > 0:
            current += ch
        else:
            output += ch

    if current:
        # Unclosed parenthesis
        annotations.append(current)
    return output.rstrip(), ANNOTATION_SEPARATOR.join(annotations)


def _outer_html(node: Tag) -> str:
    return str(node).replace("\r", "").replace("\n", "")


def match_example(node: Tag) -> Optional[re.Match]:
    fragment = _outer_html(node)
    for _, pattern in EXAMPLE_SHAPES:
        m = pattern.search(fragment)
        if m is not None:
            return m
    return None


def is_example(node: Tag) -> bool:
    return match_example(node) is not None


def _fragment_text_and_links(fragment: str) -> tuple[str, tuple[Link, ...]]:
    doc = parse_html(fragment)
    return normalize_text(doc.get_text()), links_in(doc)


def parse_example(node: Tag, primary_language: str = "", secondary_language: str = "") -> Example:
    """
    Decompose one example block into its sentence pair.

    Raises:
        ExampleShapeError: If the block matches none of the known shapes
    """
    m = match_example(node)
    if m is None:
        raise ExampleShapeError(_outer_html(node))

    primary, links = _fragment_text_and_links(m.group("primary"))
    primary, note = bracket_split(primary)
    secondary, secondary_links = _fragment_text_and_links(m.group("secondary"))
    return Example(
        primary_text=primary,
        secondary_text=secondary,
        note=note,
        links=links,
        secondary_links=secondary_links,
        primary_language=primary_language,
        secondary_language=secondary_language,
    )


def looks_like_example(node: Tag) -> bool:
    """A <dd> carrying a nested list, the frame every example shape shares."""
    return node.name == "dd" and node.find(["dl", "ul"]) is not None


def examples_in(dl: Tag, primary_language: str = "", secondary_language: str = "") -> list[Example]:
    """
    Examples among the direct children of a <dl>.

    Raises:
        ExampleShapeError: If a child framed like an example matches no shape
    """
    return [
        parse_example(child, primary_language, secondary_language)
        for child in dl.find_all(True, recursive=False)
        if looks_like_example(child)
    ]


def parse_note(node: Tag) -> Note:
    """
    A non-example definition note.

    Notes of the form "primary = secondary" are split, and each side keeps
    the links whose text it contains.
    """
    text = normalize_text(node.get_text())
    links = links_in(node)
    if "=" not in text:
        return Note(text=text, links=links)

    parts = text.split("=")
    primary = parts[0].strip()
    secondary = parts[-1].strip()
    return Note(
        text=text,
        primary_text=primary,
        secondary_text=secondary,
        links=tuple(link for link in links if link.display_text and link.display_text in primary),
        secondary_links=tuple(
            link for link in links if link.display_text and link.display_text in secondary
        ),
    )


def notes_in(dl: Tag) -> list[Note]:
    return [
        parse_note(child)
        for child in dl.find_all(True, recursive=False)
        if not looks_like_example(child)
    ]


def simple_example(dd: Tag, primary_language: str = "") -> Example:
    """A single-language example: the whole block is the sentence."""
    return Example(
        primary_text=normalize_text(dd.get_text()),
        links=links_in(dd),
        primary_language=primary_language,
    )
