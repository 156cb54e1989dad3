"""
render.py — terminal rendering of extraction results as a rich Tree.

    koira (fi)
    ├── Substantiivi  koira (10)
    │   ├── 1. kotieläimenä pidetty nelijalkainen
    │   │   └── »koira haukkuu«
    │   └── table: declension (28 forms)
    └── Etymologia
"""

from typing import Optional

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from finwikt.models import Definitions, Entry, InflectionBlock, Item, Items, PageResult, Section, Severity


MAX_MORPHEMES = 8


def _block_label(block: InflectionBlock) -> Text:
    label = Text(f"table: {block.shape}", style="magenta")
    label.append(f" ({len(block.morphemes)} forms)", style="grey50")
    if block.caption:
        label.append(f" {block.caption}", style="italic grey50")
    return label


def add_block(tree: Tree, block: InflectionBlock, morphemes: bool = False) -> None:
    node = tree.add(_block_label(block))
    if not morphemes:
        return
    for morpheme in block.morphemes[:MAX_MORPHEMES]:
        node.add(Text(f"{morpheme.surface_form}  ", style="bright_cyan")
                 .append(" ".join(morpheme.attributes), style="grey50"))
    if len(block.morphemes) > MAX_MORPHEMES:
        node.add(Text(f"... {len(block.morphemes) - MAX_MORPHEMES} more", style="grey50"))


def add_section(tree: Tree, section: Section, morphemes: bool = False) -> None:
    label = Text(section.heading, style="bold")
    if isinstance(section, Entry):
        label.stylize("bold green")
        if section.headword:
            label.append(f"  {section.headword}", style="bright_white")
        if section.info:
            label.append(f" {section.info}", style="grey50")
        if section.parent_heading:
            label.append(f"  [{section.parent_heading}]", style="grey50")
    node = tree.add(label)

    content = section.content
    if isinstance(content, Definitions):
        for definition in content.definitions:
            d_node = node.add(f"{definition.rank}. {definition.text}")
            for example in definition.examples:
                text = Text(f"»{example.primary_text}«", style="italic")
                if example.secondary_text:
                    text.append(f"  {example.secondary_text}", style="grey50")
                d_node.add(text)
            for note in definition.notes:
                d_node.add(Text(note.text, style="yellow"))
    elif isinstance(content, Items):
        for unit in content.units:
            if isinstance(unit, Item):
                node.add(unit.text)
            else:
                add_block(node, unit, morphemes)

    for block in section.tables:
        add_block(node, block, morphemes)
    for sub in section.subsections:
        add_section(node, sub, morphemes)


def result_tree(result: PageResult, morphemes: bool = False) -> Tree:
    """A rich Tree of a result's entries, sections and warnings."""
    title = Text(result.term or "(no term)", style="bold bright_white")
    if result.dialect:
        title.append(f" ({result.dialect})", style="grey50")
    tree = Tree(title)
    if result.error:
        tree.add(Text(f"error: {result.error}", style="red"))
    for entry in result.entries:
        add_section(tree, entry, morphemes)
    for section in result.sections:
        add_section(tree, section, morphemes)
    for diagnostic in result.diagnostics:
        if diagnostic.severity is Severity.WARNING:
            tree.add(Text(f"warning: {diagnostic.message}", style="yellow"))
    return tree


def print_result(result: PageResult, console: Optional[Console] = None,
                 morphemes: bool = False) -> None:
    (console or Console()).print(result_tree(result, morphemes))
