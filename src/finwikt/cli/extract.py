#!/usr/bin/env python3
"""
fwextract - Extract Finnish entries from Wiktionary pages.

Fetches each term from the requested editions (or reads a saved page with
--html) and prints the result as JSON or as a tree.

    fwextract koira                        # fi + en, JSON to stdout
    fwextract koira juosta --format tree
    fwextract --html koira.html --dialect en
    fwextract koira kissa -o terms.jsonl   # one JSON object per line
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console

from finwikt.errors import ConfigError, FinwiktError
from finwikt.fetch import download
from finwikt.output import dumps, write_jsonl
from finwikt.page import extract_html
from finwikt.render import print_result
from finwikt.wiktionary import DEFAULT_DIALECTS, get_term


logger = logging.getLogger(__name__)

DIALECT_CHOICES = ("en", "fi", "all")


def _dialects(choice: str) -> tuple[str, ...]:
    return DEFAULT_DIALECTS if choice == "all" else (choice,)


def _results(args):
    fetch = None if args.no_subpages else download
    if args.html:
        dialect = "en" if args.dialect == "all" else args.dialect
        html = Path(args.html).read_text(encoding="utf-8")
        yield extract_html(html, dialect, fetch=fetch)
        return
    for term in args.terms:
        yield get_term(term, _dialects(args.dialect), fetch=fetch)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Extract Finnish entries from Wiktionary pages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("terms", nargs="*", help="Terms to look up")
    parser.add_argument(
        "--dialect", "-d", choices=DIALECT_CHOICES, default="all",
        help="Wiktionary edition to read (default: all)",
    )
    parser.add_argument("--html", metavar="FILE", help="Extract from a saved HTML page instead")
    parser.add_argument(
        "--format", "-f", choices=("json", "tree"), default="json",
        help="Output format for stdout (default: json)",
    )
    parser.add_argument("--output", "-o", metavar="FILE", help="Write JSONL to FILE")
    parser.add_argument(
        "--morphemes", action="store_true", help="List morphemes under tables (tree format)"
    )
    parser.add_argument(
        "--no-subpages", action="store_true",
        help="Do not fetch linked pages (verb conjugation appendix)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if not args.terms and not args.html:
        parser.error("give at least one term, or --html FILE")

    try:
        if args.output:
            count = write_jsonl(_results(args), Path(args.output))
            print(f"Wrote {count} results to {args.output}")
            return 0

        console = Console()
        for result in _results(args):
            if args.format == "tree":
                print_result(result, console, morphemes=args.morphemes)
            else:
                sys.stdout.write(dumps(result, indent=True).decode("utf-8") + "\n")
    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        return 1
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except FinwiktError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
