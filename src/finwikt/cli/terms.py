#!/usr/bin/env python3
"""
fwlist - Build a list of Finnish terms from English Wiktionary.

Crawls the Finnish category tree and the alphabetical Index:Finnish pages
and writes one term per line, in first-seen order.

    fwlist -o finnish-terms.txt
    fwlist --limit 500
"""

import argparse
import logging
import sys
from pathlib import Path

from finwikt.config import get_config
from finwikt.errors import ConfigError
from finwikt.fetch import download
from finwikt.listing import crawl_all
from finwikt.progress import CrawlProgress


logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Build a list of Finnish terms from English Wiktionary",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--limit", "-n", type=int, help="Stop after N terms")
    parser.add_argument("--output", "-o", metavar="FILE", help="Write terms to FILE (default: stdout)")
    parser.add_argument("--quiet", "-q", action="store_true", help="No progress panel")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        listing = get_config().listing
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    if listing is None:
        logger.error("No listing section in the configuration")
        return 2

    if args.quiet:
        terms = crawl_all(listing, download, limit=args.limit)
    else:
        with CrawlProgress("Crawling Finnish term lists") as progress:
            terms = crawl_all(listing, download, limit=args.limit, progress=progress)

    text = "".join(f"{term}\n" for term in terms)
    if args.output:
        path = Path(args.output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        print(f"Wrote {len(terms):,} terms to {path}", file=sys.stderr)
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
