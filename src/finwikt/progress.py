"""
progress.py — Live rich panel for term-list crawls.

A CrawlProgress is itself the progress callback that listing.crawl() calls
after every page, so the panel always shows the crawl's own state:

    with CrawlProgress("Crawling Finnish term lists") as progress:
        terms = crawl_all(listing, download, progress=progress)
"""

import time
from typing import Callable, Optional
from urllib.parse import unquote

from rich import box
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from finwikt.listing import CrawlState


class CrawlProgress:
    """Context manager redrawing one panel of crawl counters in place."""

    def __init__(self, title: str = "Crawl", refresh_per_second: int = 4,
                 clock: Callable[[], float] = time.monotonic):
        self.title = title
        self.refresh_per_second = refresh_per_second
        self.clock = clock
        self.started = clock()
        self.rows: dict[str, str] = {}
        self.failed = 0
        self.live: Optional[Live] = None

    def __enter__(self):
        self.started = self.clock()
        self.live = Live(self.panel(), refresh_per_second=self.refresh_per_second)
        self.live.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.live:
            self.live.update(self.panel())
            self.live.__exit__(exc_type, exc_val, exc_tb)
        return False

    def __call__(self, state: CrawlState, url: str) -> None:
        self.rows = self.summarize(state, url)
        self.failed = len(state.failed)
        if self.live:
            self.live.update(self.panel())

    def summarize(self, state: CrawlState, url: str) -> dict[str, str]:
        """Display rows for the state after the page at `url`."""
        elapsed = self.clock() - self.started
        pages = len(state.visited)
        speed = pages / elapsed if elapsed > 0 else 0.0
        return {
            "Pages": f"{pages:,}",
            "Terms": f"{len(state.terms):,}",
            "Queue": f"{len(state.pending):,}",
            "Failed": f"{len(state.failed):,}",
            "Current": page_name(url),
            "Elapsed": format_elapsed(elapsed),
            "Speed": f"{speed:,.1f} pages/s",
        }

    def panel(self) -> Panel:
        grid = Table.grid(padding=(0, 2))
        grid.add_column(justify="left", no_wrap=True)
        grid.add_column(justify="right", no_wrap=True)
        for key, value in self.rows.items():
            style = "bold red" if key == "Failed" and self.failed else "bright_cyan"
            grid.add_row(Text(f"{key}:", style="bold grey50"), Text(value, style=style))
        return Panel(grid, title=self.title, box=box.SIMPLE, border_style="bright_black")


def page_name(url: str) -> str:
    """Readable wiki page name from a page URL."""
    return unquote(url.rsplit("/wiki/", 1)[-1]).replace("_", " ")


def format_elapsed(seconds: float) -> str:
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
