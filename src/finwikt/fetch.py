"""
fetch.py — retrieval of Wiktionary pages over HTTP.

Pages are downloaded whole with urllib; there is no caching and no retry.
A page that cannot be retrieved is replaced by a synthetic error page so
that extraction still produces a (empty) result for it:

    html = fetch_term_page("koira", "fi")
    result = extract_html(html, "fi")
"""

import logging
from typing import Union
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from finwikt.config import DialectConfig, get_dialect
from finwikt.errors import FetchError
from finwikt.page import error_page


logger = logging.getLogger(__name__)

# ==============================================================================
# Configuration
# ==============================================================================

# Characters left alone when quoting a URL; already-quoted input is unchanged
URL_SAFE = ":/?#[]@!$&'()*+,;=%"

USER_AGENT = "finwikt/0.3 (Finnish Wiktionary extractor)"
TIMEOUT = 30


def _dialect(dialect: Union[DialectConfig, str]) -> DialectConfig:
    return get_dialect(dialect) if isinstance(dialect, str) else dialect


def term_url(term: str, dialect: Union[DialectConfig, str] = "en") -> str:
    """URL of a term's page in the given Wiktionary edition."""
    return _dialect(dialect).term_url(term.replace(" ", "_"))


def conjugation_url(verb: str) -> str:
    """URL of a verb's conjugation appendix on the Finnish Wiktionary."""
    links = get_dialect("fi").conjugation
    if links is None:
        raise FetchError("fi dialect has no conjugation pages configured")
    return links.url_for(verb)


def download(url: str, timeout: int = TIMEOUT) -> str:
    """
    Download a page and decode it as UTF-8.

    Raises:
        FetchError: On HTTP errors, network errors and timeouts
    """
    url = quote(url, safe=URL_SAFE)
    logger.debug(f"GET {url}")
    try:
        req = Request(url, headers={"User-Agent": USER_AGENT})
        with urlopen(req, timeout=timeout) as response:
            return response.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        raise FetchError(f"{e.code}:{e.reason}") from e
    except URLError as e:
        raise FetchError(str(e.reason)) from e
    except TimeoutError as e:
        raise FetchError("Connection timed out") from e


def fetch_term_page(term: str, dialect: Union[DialectConfig, str] = "en") -> str:
    """The term's page, or an error page carrying the failure message."""
    url = term_url(term, dialect)
    try:
        return download(url)
    except FetchError as e:
        logger.warning(f"{url}: {e}")
        return error_page(str(e))
