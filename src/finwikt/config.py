"""
Dialect configuration.

Loads data/dialects.yaml (or the file named by $FINWIKT_CONFIG) into
dataclasses. The YAML supports anchors (&name) and aliases (*name); aliases
used inside lists create nested lists, which are flattened during loading.

The loaded configuration is cached for the life of the process:

    >>> get_dialect("en").language_marker
    'Finnish'
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from finwikt.errors import ConfigError


CONFIG_ENV = "FINWIKT_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "data" / "dialects.yaml"


# =============================================================================
# YAML utilities
# =============================================================================


def flatten_list(items: list[Any]) -> list[str]:
    """
    Flatten a list that may contain nested lists from YAML anchor references.

        common: &common [a, b]
        all: [*common, c]

    loads `all` as [['a', 'b'], 'c']; this returns ['a', 'b', 'c'].
    """
    result: list[str] = []
    for item in items:
        if isinstance(item, list):
            result.extend(flatten_list(item))
        else:
            result.append(str(item))
    return result


# =============================================================================
# Dataclasses
# =============================================================================


@dataclass
class TranslationFilter:
    """Which items of a translations section are kept."""

    heading: str
    keep_prefix: str


@dataclass
class ConjugationLinks:
    """Where verb conjugation sub-pages live (fi only)."""

    link_prefix: str
    url_template: str

    def url_for(self, verb: str) -> str:
        return self.url_template.format(verb=verb)


@dataclass
class DialectConfig:
    """Layout conventions of one Wiktionary edition."""

    code: str
    name: str
    language_marker: str
    url_template: str
    entry_tags: list[str] = field(default_factory=lambda: ["h3"])
    heading_tags: list[str] = field(default_factory=lambda: ["h3", "h4", "h5"])
    stop_tags: list[str] = field(default_factory=lambda: ["noscript"])
    skip_selectors: list[str] = field(default_factory=list)
    nested_categories: bool = False
    parts_of_speech: list[str] = field(default_factory=list)
    primary_language: str = ""
    secondary_language: str = ""
    translations: Optional[TranslationFilter] = None
    conjugation: Optional[ConjugationLinks] = None

    def is_part_of_speech(self, heading: str) -> bool:
        return heading.strip().lower() in self.parts_of_speech

    def term_url(self, term: str) -> str:
        return self.url_template.format(term=term)


@dataclass
class ListingConfig:
    """Selectors and start pages for term-list crawling."""

    base_url: str
    index_urls: list[str] = field(default_factory=list)
    index_link_selector: str = ""
    index_entry_selector: str = ""
    category_urls: list[str] = field(default_factory=list)
    category_link_selector: str = ""
    category_entry_selector: str = ""


@dataclass
class Config:
    dialects: dict[str, DialectConfig]
    listing: Optional[ListingConfig] = None
    path: Optional[Path] = None


# =============================================================================
# Loading
# =============================================================================


def _require(data: dict, key: str, where: str) -> Any:
    if key not in data:
        raise ConfigError(f"{where}: missing required key '{key}'")
    return data[key]


def _parse_dialect(code: str, data: dict) -> DialectConfig:
    where = f"dialect '{code}'"
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: expected a mapping")

    languages = data.get("example_languages") or {}
    translations = None
    if data.get("translations"):
        t = data["translations"]
        translations = TranslationFilter(
            heading=_require(t, "heading", where),
            keep_prefix=_require(t, "keep_prefix", where),
        )
    conjugation = None
    if data.get("conjugation"):
        c = data["conjugation"]
        conjugation = ConjugationLinks(
            link_prefix=_require(c, "link_prefix", where),
            url_template=_require(c, "url_template", where),
        )

    return DialectConfig(
        code=code,
        name=data.get("name", code),
        language_marker=_require(data, "language_marker", where),
        url_template=_require(data, "url_template", where),
        entry_tags=[t.lower() for t in flatten_list(data.get("entry_tags", ["h3"]))],
        heading_tags=[t.lower() for t in flatten_list(data.get("heading_tags", ["h3", "h4", "h5"]))],
        stop_tags=[t.lower() for t in flatten_list(data.get("stop_tags", ["noscript"]))],
        skip_selectors=flatten_list(data.get("skip_selectors") or []),
        nested_categories=bool(data.get("nested_categories", False)),
        parts_of_speech=[p.lower() for p in flatten_list(data.get("parts_of_speech") or [])],
        primary_language=languages.get("primary", "") or "",
        secondary_language=languages.get("secondary", "") or "",
        translations=translations,
        conjugation=conjugation,
    )


def _parse_listing(data: dict) -> ListingConfig:
    return ListingConfig(
        base_url=_require(data, "base_url", "listing"),
        index_urls=flatten_list(data.get("index_urls") or []),
        index_link_selector=data.get("index_link_selector", ""),
        index_entry_selector=data.get("index_entry_selector", ""),
        category_urls=flatten_list(data.get("category_urls") or []),
        category_link_selector=data.get("category_link_selector", ""),
        category_entry_selector=data.get("category_entry_selector", ""),
    )


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load dialect configuration from a YAML file.

    Args:
        path: YAML file to read; defaults to $FINWIKT_CONFIG, then the
              packaged data/dialects.yaml

    Raises:
        ConfigError: If the file is missing or malformed
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV)
        path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
    path = Path(path)

    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict) or not data.get("dialects"):
        raise ConfigError(f"{path}: no dialects defined")

    dialects = {
        str(code): _parse_dialect(str(code), body)
        for code, body in data["dialects"].items()
    }
    listing = _parse_listing(data["listing"]) if data.get("listing") else None
    return Config(dialects=dialects, listing=listing, path=path)


# Lazy-loaded configuration
_CONFIG: Optional[Config] = None


def get_config() -> Config:
    """Get the process-wide configuration, loading it lazily."""
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config()
    return _CONFIG


def reset_config() -> None:
    """Forget the cached configuration (tests, config reloads)."""
    global _CONFIG
    _CONFIG = None


def get_dialect(code: str) -> DialectConfig:
    """Look up a dialect by code ('en', 'fi')."""
    dialects = get_config().dialects
    if code not in dialects:
        known = ", ".join(sorted(dialects))
        raise ConfigError(f"Unknown dialect '{code}' (known: {known})")
    return dialects[code]


def dialect_for_marker(language_marker: str) -> DialectConfig:
    """The dialect whose language marker matches, case-insensitively."""
    wanted = language_marker.strip().lower()
    for dialect in get_config().dialects.values():
        if dialect.language_marker.lower() == wanted:
            return dialect
    raise ConfigError(f"No dialect uses language marker '{language_marker}'")
