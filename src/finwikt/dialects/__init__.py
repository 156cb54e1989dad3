"""Page builders, one per supported Wiktionary edition."""

from finwikt.dialects import enwikt, fiwikt
from finwikt.errors import ConfigError


BUILDERS = {
    "en": enwikt.build_page,
    "fi": fiwikt.build_page,
}


def builder_for(code: str):
    try:
        return BUILDERS[code]
    except KeyError:
        raise ConfigError(f"No page builder for dialect '{code}'") from None
