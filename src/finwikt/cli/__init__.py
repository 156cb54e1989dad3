"""
Command-line interface entry points for finwikt.

Entry points:
- fwextract: Extract Finnish entries from Wiktionary pages
- fwlist: Crawl English Wiktionary index and category pages for terms
"""
