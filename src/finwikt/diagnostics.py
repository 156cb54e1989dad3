"""Diagnostic collection for a single extraction.

A Diagnostics instance is created per page (or per table when a table is
extracted on its own). Components record structural anomalies on it instead
of raising, and the final PageResult carries the collected records. Every
record is logged as well, so operators see them without inspecting results.
"""

import logging

from finwikt.models import Diagnostic, Severity


logger = logging.getLogger(__name__)


class Diagnostics:
    """Append-only accumulator of Diagnostic records."""

    def __init__(self, source: str = ""):
        self.source = source
        self.records: list[Diagnostic] = []

    def note(self, message: str, context: str = "") -> None:
        self._record(Severity.NOTE, message, context)

    def warn(self, message: str, context: str = "") -> None:
        self._record(Severity.WARNING, message, context)

    def extend(self, records) -> None:
        for record in records:
            self.records.append(record)

    def _record(self, severity: Severity, message: str, context: str) -> None:
        self.records.append(Diagnostic(severity, message, context))
        prefix = f"{self.source}: " if self.source else ""
        suffix = f" [{context}]" if context else ""
        if severity is Severity.WARNING:
            logger.warning(f"{prefix}{message}{suffix}")
        else:
            logger.info(f"{prefix}{message}{suffix}")

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.records if d.severity is Severity.WARNING]

    def freeze(self) -> tuple[Diagnostic, ...]:
        return tuple(self.records)

    def __len__(self) -> int:
        return len(self.records)
