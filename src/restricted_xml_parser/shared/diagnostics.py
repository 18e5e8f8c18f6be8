"""Diagnostic sinks for restricted XML parsing.

Every failure detected by the scanners, the tree builder or the path resolver
is recorded through a sink before it is raised or turned into a query miss.
A sink is any callable accepting a :class:`DiagnosticEntry`; parsing code never
writes to a console or a logger directly, it is handed a sink instead.
"""

import logging
from typing import Callable, Dict, List, Optional

from .logging import CorrelationLogger, get_logger
from .result import DiagnosticEntry, DiagnosticSeverity, ErrorKind, XMLParseError

DiagnosticSink = Callable[[DiagnosticEntry], None]

_SEVERITY_LEVELS = {
    DiagnosticSeverity.DEBUG: logging.DEBUG,
    DiagnosticSeverity.INFO: logging.INFO,
    DiagnosticSeverity.WARNING: logging.WARNING,
    DiagnosticSeverity.ERROR: logging.ERROR,
    DiagnosticSeverity.CRITICAL: logging.CRITICAL,
}


class LoggingDiagnosticSink:
    """Forward diagnostics to a correlation-aware logger."""

    def __init__(self, logger: Optional[CorrelationLogger] = None) -> None:
        self.logger = logger if logger is not None else get_logger(
            __name__, component="diagnostics"
        )

    def __call__(self, entry: DiagnosticEntry) -> None:
        extra = {
            "diagnostic_component": entry.component,
            "error_kind": entry.kind.name if entry.kind else None,
            "position": entry.position,
        }
        self.logger.log(_SEVERITY_LEVELS[entry.severity], entry.message, extra=extra)


class DiagnosticCollector:
    """Keep every diagnostic in memory, optionally forwarding to another sink."""

    def __init__(self, forward: Optional[DiagnosticSink] = None) -> None:
        self.entries: List[DiagnosticEntry] = []
        self._forward = forward

    def __call__(self, entry: DiagnosticEntry) -> None:
        self.entries.append(entry)
        if self._forward is not None:
            self._forward(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def kinds(self) -> List[ErrorKind]:
        """Return the failure kinds recorded so far, in order."""
        return [entry.kind for entry in self.entries if entry.kind is not None]

    def clear(self) -> None:
        self.entries.clear()


class NullDiagnosticSink:
    """Discard every diagnostic."""

    def __call__(self, entry: DiagnosticEntry) -> None:
        return None


class DiagnosticReporter:
    """Bind a sink to a component and build diagnostic entries for it.

    Args:
        sink: Destination of the entries, defaults to logging
        component: Component name written in each entry
        correlation_id: Optional correlation ID for request tracking
    """

    def __init__(
        self,
        sink: Optional[DiagnosticSink] = None,
        component: str = "parser",
        correlation_id: Optional[str] = None,
    ) -> None:
        self.sink: DiagnosticSink = sink if sink is not None else LoggingDiagnosticSink()
        self.component = component
        self.correlation_id = correlation_id

    def for_component(self, component: str) -> "DiagnosticReporter":
        """Return a reporter sharing this sink under another component name."""
        return DiagnosticReporter(self.sink, component, self.correlation_id)

    def record(
        self,
        severity: DiagnosticSeverity,
        message: str,
        kind: Optional[ErrorKind] = None,
        position: Optional[Dict[str, int]] = None,
        **details: object,
    ) -> DiagnosticEntry:
        entry = DiagnosticEntry(
            severity=severity,
            message=message,
            component=self.component,
            kind=kind,
            position=position,
            details=dict(details) or None,
            correlation_id=self.correlation_id,
        )
        self.sink(entry)
        return entry

    def failure(
        self,
        kind: ErrorKind,
        message: str,
        position: Optional[Dict[str, int]] = None,
    ) -> XMLParseError:
        """Record an ERROR diagnostic and return the exception to raise."""
        self.record(DiagnosticSeverity.ERROR, message, kind, position)
        return XMLParseError(kind, message, position)

    def warning(
        self,
        kind: Optional[ErrorKind],
        message: str,
        position: Optional[Dict[str, int]] = None,
        **details: object,
    ) -> DiagnosticEntry:
        return self.record(DiagnosticSeverity.WARNING, message, kind, position, **details)
