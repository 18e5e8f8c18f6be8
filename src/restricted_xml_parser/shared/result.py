"""Result objects, error taxonomy and diagnostic types for restricted XML parsing.

This module defines the failure kinds shared by every processing layer, the
exception raised by the scanning and tree building layers, and the diagnostic
entries recorded for every failure.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Kinds of failure detected while parsing or querying."""

    ALLOCATION_FAILURE = auto()       # Storage could not be acquired
    MALFORMED_TAG = auto()            # Structurally invalid tag or attribute
    UNEXPECTED_END_OF_INPUT = auto()  # Stream ended mid-construct
    UNBALANCED_TAGS = auto()          # Closing tag without open node, root never closed
    BUFFER_OVERFLOW = auto()          # Name, value or path segment exceeds capacity
    NOT_FOUND = auto()                # Query path does not resolve
    DEPTH_LIMIT_EXCEEDED = auto()     # Nesting deeper than the configured maximum


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CRITICAL = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with source location and failure kind."""

    severity: DiagnosticSeverity
    message: str
    component: str
    kind: Optional[ErrorKind] = None
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to a JSON friendly dictionary."""
        result: Dict[str, Any] = {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
        }
        if self.kind is not None:
            result["kind"] = self.kind.name
        if self.position is not None:
            result["position"] = dict(self.position)
        if self.details:
            result["details"] = dict(self.details)
        return result


class XMLParseError(Exception):
    """Raised when the input cannot be turned into a tree.

    Attributes:
        kind: Failure kind
        message: Human readable description
        position: Line, column and offset where the failure was detected
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        position: Optional[Dict[str, int]] = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.position = position
        super().__init__(self._format())

    def _format(self) -> str:
        if self.position:
            return (
                f"{self.kind.name}: {self.message} "
                f"(line {self.position['line']}, column {self.position['column']})"
            )
        return f"{self.kind.name}: {self.message}"


@dataclass
class PerformanceMetrics:
    """Performance metrics for a parse operation."""

    processing_time_ms: float = 0.0
    bytes_read: int = 0
    tags_read: int = 0
    node_count: int = 0

    @property
    def bytes_per_second(self) -> float:
        """Calculate bytes read per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_read * 1000.0) / self.processing_time_ms
