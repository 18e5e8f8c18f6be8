"""Shared utilities for restricted XML parsing.

This module provides configuration objects, the error taxonomy, result types,
diagnostic sinks and logging helpers used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    DocumentConfig,
    ParserConfig,
    QueryConfig,
    ScannerConfig,
    TreeConfig,
)
from .diagnostics import (
    DiagnosticCollector,
    DiagnosticReporter,
    DiagnosticSink,
    LoggingDiagnosticSink,
    NullDiagnosticSink,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ErrorKind,
    PerformanceMetrics,
    XMLParseError,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "DocumentConfig",
    "ParserConfig",
    "QueryConfig",
    "ScannerConfig",
    "TreeConfig",
    "DiagnosticCollector",
    "DiagnosticReporter",
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "NullDiagnosticSink",
    "CorrelationLogger",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "ErrorKind",
    "PerformanceMetrics",
    "XMLParseError",
]
