"""Parse entry points for restricted XML documents.

These functions never raise for malformed input: failures are reported through
the returned :class:`ParseResult`, whose document then holds no tree.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from restricted_xml_parser.character import ByteStream, InputType, open_stream
from restricted_xml_parser.shared import (
    DiagnosticCollector,
    DiagnosticEntry,
    DiagnosticReporter,
    DiagnosticSink,
    LoggingDiagnosticSink,
    ParserConfig,
    PerformanceMetrics,
    XMLParseError,
    get_logger,
)
from restricted_xml_parser.tree import TreeBuilder

from .document import XMLDocument

MS_PER_SECOND = 1000


@dataclass
class ParseResult:
    """Outcome of one parse operation."""

    document: XMLDocument
    success: bool = True
    error: Optional[XMLParseError] = None
    declaration_ok: Optional[bool] = None
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def tree(self):
        return self.document.tree

    @property
    def node_count(self) -> int:
        return self.document.node_count

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "success": self.success,
            "declaration_ok": self.declaration_ok,
            "node_count": self.node_count,
            "processing_time_ms": self.performance.processing_time_ms,
            "bytes_read": self.performance.bytes_read,
            "diagnostics": [entry.to_dict() for entry in self.diagnostics],
        }
        if self.error is not None:
            result["error"] = {"kind": self.error.kind.name, "message": self.error.message}
        return result


def check_declaration(
    stream: ByteStream,
    expected: str,
    reporter: Optional[DiagnosticReporter] = None,
) -> bool:
    """Compare the document's first line with ``expected``.

    The line is consumed only when the document starts with ``<?``, so a
    document without declaration keeps its root tag. A mismatch is advisory:
    it is recorded and reported as False, parsing continues either way.
    """
    if stream.peek(2) != "<?":
        matches = False
    else:
        line = stream.read_line()
        if line.endswith("\n"):
            line = line[:-1]
        matches = line == expected

    if not matches and reporter is not None:
        reporter.warning(
            None,
            "First line is not the expected XML declaration",
            stream.position,
            expected=expected,
        )
    return matches


def parse(
    source: Union[InputType, ByteStream],
    config: Optional[ParserConfig] = None,
    sink: Optional[DiagnosticSink] = None,
    check_xml_declaration: Optional[bool] = None,
    source_path: Optional[str] = None,
) -> ParseResult:
    """Parse a document from bytes, a string or a file-like object.

    Args:
        source: Document content or an open stream
        config: Parser configuration
        sink: Extra diagnostic sink; diagnostics are always collected on the
            result and, by default, logged
        check_xml_declaration: Override ``config.document.check_declaration``
        source_path: Path recorded on the document

    Examples:
        >>> result = parse('<root><item id="1">value</item></root>')
        >>> result.success
        True
        >>> result.document.get_value("root/item$")
        'value'
    """
    config = config or ParserConfig()
    start_time = time.time()
    logger = get_logger(__name__, config.correlation_id, "parse")
    forward = sink if sink is not None else LoggingDiagnosticSink(logger)
    collector = DiagnosticCollector(forward=forward)
    reporter = DiagnosticReporter(collector, "document", config.correlation_id)

    stream = open_stream(source, config.scanner.max_input_bytes, source_path)
    if check_xml_declaration is None:
        check_xml_declaration = config.document.check_declaration

    declaration_ok: Optional[bool] = None
    if check_xml_declaration:
        declaration_ok = check_declaration(
            stream, config.document.expected_declaration, reporter
        )

    builder = TreeBuilder(config, collector, config.correlation_id)
    tree = None
    error: Optional[XMLParseError] = None
    try:
        tree = builder.build(stream)
    except XMLParseError as e:
        error = e
        logger.warning(
            "Parse failed",
            extra={"error_kind": e.kind.name, "source": source_path},
        )

    document = XMLDocument(tree, source_path, declaration_ok, config, collector)
    performance = PerformanceMetrics(
        processing_time_ms=(time.time() - start_time) * MS_PER_SECOND,
        bytes_read=stream.bytes_read,
        tags_read=builder.tags_read,
        node_count=document.node_count,
    )
    return ParseResult(
        document=document,
        success=error is None,
        error=error,
        declaration_ok=declaration_ok,
        diagnostics=collector.entries,
        performance=performance,
        correlation_id=config.correlation_id,
    )


def parse_string(
    xml_string: str,
    config: Optional[ParserConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> ParseResult:
    """Parse a document held in a string; no declaration check by default."""
    return parse(xml_string, config, sink, check_xml_declaration=False)


def parse_file(
    path: Union[str, Path],
    config: Optional[ParserConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> ParseResult:
    """Open ``path``, check its declaration, parse it and close it.

    Raises:
        OSError: when the file cannot be opened
    """
    path = Path(path)
    with path.open("rb") as handle:
        return parse(handle, config, sink, source_path=str(path))


def load_file(
    path: Union[str, Path],
    config: Optional[ParserConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> XMLDocument:
    """Load a document; a failed parse yields a document without tree."""
    return parse_file(path, config, sink).document
