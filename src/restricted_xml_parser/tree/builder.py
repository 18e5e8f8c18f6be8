"""Tree construction state machine.

:class:`TreeBuilder` repeatedly reads a tag and folds it into a
:class:`NodeTree`, keeping a cursor on the node currently open. Between a
node's opening tag and the next tag the node's text value is scanned.
"""

import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from restricted_xml_parser.character import EOF, ByteStream, InputType, open_stream
from restricted_xml_parser.shared import (
    DiagnosticReporter,
    DiagnosticSink,
    ErrorKind,
    ParserConfig,
    XMLParseError,
    get_logger,
)
from restricted_xml_parser.tokenization import ScratchBuffer, TagKind, read_tag

from .node import Handle, NodeTree

_LEADING_WHITESPACE = (" ", "\t", "\n", "\r")


class BuilderState(Enum):
    """States of the tree construction state machine."""

    AWAITING_ROOT = auto()
    OPEN = auto()
    DONE = auto()
    FAILED = auto()


@dataclass
class TextScan:
    """Outcome of scanning the text between two tags.

    Attributes:
        value: Accumulated text, None when no printable character was seen
        terminator: ``"<"`` when the scan consumed the next tag's opening
            character, a line feed or carriage return otherwise
    """

    value: Optional[str]
    terminator: str


def read_node_value(
    stream: ByteStream,
    reporter: DiagnosticReporter,
    capacity: int,
) -> TextScan:
    """Scan a node's text value.

    Bytes outside ``'!'..'~'`` are skipped until the first printable byte,
    which starts accumulation. Accumulation then keeps bytes in ``' '..'~'``
    and stops at ``<``, a line feed or a carriage return. Reaching ``<``
    before any printable byte means the node has no value.

    Raises:
        XMLParseError: ``UNEXPECTED_END_OF_INPUT`` when the input ends before
            a tag starts, ``BUFFER_OVERFLOW`` when the value is too long.
    """
    char = stream.read_char()
    while True:
        if char == EOF:
            raise reporter.failure(
                ErrorKind.UNEXPECTED_END_OF_INPUT,
                "Reached end of input while reading a node value",
                stream.position,
            )
        if char == "<":
            return TextScan(None, char)
        if "!" <= char <= "~":
            break
        char = stream.read_char()

    value = ScratchBuffer(capacity, "Node value", reporter, lambda: stream.position)
    value.append(char)
    while True:
        char = stream.read_char()
        if char == EOF:
            raise reporter.failure(
                ErrorKind.UNEXPECTED_END_OF_INPUT,
                "Reached end of input while reading a node value",
                stream.position,
            )
        if char in ("<", "\n", "\r"):
            return TextScan(value.getvalue(), char)
        if " " <= char <= "~":
            value.append(char)


def reach_next_tag(stream: ByteStream, reporter: DiagnosticReporter) -> None:
    """Skip everything up to and including the next ``<``."""
    char = stream.read_char()
    while char != "<":
        if char == EOF:
            raise reporter.failure(
                ErrorKind.UNEXPECTED_END_OF_INPUT,
                "Reached end of input while searching for the next tag",
                stream.position,
            )
        char = stream.read_char()


class TreeBuilder:
    """Build a :class:`NodeTree` from a stream of tags.

    Args:
        config: Parser configuration, defaults to ``ParserConfig()``
        sink: Diagnostic sink receiving every failure
        correlation_id: Optional correlation ID for request tracking
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        sink: Optional[DiagnosticSink] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "tree_builder")
        self.reporter = DiagnosticReporter(sink, "tree_builder", self.correlation_id)
        self._scanner_reporter = self.reporter.for_component("scanner")

        self.state = BuilderState.AWAITING_ROOT
        self.tags_read = 0

    def build(self, source: Union[InputType, ByteStream]) -> NodeTree:
        """Consume ``source`` and return the finished tree.

        Raises:
            XMLParseError: when the input is not a complete, balanced document.
                The partially built tree is destroyed before raising.
        """
        stream = open_stream(source, self.config.scanner.max_input_bytes)
        tree = NodeTree()
        self.state = BuilderState.AWAITING_ROOT
        self.tags_read = 0
        start_time = time.time()

        self.logger.debug("Starting tree build", extra={"source": stream.name})
        try:
            cursor = self._read_root(stream, tree)
            depth = 0
            while self.state is BuilderState.OPEN:
                cursor, depth = self._step(stream, tree, cursor, depth)

            if cursor != tree.root:
                raise self.reporter.failure(
                    ErrorKind.UNBALANCED_TAGS,
                    "Last closed node is not the root node",
                    stream.position,
                )
        except XMLParseError:
            self._discard(tree)
            raise
        except MemoryError as e:
            self._discard(tree)
            raise self.reporter.failure(
                ErrorKind.ALLOCATION_FAILURE,
                "Could not allocate storage while building the tree",
                stream.position,
            ) from e

        self.logger.info(
            "Tree building completed",
            extra={
                "node_count": len(tree),
                "tags_read": self.tags_read,
                "bytes_read": stream.bytes_read,
                "processing_time_ms": (time.time() - start_time) * 1000,
            },
        )
        return tree

    def _read_root(self, stream: ByteStream, tree: NodeTree) -> Handle:
        while stream.peek() in _LEADING_WHITESPACE:
            stream.read_char()

        tag = self._read_tag(stream)
        if tag.kind is TagKind.CLOSING:
            raise self.reporter.failure(
                ErrorKind.UNBALANCED_TAGS,
                f"First tag </{tag.name}> is a closing tag",
                stream.position,
            )

        tree.root = tree.create_from_tag(tag)
        if tag.kind is TagKind.UNIQUE:
            self.state = BuilderState.DONE
        else:
            self.state = BuilderState.OPEN
        return tree.root

    def _step(
        self,
        stream: ByteStream,
        tree: NodeTree,
        cursor: Handle,
        depth: int,
    ):
        capacity = self.config.scanner.scratch_capacity
        scan = read_node_value(stream, self._scanner_reporter, capacity)
        node = tree[cursor]
        if scan.value is not None and node.value is None:
            tree.set_value(cursor, scan.value)
        if scan.terminator != "<":
            reach_next_tag(stream, self._scanner_reporter)

        tag = self._read_tag(stream)
        if tag.kind is TagKind.OPENING:
            child = tree.create_from_tag(tag)
            tree.append_child(cursor, child)
            depth += 1
            max_depth = self.config.tree.max_tree_depth
            if max_depth is not None and depth > max_depth:
                raise self.reporter.failure(
                    ErrorKind.DEPTH_LIMIT_EXCEEDED,
                    f"Tree depth exceeds the configured maximum of {max_depth}",
                    stream.position,
                )
            return child, depth

        if tag.kind is TagKind.UNIQUE:
            tree.append_child(cursor, tree.create_from_tag(tag))
            return cursor, depth

        # Closing tag
        if self.config.tree.match_closing_names and tag.name != node.name:
            raise self.reporter.failure(
                ErrorKind.UNBALANCED_TAGS,
                f"Closing tag </{tag.name}> does not match open node <{node.name}>",
                stream.position,
            )
        if node.parent is not None:
            return node.parent, depth - 1
        self.state = BuilderState.DONE
        return cursor, depth

    def _read_tag(self, stream: ByteStream):
        tag = read_tag(stream, self._scanner_reporter, self.config.scanner.scratch_capacity)
        self.tags_read += 1
        return tag

    def _discard(self, tree: NodeTree) -> None:
        self.state = BuilderState.FAILED
        tree.clear()
        self.logger.debug("Discarded partially built tree")


def build_tree(
    source: Union[InputType, ByteStream],
    config: Optional[ParserConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> NodeTree:
    """Build a tree from ``source`` with a one-off :class:`TreeBuilder`."""
    return TreeBuilder(config, sink).build(source)
