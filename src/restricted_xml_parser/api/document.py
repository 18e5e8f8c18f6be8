"""Parsed document container and typed accessors.

An :class:`XMLDocument` holds at most one parse result: a :class:`NodeTree`,
or nothing when the parse failed. Every accessor degrades to "not found" (or
the caller default) on a document without a tree.
"""

import re
from typing import Any, Dict, Optional

from restricted_xml_parser.shared import (
    DiagnosticReporter,
    DiagnosticSink,
    ParserConfig,
)
from restricted_xml_parser.query import PathResolver
from restricted_xml_parser.tree import Handle, Node, NodeTree

# Leading numeric prefixes, read the way atoi() and strtod() read them
_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(
    r"\s*[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


class XMLDocument:
    """A parsed document and the queries it answers.

    Args:
        tree: Built tree, None when parsing failed
        source_path: Path the document was loaded from, if any
        declaration_ok: Result of the advisory XML declaration check
        config: Parser configuration used for queries
        sink: Diagnostic sink receiving query misses
    """

    def __init__(
        self,
        tree: Optional[NodeTree] = None,
        source_path: Optional[str] = None,
        declaration_ok: Optional[bool] = None,
        config: Optional[ParserConfig] = None,
        sink: Optional[DiagnosticSink] = None,
    ) -> None:
        self.tree = tree
        self.source_path = source_path
        self.declaration_ok = declaration_ok
        self.config = config or ParserConfig()
        self._resolver = PathResolver(
            tree, self.config.query, sink, self.config.correlation_id
        )
        self._reporter = DiagnosticReporter(sink, "document", self.config.correlation_id)

    def __repr__(self) -> str:
        root = self.root_node.name if self.root_node else None
        return f"XMLDocument(source_path={self.source_path!r}, root={root!r})"

    @property
    def root(self) -> Optional[Handle]:
        return self.tree.root if self.tree is not None else None

    @property
    def root_node(self) -> Optional[Node]:
        if self.tree is None or self.tree.root is None:
            return None
        return self.tree[self.tree.root]

    @property
    def node_count(self) -> int:
        return len(self.tree) if self.tree is not None else 0

    def node(self, handle: Handle) -> Node:
        if self.tree is None:
            raise KeyError(f"No live node with handle {handle}")
        return self.tree[handle]

    # Queries

    def get_value(self, path: str) -> Optional[str]:
        """Resolve a value path such as ``root/foo/bar$`` or ``root/foo:attr``."""
        return self._resolver.get_value(path)

    def get_node(self, path: str, start: Optional[Handle] = None) -> Optional[Handle]:
        """Resolve a predicate path such as ``root/item?id=2``."""
        return self._resolver.get_node(path, start)

    def get_string(self, path: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get_value(path)
        return default if value is None else value

    def get_int(self, path: str, default: int = 0) -> int:
        """Read the leading integer of a value.

        ``default`` is returned only when the path does not resolve; a value
        without a leading integer reads as 0.
        """
        value = self.get_value(path)
        if value is None:
            return default
        match = _INT_PREFIX.match(value)
        if match is None:
            self._reporter.warning(None, f"Value {value!r} is not an integer", path=path)
            return 0
        return int(match.group())

    def get_bool(self, path: str, default: bool = False) -> bool:
        """Read exactly ``true`` or ``false``; anything else yields ``default``."""
        value = self.get_value(path)
        if value == "true":
            return True
        if value == "false":
            return False
        return default

    def get_double(self, path: str, default: float = 0.0) -> float:
        """Read the leading floating point number of a value, 0.0 when there is none."""
        value = self.get_value(path)
        if value is None:
            return default
        match = _FLOAT_PREFIX.match(value)
        if match is None:
            self._reporter.warning(None, f"Value {value!r} is not a number", path=path)
            return 0.0
        return float(match.group())

    # Output and lifecycle

    def render(self, handle: Optional[Handle] = None, recursive: bool = True) -> str:
        if self.tree is None:
            return ""
        return self.tree.render(handle, recursive)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "source_path": self.source_path,
            "declaration_ok": self.declaration_ok,
            "node_count": self.node_count,
        }
        if self.tree is not None and self.tree.root is not None:
            result["root"] = self.tree.to_dict()
        return result

    def close(self) -> None:
        """Destroy the tree; later queries miss."""
        if self.tree is not None:
            self.tree.clear()
        self.tree = None
        self._resolver.tree = None

    def __enter__(self) -> "XMLDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
