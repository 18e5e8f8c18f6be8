"""Path queries over a built :class:`NodeTree`.

Two independent mini-languages are supported:

* value paths, ``segment(/segment)*(:attrName|$)``, which return a node's text
  value (``$``) or one of its attribute values (``:name``);
* predicate paths, ``segment(?attr=value)?(/segment(?attr=value)?)*``, which
  return a node handle.

Every segment is matched against a sibling list: the first segment against
the start node and its following siblings, each later segment against the
children of the previous match. Names compare case-sensitively.

Query failures never raise. They are recorded as WARNING diagnostics and
reported to the caller as ``None``.
"""

from typing import Optional, Tuple

from restricted_xml_parser.shared import (
    DiagnosticReporter,
    DiagnosticSink,
    ErrorKind,
    QueryConfig,
)
from restricted_xml_parser.tree import Handle, NodeTree

_VALUE_DELIMITERS = ("/", ":", "$")
_NODE_DELIMITERS = ("/", "?")


class QueryMiss(Exception):
    """Internal signal for a path that does not resolve."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class PathResolver:
    """Resolve value and predicate paths against one tree.

    Args:
        tree: Tree to query, may be None for a document that failed to parse
        config: Query configuration
        sink: Diagnostic sink receiving every miss
        correlation_id: Optional correlation ID for request tracking
    """

    def __init__(
        self,
        tree: Optional[NodeTree],
        config: Optional[QueryConfig] = None,
        sink: Optional[DiagnosticSink] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.tree = tree
        self.config = config or QueryConfig()
        self.reporter = DiagnosticReporter(sink, "path_resolver", correlation_id)

    # Value lookup

    def get_value(self, path: str) -> Optional[str]:
        """Return the value addressed by a value path.

        ``root/foo/bar$`` returns the text value of ``bar`` (None when the node
        has none); ``root/foo/bar:baz`` returns its ``baz`` attribute.
        """
        try:
            return self._resolve_value(path)
        except QueryMiss as miss:
            self.reporter.warning(miss.kind, miss.message, path=path)
            return None

    def _resolve_value(self, path: str) -> Optional[str]:
        if self.tree is None or self.tree.root is None:
            raise QueryMiss(ErrorKind.NOT_FOUND, "Document has no tree to query")

        level: Optional[Handle] = self.tree.root
        index = 0
        while True:
            segment, delimiter, index = self._take(path, index, _VALUE_DELIMITERS)
            if delimiter is None:
                raise QueryMiss(
                    ErrorKind.NOT_FOUND, "Reached end of path without ':' or '$'"
                )

            handle = self._find_sibling(level, segment)
            if handle is None:
                raise QueryMiss(
                    ErrorKind.NOT_FOUND, f"No node named {segment!r} at this level"
                )
            node = self.tree[handle]

            if delimiter == "/":
                level = node.first
            elif delimiter == "$":
                if index != len(path):
                    raise QueryMiss(
                        ErrorKind.NOT_FOUND, "Unexpected text after '$' in value path"
                    )
                return node.value
            else:
                attribute_name = path[index:]
                self._check_capacity(attribute_name)
                attribute = node.attributes.find(attribute_name)
                if attribute is None:
                    raise QueryMiss(
                        ErrorKind.NOT_FOUND,
                        f"Node {segment!r} has no attribute {attribute_name!r}",
                    )
                return attribute.value

    # Predicate lookup

    def get_node(self, path: str, start: Optional[Handle] = None) -> Optional[Handle]:
        """Return the handle of the node addressed by a predicate path.

        Matching starts at ``start`` (the root by default) and its following
        siblings, e.g. ``get_node("item?id=2", first_item)``.
        """
        if self.tree is None or self.tree.root is None:
            self.reporter.warning(ErrorKind.NOT_FOUND, "Document has no tree to query", path=path)
            return None
        try:
            return self._resolve_node(path, self.tree.root if start is None else start)
        except QueryMiss as miss:
            self.reporter.warning(miss.kind, miss.message, path=path)
            return None

    def _resolve_node(self, path: str, start: Optional[Handle]) -> Handle:
        assert self.tree is not None
        name, delimiter, index = self._take(path, 0, _NODE_DELIMITERS)

        predicate: Optional[Tuple[str, str]] = None
        if delimiter == "?":
            attribute_name, delimiter, index = self._take(path, index, ("=",))
            if delimiter is None:
                raise QueryMiss(
                    ErrorKind.NOT_FOUND,
                    f"Attribute {attribute_name!r} is not followed by a value",
                )
            attribute_value, delimiter, index = self._take(path, index, ("/",))
            predicate = (attribute_name, attribute_value)

        found: Optional[Handle] = None
        for handle in self.tree.siblings_from(start):
            node = self.tree[handle]
            if node.name != name:
                continue
            if predicate is None or node.attributes.contains_pair(*predicate):
                found = handle
                break

        if found is None:
            if predicate is None:
                message = f"No node named {name!r} at this level"
            else:
                message = f"No node {name!r} with {predicate[0]}={predicate[1]!r} at this level"
            raise QueryMiss(ErrorKind.NOT_FOUND, message)

        if delimiter == "/":
            return self._resolve_node(path[index:], self.tree[found].first)
        return found

    # Helpers

    def _find_sibling(self, start: Optional[Handle], name: str) -> Optional[Handle]:
        assert self.tree is not None
        for handle in self.tree.siblings_from(start):
            if self.tree[handle].name == name:
                return handle
        return None

    def _take(
        self, path: str, index: int, delimiters: Tuple[str, ...]
    ) -> Tuple[str, Optional[str], int]:
        """Read from ``index`` up to the next delimiter.

        Returns the text read, the delimiter found (None at end of path) and
        the index just past the delimiter.
        """
        end = index
        while end < len(path) and path[end] not in delimiters:
            end += 1
        text = path[index:end]
        self._check_capacity(text)
        if end == len(path):
            return text, None, end
        return text, path[end], end + 1

    def _check_capacity(self, text: str) -> None:
        if len(text) > self.config.segment_capacity:
            raise QueryMiss(
                ErrorKind.BUFFER_OVERFLOW,
                f"Path segment exceeds the capacity of {self.config.segment_capacity} characters",
            )


def get_value(
    tree: Optional[NodeTree],
    path: str,
    config: Optional[QueryConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> Optional[str]:
    return PathResolver(tree, config, sink).get_value(path)


def get_node(
    tree: Optional[NodeTree],
    path: str,
    start: Optional[Handle] = None,
    config: Optional[QueryConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> Optional[Handle]:
    return PathResolver(tree, config, sink).get_node(path, start)
