"""Node tree stored as an arena of records addressed by integer handles.

Parent, sibling and child relations are handle fields rather than object
references, so a destroyed node can never be reached through a stale link:
its slot is emptied and any later lookup fails loudly.

Structural invariants maintained by every mutating operation:

* exactly one live node without parent per built tree (the root);
* ``first``/``last``/``child_count`` agree with walking ``next`` from ``first``;
* a node is in its parent's child list iff its ``parent`` field names it;
* children are only ever appended, so no node is its own ancestor.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from restricted_xml_parser.tokenization import Attribute, AttributeList, Tag

Handle = int


@dataclass
class Node:
    """One tree element. Link fields hold handles into the owning tree."""

    name: str = ""
    value: Optional[str] = None
    attributes: AttributeList = field(default_factory=AttributeList)

    parent: Optional[Handle] = None
    previous: Optional[Handle] = None
    next: Optional[Handle] = None

    first: Optional[Handle] = None
    current: Optional[Handle] = None
    last: Optional[Handle] = None
    child_count: int = 0

    @property
    def is_linked(self) -> bool:
        return (
            self.parent is not None
            or self.previous is not None
            or self.next is not None
        )


class TreeStructureError(Exception):
    """Raised when a structural operation would break a tree invariant."""


class NodeTree:
    """Arena owning every node of one document."""

    def __init__(self) -> None:
        self._slots: List[Optional[Node]] = []
        self.root: Optional[Handle] = None

    def __len__(self) -> int:
        return sum(1 for slot in self._slots if slot is not None)

    def __contains__(self, handle: object) -> bool:
        return (
            isinstance(handle, int)
            and 0 <= handle < len(self._slots)
            and self._slots[handle] is not None
        )

    def __getitem__(self, handle: Handle) -> Node:
        if handle not in self:
            raise KeyError(f"No live node with handle {handle}")
        node = self._slots[handle]
        assert node is not None
        return node

    # Creation and initialization

    def create_node(self, name: str = "") -> Handle:
        """Allocate an empty, unlinked node and return its handle."""
        self._slots.append(Node(name=name))
        return len(self._slots) - 1

    def init_from_tag(self, handle: Handle, tag: Tag) -> None:
        """Give the node the tag's name and move the tag's attributes to it.

        Ownership of the attribute list is transferred as a whole, so the
        node keeps the tag's head-first order and the tag is left empty.
        """
        node = self[handle]
        node.name = tag.name
        node.attributes = tag.attributes.take()

    def create_from_tag(self, tag: Tag) -> Handle:
        handle = self.create_node()
        self.init_from_tag(handle, tag)
        return handle

    def set_name(self, handle: Handle, name: str) -> None:
        self[handle].name = name

    def set_value(self, handle: Handle, value: str) -> None:
        """Replace the node's text value."""
        self[handle].value = value

    def add_attribute(self, handle: Handle, attribute: Attribute) -> None:
        self[handle].attributes.prepend(attribute)

    def pop_attribute(self, handle: Handle) -> Optional[Attribute]:
        return self[handle].attributes.pop_head()

    # Linking

    def append_child(self, parent: Handle, child: Handle) -> None:
        """Link ``child`` as the last child of ``parent``."""
        parent_node = self[parent]
        child_node = self[child]
        if child_node.parent is not None:
            raise TreeStructureError("Child node already has a parent")
        if child_node.previous is not None or child_node.next is not None:
            raise TreeStructureError("Child node already has siblings")
        if child == parent or (
            child_node.first is not None and self.is_ancestor(child, parent)
        ):
            raise TreeStructureError("A node cannot become its own descendant")

        child_node.parent = parent
        parent_node.child_count += 1
        if parent_node.last is None:
            parent_node.first = child
            parent_node.current = child
            parent_node.last = child
        else:
            self[parent_node.last].next = child
            child_node.previous = parent_node.last
            parent_node.last = child

    def detach(self, child: Handle) -> None:
        """Unlink ``child`` from its parent and siblings."""
        child_node = self[child]
        if child_node.parent is None:
            raise TreeStructureError("Node has no parent to be detached from")
        parent_node = self[child_node.parent]

        parent_node.child_count -= 1
        if parent_node.first == child:
            parent_node.first = child_node.next
        if parent_node.last == child:
            parent_node.last = child_node.previous
        if parent_node.current == child:
            parent_node.current = (
                child_node.next if child_node.next is not None else child_node.previous
            )

        if child_node.previous is not None:
            self[child_node.previous].next = child_node.next
        if child_node.next is not None:
            self[child_node.next].previous = child_node.previous
        child_node.parent = None
        child_node.previous = None
        child_node.next = None

    def destroy(self, handle: Handle) -> None:
        """Destroy a node and its whole subtree.

        Children are destroyed before their parent, last child first, and
        every node is unlinked before its slot is freed. The walk uses an
        explicit stack so deep documents cannot exhaust the interpreter stack.
        """
        stack = [handle]
        while stack:
            top = stack[-1]
            node = self[top]
            if node.last is not None:
                stack.append(node.last)
                continue
            stack.pop()
            if node.parent is not None:
                self.detach(top)
            node.attributes.clear()
            node.value = None
            self._slots[top] = None
            if top == self.root:
                self.root = None

    def clear(self) -> None:
        if self.root is not None:
            self.destroy(self.root)
        self._slots.clear()

    # Traversal

    def children(self, handle: Handle) -> Iterator[Handle]:
        child = self[handle].first
        while child is not None:
            yield child
            child = self[child].next

    def siblings_from(self, handle: Optional[Handle]) -> Iterator[Handle]:
        """Yield ``handle`` and every following sibling."""
        while handle is not None:
            yield handle
            handle = self[handle].next

    def rewind(self, handle: Handle) -> Optional[Handle]:
        """Point the node's child cursor back at its first child."""
        node = self[handle]
        node.current = node.first
        return node.current

    def advance(self, handle: Handle) -> Optional[Handle]:
        """Move the node's child cursor to the next child and return it."""
        node = self[handle]
        if node.current is not None:
            node.current = self[node.current].next
        return node.current

    def iter_depth_first(self, handle: Optional[Handle] = None) -> Iterator[Handle]:
        """Yield handles of the subtree in document order."""
        start = self.root if handle is None else handle
        if start is None:
            return
        stack = [start]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(list(self.children(current))))

    def count(self, handle: Optional[Handle] = None) -> int:
        return sum(1 for _ in self.iter_depth_first(handle))

    def depth(self, handle: Handle) -> int:
        """Depth of the node, the root being 0."""
        depth = 0
        parent = self[handle].parent
        while parent is not None:
            depth += 1
            parent = self[parent].parent
        return depth

    def is_ancestor(self, candidate: Handle, handle: Handle) -> bool:
        parent = self[handle].parent
        while parent is not None:
            if parent == candidate:
                return True
            parent = self[parent].parent
        return False

    def check_invariants(self) -> None:
        """Verify the structural invariants of every live node.

        Detached subtrees stay live until destroyed and are checked like any
        other node, but only :attr:`root` is required to be the tree's root.

        Raises:
            TreeStructureError: describing the first violation found
        """
        if self.root is not None and self[self.root].parent is not None:
            raise TreeStructureError(f"Root node {self.root} has a parent")

        listed = set()
        for handle, node in enumerate(self._slots):
            if node is None:
                continue
            walked = []
            previous = None
            child = node.first
            while child is not None:
                if len(walked) > len(self._slots):
                    raise TreeStructureError(f"Child list of node {handle} does not end")
                child_node = self[child]
                if child_node.parent != handle:
                    raise TreeStructureError(f"Node {child} does not point back to {handle}")
                if child_node.previous != previous:
                    raise TreeStructureError(f"Broken previous link on node {child}")
                walked.append(child)
                previous = child
                child = child_node.next
            if len(walked) != node.child_count:
                raise TreeStructureError(
                    f"Node {handle} counts {node.child_count} children, "
                    f"walked {len(walked)}"
                )
            if node.last != (walked[-1] if walked else None):
                raise TreeStructureError(f"Node {handle} has a stale last child")
            listed.update(walked)

        for handle, node in enumerate(self._slots):
            if node is not None and node.parent is not None and handle not in listed:
                raise TreeStructureError(
                    f"Node {handle} names parent {node.parent} but is not among its children"
                )

    # Output

    def render(self, handle: Optional[Handle] = None, recursive: bool = False) -> str:
        """Render a node as markup.

        Without ``recursive`` only the node itself is shown: its attributes and
        value, or a self-closing tag when it has no value. With ``recursive``
        the complete subtree is rendered, one tag per line.
        """
        start = self.root if handle is None else handle
        if start is None:
            return ""
        if not recursive:
            node = self[start]
            opening = self._opening(node)
            if node.value is not None:
                return f"{opening}>{node.value}</{node.name}>"
            return f"{opening}/>"

        lines: List[str] = []
        self._render_subtree(start, 0, lines)
        return "\n".join(lines)

    def _opening(self, node: Node) -> str:
        attributes = "".join(f' {a.name}="{a.value}"' for a in node.attributes)
        return f"<{node.name}{attributes}"

    def _render_subtree(self, handle: Handle, level: int, lines: List[str]) -> None:
        indent = "  " * level
        node = self[handle]
        opening = self._opening(node)
        if node.child_count == 0:
            lines.append(indent + self.render(handle))
            return
        lines.append(f"{indent}{opening}>{node.value or ''}")
        for child in self.children(handle):
            self._render_subtree(child, level + 1, lines)
        lines.append(f"{indent}</{node.name}>")

    def to_dict(self, handle: Optional[Handle] = None) -> Dict[str, Any]:
        """Convert a subtree to a dictionary representation."""
        start = self.root if handle is None else handle
        if start is None:
            return {}
        node = self[start]
        result: Dict[str, Any] = {
            "name": node.name,
            "attributes": [[a.name, a.value] for a in node.attributes],
        }
        if node.value is not None:
            result["value"] = node.value
        if node.child_count:
            result["children"] = [self.to_dict(child) for child in self.children(start)]
        return result
