"""Conversion of parsed trees to lxml.

lxml is imported lazily so the parser itself works without it.
"""

from typing import Any, Optional

from restricted_xml_parser.shared import get_logger
from restricted_xml_parser.tree import Handle, NodeTree

logger = get_logger(__name__, component="lxml_adapter")


def is_lxml_available() -> bool:
    """Check if lxml is available."""
    try:
        import lxml.etree  # noqa: F401
        return True
    except ImportError:
        return False


def to_lxml(tree: NodeTree, handle: Optional[Handle] = None) -> Any:
    """Convert a subtree to an ``lxml.etree`` element.

    Attributes are set in document order, so when a name occurs twice the
    attribute found first by a head-first lookup wins, as in path queries.
    The node value becomes the element text.

    Raises:
        ImportError: when lxml is not installed
        ValueError: when the tree is empty
    """
    import lxml.etree as ET

    start = tree.root if handle is None else handle
    if start is None:
        raise ValueError("Cannot convert an empty tree")

    root_element = ET.Element(tree[start].name)
    stack = [(start, root_element)]
    while stack:
        current, element = stack.pop()
        node = tree[current]
        for attribute in node.attributes.in_document_order():
            element.set(attribute.name, attribute.value)
        if node.value is not None:
            element.text = node.value
        for child in tree.children(current):
            stack.append((child, ET.SubElement(element, tree[child].name)))

    logger.debug("Converted tree to lxml", extra={"node_count": tree.count(start)})
    return root_element
