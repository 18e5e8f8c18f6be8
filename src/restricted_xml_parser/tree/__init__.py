"""Tree building engine for restricted XML parsing.

Key Components:
    NodeTree: Arena of nodes addressed by integer handles
    Node: Single tree element with name, value, attributes and links
    TreeBuilder: State machine folding tags into a NodeTree
"""

from .node import Handle, Node, NodeTree, TreeStructureError
from .builder import (
    BuilderState,
    TextScan,
    TreeBuilder,
    build_tree,
    reach_next_tag,
    read_node_value,
)

__all__ = [
    "BuilderState",
    "Handle",
    "Node",
    "NodeTree",
    "TextScan",
    "TreeBuilder",
    "TreeStructureError",
    "build_tree",
    "reach_next_tag",
    "read_node_value",
]
