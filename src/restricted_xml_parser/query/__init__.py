"""Path query layer for restricted XML parsing."""

from .resolver import PathResolver, get_node, get_value

__all__ = [
    "PathResolver",
    "get_node",
    "get_value",
]
