"""Restricted XML Parser.

Reads a restricted dialect of XML (no namespaces, entities, comments or CDATA)
into an ordered in-memory tree and answers path-style queries against it.

API levels:
- Level 1: Simple functions - parse(), parse_string(), parse_file(), load_file()
- Level 2: Queries on the returned XMLDocument - get_value(), get_node(),
  get_string(), get_int(), get_bool(), get_double()
- Level 3: Building blocks - TreeBuilder, NodeTree, PathResolver, read_tag()
"""

__version__ = "0.1.0"
__author__ = "Restricted XML Parser Team"

from .api import (
    ParseResult,
    XMLDocument,
    load_file,
    parse,
    parse_file,
    parse_string,
)
from .query import PathResolver
from .shared.config import ParserConfig
from .shared.result import ErrorKind, XMLParseError
from .tree import NodeTree, TreeBuilder

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_string",
    "parse_file",
    "load_file",

    # Result objects and data structures
    "ParseResult",
    "XMLDocument",
    "NodeTree",

    # Building blocks
    "TreeBuilder",
    "PathResolver",

    # Configuration and errors
    "ParserConfig",
    "ErrorKind",
    "XMLParseError",
]
