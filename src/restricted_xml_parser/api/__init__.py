"""Public parsing API for restricted XML documents."""

from .adapters import is_lxml_available, to_lxml
from .document import XMLDocument
from .parser import (
    ParseResult,
    check_declaration,
    load_file,
    parse,
    parse_file,
    parse_string,
)

__all__ = [
    "ParseResult",
    "XMLDocument",
    "check_declaration",
    "is_lxml_available",
    "load_file",
    "parse",
    "parse_file",
    "parse_string",
    "to_lxml",
]
