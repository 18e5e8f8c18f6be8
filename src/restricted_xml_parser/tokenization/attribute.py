"""Attribute model and attribute reader.

Attributes are kept in a prepend-ordered list: each newly attached attribute
becomes the new head, so iterating a list yields attributes in the reverse of
document order. Names are not deduplicated; lookups return the first match
from the head, i.e. the most recently attached attribute.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from restricted_xml_parser.character import EOF, ByteStream
from restricted_xml_parser.shared import DiagnosticReporter, ErrorKind

from .buffer import ScratchBuffer


@dataclass
class Attribute:
    """A ``name="value"`` pair owned by a tag or a node."""

    name: str = ""
    value: str = ""

    def set_name(self, name: str) -> None:
        self.name = name

    def set_value(self, value: str) -> None:
        self.value = value

    def copy(self) -> "Attribute":
        return Attribute(self.name, self.value)


class AttributeList:
    """Ordered container of attributes with head-first iteration.

    Internally the head is stored at the end of a Python list so that
    prepending is an append.
    """

    def __init__(self, attributes: Optional[List[Attribute]] = None) -> None:
        self._stack: List[Attribute] = []
        for attribute in attributes or ():
            self.prepend(attribute)

    def __len__(self) -> int:
        return len(self._stack)

    def __bool__(self) -> bool:
        return bool(self._stack)

    def __iter__(self) -> Iterator[Attribute]:
        return reversed(self._stack)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{a.name}={a.value!r}" for a in self)
        return f"AttributeList([{pairs}])"

    @property
    def head(self) -> Optional[Attribute]:
        return self._stack[-1] if self._stack else None

    def prepend(self, attribute: Attribute) -> None:
        """Attach ``attribute`` as the new head."""
        if not isinstance(attribute, Attribute):
            raise TypeError("Only Attribute instances can be attached")
        self._stack.append(attribute)

    def pop_head(self) -> Optional[Attribute]:
        """Detach and return the head attribute, None when empty."""
        return self._stack.pop() if self._stack else None

    def take(self) -> "AttributeList":
        """Move every attribute into a new list, preserving order.

        The source list is left empty.
        """
        moved = AttributeList()
        moved._stack = self._stack
        self._stack = []
        return moved

    def find(self, name: str) -> Optional[Attribute]:
        for attribute in self:
            if attribute.name == name:
                return attribute
        return None

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        attribute = self.find(name)
        return attribute.value if attribute is not None else default

    def contains_pair(self, name: str, value: str) -> bool:
        return any(a.name == name and a.value == value for a in self)

    def names(self) -> List[str]:
        return [attribute.name for attribute in self]

    def in_document_order(self) -> List[Attribute]:
        return list(self._stack)

    def clear(self) -> None:
        self._stack.clear()


def read_attribute(
    stream: ByteStream,
    reporter: DiagnosticReporter,
    capacity: int,
) -> Attribute:
    """Read one ``name="value"`` pair from ``stream``.

    The name runs up to, and excluding, ``=``; the character right after ``=``
    must be a double quote; the value runs up to the next double quote. No
    escape sequences are recognized.

    Raises:
        XMLParseError: ``MALFORMED_TAG`` when the input ends inside the name or
            the quote is missing, ``UNEXPECTED_END_OF_INPUT`` when the value is
            never closed, ``BUFFER_OVERFLOW`` when name or value is too long.
    """
    name = ScratchBuffer(capacity, "Attribute name", reporter, lambda: stream.position)
    char = stream.read_char()
    while char != "=":
        if char == EOF:
            raise reporter.failure(
                ErrorKind.MALFORMED_TAG,
                "Reached end of input while reading an attribute name",
                stream.position,
            )
        name.append(char)
        char = stream.read_char()

    if stream.read_char() != '"':
        raise reporter.failure(
            ErrorKind.MALFORMED_TAG,
            f"Attribute {name.getvalue()!r} value is not introduced by a double quote",
            stream.position,
        )

    value = ScratchBuffer(capacity, "Attribute value", reporter, lambda: stream.position)
    char = stream.read_char()
    while char != '"':
        if char == EOF:
            raise reporter.failure(
                ErrorKind.UNEXPECTED_END_OF_INPUT,
                f"Reached end of input inside the value of attribute {name.getvalue()!r}",
                stream.position,
            )
        value.append(char)
        char = stream.read_char()

    return Attribute(name.getvalue(), value.getvalue())
