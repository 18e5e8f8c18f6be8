"""Tag model and tag reader.

A tag is the transient token describing one ``<...>`` unit. It is produced by
:func:`read_tag`, folded into a node by the tree builder and then dropped.
"""

from dataclasses import dataclass, field
from enum import Enum, auto

from restricted_xml_parser.character import EOF, ByteStream
from restricted_xml_parser.shared import DiagnosticReporter, ErrorKind

from .attribute import AttributeList, read_attribute
from .buffer import ScratchBuffer

_NAME_TERMINATORS = (" ", ">", "/", EOF)


class TagKind(Enum):
    """Kinds of tag found in a document."""

    OPENING = auto()   # <name ...>
    CLOSING = auto()   # </name>
    UNIQUE = auto()    # <name .../>
    UNKNOWN = auto()   # not yet decided


@dataclass
class Tag:
    """One parsed ``<...>`` unit."""

    name: str = ""
    attributes: AttributeList = field(default_factory=AttributeList)
    kind: TagKind = TagKind.UNKNOWN

    def set_name(self, name: str) -> None:
        self.name = name

    def reset(self) -> None:
        self.name = ""
        self.attributes.clear()
        self.kind = TagKind.UNKNOWN


def read_tag(
    stream: ByteStream,
    reporter: DiagnosticReporter,
    capacity: int,
) -> Tag:
    """Read one tag from ``stream``.

    A leading ``<`` is consumed when present; the text scanner usually
    consumes it already.

    Raises:
        XMLParseError: ``MALFORMED_TAG`` for invalid tag syntax,
            ``UNEXPECTED_END_OF_INPUT`` when the input ends inside the tag and
            ``BUFFER_OVERFLOW`` when a name or value is too long.
    """
    tag = Tag()
    name = ScratchBuffer(capacity, "Tag name", reporter, lambda: stream.position)

    char = stream.read_char()
    if char == "<":
        char = stream.read_char()
    if char == "/":
        tag.kind = TagKind.CLOSING
        char = stream.read_char()

    while char not in _NAME_TERMINATORS:
        name.append(char)
        char = stream.read_char()

    if char == EOF:
        raise reporter.failure(
            ErrorKind.UNEXPECTED_END_OF_INPUT,
            "Reached end of input while reading a tag",
            stream.position,
        )
    if not name:
        raise reporter.failure(
            ErrorKind.MALFORMED_TAG, "Tag has an empty name", stream.position
        )
    tag.set_name(name.getvalue())

    if char == ">":
        if tag.kind is TagKind.UNKNOWN:
            tag.kind = TagKind.OPENING
        return tag

    if char == "/":
        if tag.kind is TagKind.CLOSING:
            raise reporter.failure(
                ErrorKind.MALFORMED_TAG,
                f"Closing tag {tag.name!r} is also marked as self-closing",
                stream.position,
            )
        tag.kind = TagKind.UNIQUE
        _expect_tag_end(stream, reporter, tag)
        return tag

    # A space: only opening and self-closing tags carry attributes.
    if tag.kind is TagKind.CLOSING:
        raise reporter.failure(
            ErrorKind.MALFORMED_TAG,
            f"Closing tag {tag.name!r} cannot carry attributes",
            stream.position,
        )

    while char == " ":
        tag.attributes.prepend(read_attribute(stream, reporter, capacity))
        char = stream.read_char()

    if char == ">":
        tag.kind = TagKind.OPENING
    elif char == "/":
        tag.kind = TagKind.UNIQUE
        _expect_tag_end(stream, reporter, tag)
    elif char == EOF:
        raise reporter.failure(
            ErrorKind.UNEXPECTED_END_OF_INPUT,
            f"Reached end of input after the attributes of {tag.name!r}",
            stream.position,
        )
    else:
        raise reporter.failure(
            ErrorKind.MALFORMED_TAG,
            f"Unexpected character {char!r} after the attributes of {tag.name!r}",
            stream.position,
        )
    return tag


def _expect_tag_end(stream: ByteStream, reporter: DiagnosticReporter, tag: Tag) -> None:
    char = stream.read_char()
    if char != ">":
        raise reporter.failure(
            ErrorKind.MALFORMED_TAG,
            f"Self-closing tag {tag.name!r} is not terminated by '>'",
            stream.position,
        )
