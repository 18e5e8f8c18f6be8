"""Byte-at-a-time input stream for restricted XML parsing.

The scanners consume their input one character at a time. :class:`ByteStream`
wraps the supported input types, maps every byte to exactly one character
(no decoding beyond 7-bit ASCII is attempted), tracks the source location used
by diagnostics and enforces the optional byte budget.
"""

import io
from typing import BinaryIO, Dict, List, Optional, TextIO, Union

# Type definitions for input data
InputType = Union[bytes, bytearray, str, BinaryIO, TextIO]

EOF = ""


class ByteStream:
    """Sequential character reader over a binary or text stream.

    ``read_char`` returns :data:`EOF` (the empty string) once the input is
    exhausted or once ``max_bytes`` characters have been consumed; in the
    latter case :attr:`truncated` is set.

    Args:
        raw: Binary or text file-like object
        max_bytes: Optional budget of characters that may be consumed
        name: Optional source name used in diagnostics
    """

    def __init__(
        self,
        raw: Union[BinaryIO, TextIO],
        max_bytes: Optional[int] = None,
        name: Optional[str] = None,
    ) -> None:
        self._raw = raw
        self.max_bytes = max_bytes
        self.name = name
        self.truncated = False
        self._pending: List[str] = []
        self._line = 1
        self._column = 1
        self._offset = 0

    @property
    def bytes_read(self) -> int:
        return self._offset

    @property
    def position(self) -> Dict[str, int]:
        """Location of the next character to be read."""
        return {"line": self._line, "column": self._column, "offset": self._offset}

    def _fetch(self) -> str:
        fetched = self._offset + len(self._pending)
        if self.max_bytes is not None and fetched >= self.max_bytes:
            self.truncated = True
            return EOF
        data = self._raw.read(1)
        if not data:
            return EOF
        if isinstance(data, (bytes, bytearray)):
            return chr(data[0])
        return data

    def peek(self, count: int = 1) -> str:
        """Return up to ``count`` upcoming characters without consuming them."""
        while len(self._pending) < count:
            char = self._fetch()
            if char == EOF:
                break
            self._pending.append(char)
        return "".join(self._pending[:count])

    def read_char(self) -> str:
        """Consume and return the next character, or EOF."""
        if self._pending:
            char = self._pending.pop(0)
        else:
            char = self._fetch()
        if char == EOF:
            return EOF

        self._offset += 1
        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return char

    def read_line(self) -> str:
        """Consume characters up to and including the next line feed."""
        chars = []
        while True:
            char = self.read_char()
            if char == EOF:
                break
            chars.append(char)
            if char == "\n":
                break
        return "".join(chars)

    def close(self) -> None:
        self._raw.close()


def open_stream(
    source: Union[InputType, ByteStream],
    max_bytes: Optional[int] = None,
    name: Optional[str] = None,
) -> ByteStream:
    """Wrap any supported input in a :class:`ByteStream`.

    Strings and bytes are treated as document content, not as paths.
    """
    if isinstance(source, ByteStream):
        return source
    if isinstance(source, (bytes, bytearray)):
        return ByteStream(io.BytesIO(bytes(source)), max_bytes, name)
    if isinstance(source, str):
        return ByteStream(io.StringIO(source), max_bytes, name)
    if hasattr(source, "read"):
        return ByteStream(source, max_bytes, name or getattr(source, "name", None))
    raise TypeError(f"Unsupported input type: {type(source).__name__}")
