"""Character input layer for restricted XML parser.

This module provides the sequential byte stream consumed by the scanners.
"""

from .stream import EOF, ByteStream, InputType, open_stream

__all__ = [
    "EOF",
    "ByteStream",
    "InputType",
    "open_stream",
]
