"""Tokenization layer for restricted XML parsing.

Key Components:
    read_tag: Tag Reader producing one Tag per ``<...>`` unit
    read_attribute: Attribute Reader for one ``name="value"`` pair
    AttributeList: Prepend-ordered attribute container
    ScratchBuffer: Bounded accumulation buffer
"""

from .attribute import Attribute, AttributeList, read_attribute
from .buffer import ScratchBuffer
from .tag import Tag, TagKind, read_tag

__all__ = [
    "Attribute",
    "AttributeList",
    "ScratchBuffer",
    "Tag",
    "TagKind",
    "read_attribute",
    "read_tag",
]
