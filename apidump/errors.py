# -*- coding: utf-8 -*-
"""
Decode failure taxonomy

Every failure is terminal: the grammar is deterministic, so nothing is
retried or recovered. Each layer releases what it allocated and re-raises
the same exception object.

Stream I/O failures (OSError) and allocation exhaustion (MemoryError) are
not wrapped; they propagate unchanged alongside these.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SourceLocation:
    """Position of the next unread byte of a stream"""
    offset: int     # Bytes consumed so far (0-based)
    line: int       # 1-based line number
    column: int     # 1-based column number

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


class DecodeError(Exception):
    """Base class for every dump grammar failure"""

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.message} at {self.location}"


class GrammarMismatch(DecodeError):
    """An expected literal was absent"""


class InvalidCount(DecodeError):
    """A section count failed to parse as an unsigned integer"""


class IndexMismatch(DecodeError):
    """A record's stamped index disagreed with its position"""


class FieldTooLong(DecodeError):
    """A field exceeded its length ceiling before its delimiter"""


class UnknownDefineType(DecodeError):
    """A Define's Type field is not a recognised tag"""


class UnexpectedEndOfStream(DecodeError):
    """The stream ended before a required token completed"""


class DoubleRelease(RuntimeError):
    """A value was released that had no live allocation"""
