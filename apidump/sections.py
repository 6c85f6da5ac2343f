# -*- coding: utf-8 -*-
"""
Section-list parser

One algorithm for every counted list in a dump, top-level or nested:

    \\n<Nouns> found: <count>\\n\\n       (top level: blank separator line)
      <Nouns> found: <count>\\n          (nested: indented, no blank line)

followed by <count> records, each introduced by "<Noun> <i>: " with i
running 1..count. What follows the title stamp is left to the record
decoder passed in.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar

from .config import FieldLimits
from .cursor import Cursor
from .errors import (
    SourceLocation, InvalidCount, IndexMismatch, UnexpectedEndOfStream,
)
from .logger import logger
from .ownership import Allocator, ReleaseScope

T = TypeVar('T')

MAX_COUNT = 2 ** 64 - 1

# Unsigned integer literal with optional base prefix; int(text, 0) does the rest
_COUNT_RE = re.compile(rb'0[xX][0-9a-fA-F_]+|0[oO][0-7_]+|0[bB][01_]+|[0-9][0-9_]*')


@dataclass(frozen=True)
class SectionSpec:
    """Literal text identifying one kind of counted list"""
    plural: str             # "Defines", "Fields", ...
    noun: str               # "Define", "Field", ...
    nested: bool = False    # Nested lists are indented and have no blank line

    @property
    def header(self) -> bytes:
        if self.nested:
            return f"  {self.plural} found: ".encode('ascii')
        return f"\n{self.plural} found: ".encode('ascii')

    @property
    def title_prefix(self) -> bytes:
        if self.nested:
            return f"    {self.noun} ".encode('ascii')
        return f"{self.noun} ".encode('ascii')


def parse_count(text: bytes, location: Optional[SourceLocation] = None) -> int:
    """
    Parse an unsigned count literal (decimal, 0x, 0o or 0b).

    Raises:
        InvalidCount: not an unsigned literal, or larger than 2**64 - 1
    """
    if _COUNT_RE.fullmatch(text) is None:
        logger.error(
            f"Invalid count {text!r}",
            location=location, exc_type=InvalidCount
        )
    try:
        count = int(text.decode('ascii'), 0)
    except ValueError:
        # Leading zeros and misplaced underscores pass the pattern
        count = None
    if count is None:
        logger.error(
            f"Invalid count {text!r}",
            location=location, exc_type=InvalidCount
        )
    if count > MAX_COUNT:
        logger.error(
            f"Count {text!r} overflows a 64-bit unsigned integer",
            location=location, exc_type=InvalidCount
        )
    return count


def read_count_line(cursor: Cursor, spec: SectionSpec, limits: FieldLimits) -> int:
    """Match the section header and return its count"""
    cursor.require_literal(spec.header, f"{spec.plural} header")
    location = cursor.location
    text = cursor.read_until(b"\n", limits.count)
    if text is None:
        logger.error(
            f"Stream ended inside {spec.plural} count",
            location=location, exc_type=UnexpectedEndOfStream
        )
    count = parse_count(text, location)
    if not spec.nested:
        cursor.require_literal(b"\n", "blank line after section header")
    return count


def expect_record_title(cursor: Cursor, spec: SectionSpec, index: int, limits: FieldLimits):
    """
    Match "<Noun> <index>: " for the 1-based running index.

    Only the digits are the index token; the ": " after them is a literal,
    so a damaged separator is a GrammarMismatch rather than a bad index.
    """
    cursor.require_literal(spec.title_prefix, f"{spec.noun} title")
    location = cursor.location
    stamp = cursor.read_digits(limits.index)
    if stamp is None:
        logger.error(
            f"Stream ended inside {spec.noun} index",
            location=location, exc_type=UnexpectedEndOfStream
        )
    if stamp != str(index).encode('ascii'):
        logger.error(
            f"{spec.noun} index {stamp!r} does not match expected {index}",
            location=location, exc_type=IndexMismatch
        )
    cursor.require_literal(b": ", f"separator after {spec.noun} index")


def parse_section(
    cursor: Cursor,
    spec: SectionSpec,
    decode_record: Callable[[Cursor], T],
    allocator: Allocator,
    limits: FieldLimits,
) -> List[T]:
    """
    Parse one counted list.

    Args:
        cursor: Stream cursor positioned at the section header
        spec: Header and title literals of this list
        decode_record: Called once per record, right after its title stamp;
            must return a record owning its allocations, releasing them
            itself if it fails
        allocator: Allocator for the slot list
        limits: Token ceilings for the count and index

    Returns:
        list of exactly `count` records in stamped order. The caller owns
        it and releases it with ownership.release_all().
    """
    count = read_count_line(cursor, spec, limits)
    logger.debug(f"{spec.plural} found", count=count, nested=spec.nested)

    with ReleaseScope(allocator) as scope:
        records = scope.slots(count)
        for i in range(count):
            expect_record_title(cursor, spec, i + 1, limits)
            records[i] = scope.adopt(decode_record(cursor))
        scope.commit()
    return records
