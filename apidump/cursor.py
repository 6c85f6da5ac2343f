# -*- coding: utf-8 -*-
"""
Forward-only cursor over a readable byte stream

The cursor pulls one byte at a time from the stream, so nothing past the
current token is ever consumed and the whole input is never buffered.
Position is tracked the way a lexer does: byte offset plus 1-based line
and column of the next unread byte.

Operations:
- expect_literal(b"...")      -> bool, compares byte by byte
- require_literal(b"...", w)  -> None, GrammarMismatch on difference
- read_until(delim, max_len)  -> bytes, or None at end of stream
- read_digits(max_len)        -> bytes of ASCII digits, or None at end
- skip_until(delim)           -> None, discards through the delimiter
- expect_end()                -> None, GrammarMismatch if bytes remain
"""

from typing import Optional

from .errors import (
    SourceLocation, GrammarMismatch, FieldTooLong, UnexpectedEndOfStream,
)
from .logger import logger

_NEWLINE = 0x0A


class Cursor:
    """Cursor state over a stream exposing read(n) -> bytes"""

    def __init__(self, stream):
        self._stream = stream
        self.pos = 0        # Bytes consumed
        self.line = 1       # Line of next byte (1-based)
        self.col = 1        # Column of next byte (1-based)
        self._at_eof = False
        self._pending = None   # Byte read from the stream but not consumed

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.pos, self.line, self.col)

    def _peek_byte(self) -> int:
        """Look at the next byte without consuming it; -1 at end of stream"""
        if self._pending is None:
            if self._at_eof:
                return -1
            chunk = self._stream.read(1)
            if not chunk:
                self._at_eof = True
                return -1
            self._pending = chunk[0]
        return self._pending

    def _next_byte(self) -> int:
        """Consume one byte; -1 at end of stream"""
        c = self._peek_byte()
        if c < 0:
            return -1
        self._pending = None
        self.pos += 1
        if c == _NEWLINE:
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return c

    def expect_literal(self, literal: bytes) -> bool:
        """
        Consume bytes while they match literal.

        Returns:
            bool: True if all of literal matched, False at the first
            differing byte (consumption stops at that byte)

        Raises:
            UnexpectedEndOfStream: stream ended before the literal completed
        """
        for expected in literal:
            location = self.location
            c = self._next_byte()
            if c < 0:
                logger.error(
                    f"Stream ended while matching {literal!r}",
                    location=location, exc_type=UnexpectedEndOfStream
                )
            if c != expected:
                return False
        return True

    def require_literal(self, literal: bytes, what: str):
        """Match literal exactly or raise GrammarMismatch naming `what`"""
        location = self.location
        if not self.expect_literal(literal):
            logger.error(
                f"Expected {what} {literal!r}",
                location=location, exc_type=GrammarMismatch
            )

    def read_until(self, delimiter: bytes, max_len: int,
                   stop: Optional[bytes] = None) -> Optional[bytes]:
        """
        Read bytes up to and excluding delimiter, consuming the delimiter.

        Args:
            delimiter: One or more bytes terminating the token
            max_len: Largest token length accepted, excluding the delimiter
            stop: Optional single byte that may not occur in the token,
                e.g. b"\\n" for a token that must end on its own line

        Returns:
            bytes: the token text
            None: the stream ended before the delimiter appeared

        Raises:
            FieldTooLong: more than max_len bytes precede the delimiter
            GrammarMismatch: the stop byte came before the delimiter
        """
        start = self.location
        width = len(delimiter)
        stop_byte = stop[0] if stop else -1
        buf = bytearray()
        while True:
            location = self.location
            c = self._next_byte()
            if c < 0:
                return None
            if c == stop_byte:
                logger.error(
                    f"Expected {delimiter!r} before {stop!r}",
                    location=location, exc_type=GrammarMismatch
                )
            buf.append(c)
            if len(buf) >= width and buf[-width:] == delimiter:
                del buf[-width:]
                return bytes(buf)
            # The last width-1 bytes may still be a delimiter prefix
            if len(buf) - (width - 1) > max_len:
                logger.error(
                    f"Token exceeds {max_len} bytes without {delimiter!r}",
                    location=start, exc_type=FieldTooLong
                )

    def read_digits(self, max_len: int) -> Optional[bytes]:
        """
        Read a run of ASCII digits, leaving the first non-digit unread.

        Returns:
            bytes: the digits, possibly empty
            None: the stream ended inside the run

        Raises:
            FieldTooLong: more than max_len digits in a row
        """
        start = self.location
        buf = bytearray()
        while True:
            c = self._peek_byte()
            if c < 0:
                return None
            if not 0x30 <= c <= 0x39:
                return bytes(buf)
            if len(buf) == max_len:
                logger.error(
                    f"Number exceeds {max_len} digits",
                    location=start, exc_type=FieldTooLong
                )
            buf.append(self._next_byte())

    def skip_until(self, delimiter: bytes):
        """Discard bytes through delimiter; UnexpectedEndOfStream at end"""
        start = self.location
        width = len(delimiter)
        tail = bytearray()
        while True:
            c = self._next_byte()
            if c < 0:
                logger.error(
                    f"Stream ended before {delimiter!r}",
                    location=start, exc_type=UnexpectedEndOfStream
                )
            tail.append(c)
            if len(tail) > width:
                del tail[0]
            if tail == delimiter:
                return

    def expect_end(self):
        """Require that the stream is exhausted"""
        location = self.location
        if self._next_byte() >= 0:
            logger.error(
                "Trailing bytes after the last section",
                location=location, exc_type=GrammarMismatch
            )
