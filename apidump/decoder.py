# -*- coding: utf-8 -*-
"""
Top-level decode of an API dump

    from apidump import decode, release

    with open("api.txt", "rb") as f:
        api = decode(f)
    ...
    release(api)

Sections are decoded in the fixed order Defines, Structs, Aliases, Enums,
Callbacks, Functions, and the stream must end right after the last one.
Decoding is all-or-nothing: if any section fails, sections already
decoded are released before the error propagates.
"""

import io
from typing import Optional

from .config import FieldLimits
from .cursor import Cursor
from .errors import DecodeError
from .logger import logger
from .model import ApiDescriptor
from .ownership import Allocator, ReleaseScope
from .records import (
    RecordDecoder, DEFINES, STRUCTS, ALIASES, ENUMS, CALLBACKS, FUNCTIONS,
)
from .sections import parse_section

_DEFAULT_ALLOCATOR = Allocator()


def decode(stream, allocator: Optional[Allocator] = None,
           limits: Optional[FieldLimits] = None) -> ApiDescriptor:
    """
    Decode a dump from a readable byte stream.

    Args:
        stream: Object with read(n) -> bytes; read one byte at a time
        allocator: Allocator for every decoded value (default: plain Python)
        limits: Field length ceilings (default: FieldLimits.from_env(),
            so APIDUMP_MAX_* variables apply unless limits are given)

    Returns:
        ApiDescriptor owning every decoded record

    Raises:
        DecodeError: any grammar violation, see apidump.errors
        OSError: read failures of the underlying stream
        MemoryError: a declared count cannot be allocated
        ValueError: an APIDUMP_MAX_* variable is not a positive integer
    """
    if allocator is None:
        allocator = _DEFAULT_ALLOCATOR
    if limits is None:
        limits = FieldLimits.from_env()

    cursor = Cursor(stream)
    records = RecordDecoder(allocator, limits)

    def section(spec, decode_record):
        return scope.adopt_all(parse_section(cursor, spec, decode_record, allocator, limits))

    try:
        with ReleaseScope(allocator) as scope:
            api = ApiDescriptor(
                defines=section(DEFINES, records.define),
                structs=section(STRUCTS, records.struct),
                aliases=section(ALIASES, records.alias),
                enums=section(ENUMS, records.enum),
                callbacks=section(CALLBACKS, records.callback),
                functions=section(FUNCTIONS, records.function),
            )
            cursor.expect_end()
            scope.commit()
    except DecodeError as e:
        logger.debug("Decode failed", error=type(e).__name__, offset=cursor.pos)
        raise

    logger.debug("Decoded API dump", bytes=cursor.pos, **api.counts())
    return api


def decode_bytes(data: bytes, allocator: Optional[Allocator] = None,
                 limits: Optional[FieldLimits] = None) -> ApiDescriptor:
    """Decode a dump held in memory"""
    return decode(io.BytesIO(data), allocator=allocator, limits=limits)


def release(api: ApiDescriptor, allocator: Optional[Allocator] = None):
    """
    Release a descriptor returned by decode().

    Pass the same allocator that decode() used. Releasing twice raises
    ValueError.
    """
    if allocator is None:
        allocator = _DEFAULT_ALLOCATOR
    api.release(allocator)
