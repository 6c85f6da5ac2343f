"""
apidump - decoder for textual C API metadata dumps

    from apidump import decode, release
    api = decode(stream)
    for fn in api.functions:
        print(fn.return_type, fn.name, [p.type for p in fn.params])
    release(api)
"""

from .config import FieldLimits
from .decoder import decode, decode_bytes, release
from .errors import (
    SourceLocation, DecodeError, GrammarMismatch, InvalidCount, IndexMismatch,
    FieldTooLong, UnknownDefineType, UnexpectedEndOfStream, DoubleRelease,
)
from .export import descriptor_to_dict, descriptor_from_dict, descriptor_to_json
from .model import (
    ApiDescriptor, Define, DefineType, Struct, StructField, Alias, Enum,
    EnumValue, Callback, Function, Param,
)
from .ownership import Allocator, TrackingAllocator, ReleaseScope

__version__ = '0.1.0'

__all__ = [
    'decode', 'decode_bytes', 'release',
    'FieldLimits',
    'SourceLocation', 'DecodeError', 'GrammarMismatch', 'InvalidCount',
    'IndexMismatch', 'FieldTooLong', 'UnknownDefineType',
    'UnexpectedEndOfStream', 'DoubleRelease',
    'descriptor_to_dict', 'descriptor_from_dict', 'descriptor_to_json',
    'ApiDescriptor', 'Define', 'DefineType', 'Struct', 'StructField', 'Alias',
    'Enum', 'EnumValue', 'Callback', 'Function', 'Param',
    'Allocator', 'TrackingAllocator', 'ReleaseScope',
]
