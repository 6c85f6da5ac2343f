# -*- coding: utf-8 -*-
"""
Record decoders

Each decoder starts right after its "<Noun> <i>: " stamp has been matched
by the section parser and returns a fully built record. Field lines have
the shape "  <Label>: <text>\\n"; nested list items put their fields on the
stamp line, separated by " | ".

Every string is allocated inside a ReleaseScope, so a failure at any
field releases what the record had built so far (last first) before the
exception leaves the decoder.
"""

from typing import Optional

from .config import DEFAULT_LIMITS, FieldLimits
from .cursor import Cursor
from .errors import UnexpectedEndOfStream, UnknownDefineType
from .logger import logger
from .model import (
    Define, DefineType, Struct, StructField, Alias, Enum, EnumValue,
    Callback, Function, Param,
)
from .ownership import Allocator, ReleaseScope
from .sections import SectionSpec, parse_section

# Top-level sections, in the order a dump lists them
DEFINES = SectionSpec('Defines', 'Define')
STRUCTS = SectionSpec('Structs', 'Struct')
ALIASES = SectionSpec('Aliases', 'Alias')
ENUMS = SectionSpec('Enums', 'Enum')
CALLBACKS = SectionSpec('Callbacks', 'Callback')
FUNCTIONS = SectionSpec('Functions', 'Function')

# Nested lists
STRUCT_FIELDS = SectionSpec('Fields', 'Field', nested=True)
ENUM_VALUES = SectionSpec('Values', 'Value', nested=True)
PARAMS = SectionSpec('Params', 'Param', nested=True)

ITEM_SEPARATOR = b" | "


def read_token(cursor: Cursor, delimiter: bytes, limit: int, what: str,
               stop: Optional[bytes] = None) -> bytes:
    """Bounded read that treats end of stream as a failure"""
    location = cursor.location
    raw = cursor.read_until(delimiter, limit, stop)
    if raw is None:
        logger.error(
            f"Stream ended inside {what}",
            location=location, exc_type=UnexpectedEndOfStream
        )
    return raw


class RecordDecoder:
    """
    Decoders for the six record shapes, bound to one allocator and one set
    of field limits. The bound methods are what the section parser calls.
    """

    def __init__(self, allocator: Optional[Allocator] = None, limits: Optional[FieldLimits] = None):
        self.allocator = allocator if allocator is not None else Allocator()
        self.limits = limits if limits is not None else DEFAULT_LIMITS

    # -------------------------------------------------------------------
    # Field helpers
    # -------------------------------------------------------------------

    def _field_raw(self, cursor: Cursor, label: str, limit: int) -> bytes:
        cursor.require_literal(f"  {label}: ".encode('ascii'), f"{label} field")
        return read_token(cursor, b"\n", limit, f"{label} field")

    def _field(self, cursor: Cursor, scope: ReleaseScope, label: str, limit: int) -> str:
        return scope.text(self._field_raw(cursor, label, limit))

    def _item(self, cursor: Cursor, scope: ReleaseScope, what: str, limit: int, last: bool = False) -> str:
        if last:
            return scope.text(read_token(cursor, b"\n", limit, what))
        # Items sit on one line; a newline before the separator is a damaged " | "
        return scope.text(read_token(cursor, ITEM_SEPARATOR, limit, what, stop=b"\n"))

    def _define_type(self, cursor: Cursor) -> DefineType:
        location = cursor.location
        raw = self._field_raw(cursor, "Type", self.limits.type)
        tag = raw.decode('utf-8', 'surrogateescape')
        define_type = DefineType.parse(tag)
        if define_type is None:
            logger.error(
                f"Unknown define type {tag!r}",
                location=location, exc_type=UnknownDefineType
            )
        return define_type

    def _nested(self, cursor: Cursor, scope: ReleaseScope, spec: SectionSpec, decode_item):
        items = parse_section(cursor, spec, decode_item, self.allocator, self.limits)
        return scope.adopt_all(items)

    # -------------------------------------------------------------------
    # Top-level records
    # -------------------------------------------------------------------

    def define(self, cursor: Cursor) -> Define:
        cursor.skip_until(b"\n")
        limits = self.limits
        with ReleaseScope(self.allocator) as scope:
            name = self._field(cursor, scope, "Name", limits.name)
            define_type = self._define_type(cursor)
            value = self._field(cursor, scope, "Value", limits.value)
            description = self._field(cursor, scope, "Description", limits.description)
            record = Define(name, define_type, value, description)
            scope.commit()
        return record

    def struct(self, cursor: Cursor) -> Struct:
        cursor.skip_until(b"\n")
        limits = self.limits
        with ReleaseScope(self.allocator) as scope:
            name = self._field(cursor, scope, "Name", limits.name)
            description = self._field(cursor, scope, "Description", limits.description)
            fields = self._nested(cursor, scope, STRUCT_FIELDS, self.struct_field)
            record = Struct(name, description, fields)
            scope.commit()
        return record

    def alias(self, cursor: Cursor) -> Alias:
        cursor.skip_until(b"\n")
        limits = self.limits
        with ReleaseScope(self.allocator) as scope:
            type_ = self._field(cursor, scope, "Type", limits.type)
            name = self._field(cursor, scope, "Name", limits.name)
            description = self._field(cursor, scope, "Description", limits.description)
            record = Alias(type_, name, description)
            scope.commit()
        return record

    def enum(self, cursor: Cursor) -> Enum:
        cursor.skip_until(b"\n")
        limits = self.limits
        with ReleaseScope(self.allocator) as scope:
            name = self._field(cursor, scope, "Name", limits.name)
            description = self._field(cursor, scope, "Description", limits.description)
            values = self._nested(cursor, scope, ENUM_VALUES, self.enum_value)
            record = Enum(name, description, values)
            scope.commit()
        return record

    def _signature(self, cursor: Cursor, record_type):
        cursor.skip_until(b"\n")
        limits = self.limits
        with ReleaseScope(self.allocator) as scope:
            name = self._field(cursor, scope, "Name", limits.name)
            return_type = self._field(cursor, scope, "Return type", limits.type)
            description = self._field(cursor, scope, "Description", limits.description)
            params = self._nested(cursor, scope, PARAMS, self.param)
            record = record_type(name, return_type, description, params)
            scope.commit()
        return record

    def callback(self, cursor: Cursor) -> Callback:
        return self._signature(cursor, Callback)

    def function(self, cursor: Cursor) -> Function:
        return self._signature(cursor, Function)

    # -------------------------------------------------------------------
    # Nested list items (fields follow the stamp on the same line)
    # -------------------------------------------------------------------

    def struct_field(self, cursor: Cursor) -> StructField:
        limits = self.limits
        with ReleaseScope(self.allocator) as scope:
            type_ = self._item(cursor, scope, "field type", limits.type)
            name = self._item(cursor, scope, "field name", limits.name)
            description = self._item(cursor, scope, "field description", limits.description, last=True)
            item = StructField(type_, name, description)
            scope.commit()
        return item

    def enum_value(self, cursor: Cursor) -> EnumValue:
        limits = self.limits
        with ReleaseScope(self.allocator) as scope:
            name = self._item(cursor, scope, "value name", limits.name)
            value = self._item(cursor, scope, "value", limits.value)
            description = self._item(cursor, scope, "value description", limits.description, last=True)
            item = EnumValue(name, value, description)
            scope.commit()
        return item

    def param(self, cursor: Cursor) -> Param:
        limits = self.limits
        with ReleaseScope(self.allocator) as scope:
            type_ = self._item(cursor, scope, "param type", limits.type)
            name = self._item(cursor, scope, "param name", limits.name, last=True)
            item = Param(type_, name)
            scope.commit()
        return item
