# -*- coding: utf-8 -*-
"""
Descriptor tables for a decoded API dump

Type overview:
- ApiDescriptor : six ordered record lists, in dump order
- Define        : named constant/macro with a DefineType tag
- Struct        : name, description, StructField list
- Alias         : type-to-type rename
- Enum          : name, description, EnumValue list
- Callback      : function pointer typedef, Param list
- Function      : exported function, Param list

Ownership:
- Every record owns its strings and nested lists exclusively
- record.release(allocator) frees them in reverse allocation order
- Nested lists are released item by item (last first), then the list
"""

from dataclasses import dataclass, field
from enum import Enum as _PyEnum
from typing import Dict, List, Optional

from .ownership import Allocator, release_all


class DefineType(_PyEnum):
    """How a Define's value should be interpreted"""
    UNKNOWN = 'unknown'
    MACRO = 'macro'
    GUARD = 'guard'
    INT = 'int'
    INT_MATH = 'int_math'
    LONG = 'long'
    LONG_MATH = 'long_math'
    FLOAT = 'float'
    FLOAT_MATH = 'float_math'
    DOUBLE = 'double'
    DOUBLE_MATH = 'double_math'
    CHAR = 'char'
    STRING = 'string'
    COLOR = 'color'

    @property
    def tag(self) -> str:
        """Tag text as written in a dump"""
        return self.name

    @classmethod
    def parse(cls, text: str) -> Optional['DefineType']:
        """Case-insensitive lookup of a tag; None when unrecognised"""
        return _DEFINE_TYPE_BY_TAG.get(text.upper())


# Dumps spell tags upper-case; built once at import
_DEFINE_TYPE_BY_TAG: Dict[str, DefineType] = {
    member.value.upper(): member for member in DefineType
}


@dataclass
class Define:
    name: str
    type: DefineType
    value: str
    description: str

    def release(self, allocator: Allocator):
        allocator.free(self.description)
        allocator.free(self.value)
        allocator.free(self.name)


@dataclass
class StructField:
    type: str
    name: str
    description: str

    def release(self, allocator: Allocator):
        allocator.free(self.description)
        allocator.free(self.name)
        allocator.free(self.type)


@dataclass
class Struct:
    name: str
    description: str
    fields: List[StructField]

    def release(self, allocator: Allocator):
        release_all(self.fields, allocator)
        allocator.free(self.description)
        allocator.free(self.name)


@dataclass
class Alias:
    type: str
    name: str
    description: str

    def release(self, allocator: Allocator):
        allocator.free(self.description)
        allocator.free(self.name)
        allocator.free(self.type)


@dataclass
class EnumValue:
    name: str
    value: str          # Textual integer, e.g. "0x10" or "-1"
    description: str

    def release(self, allocator: Allocator):
        allocator.free(self.description)
        allocator.free(self.value)
        allocator.free(self.name)


@dataclass
class Enum:
    name: str
    description: str
    values: List[EnumValue]

    def release(self, allocator: Allocator):
        release_all(self.values, allocator)
        allocator.free(self.description)
        allocator.free(self.name)


@dataclass
class Param:
    type: str
    name: str

    def release(self, allocator: Allocator):
        allocator.free(self.name)
        allocator.free(self.type)


@dataclass
class Callback:
    name: str
    return_type: str
    description: str
    params: List[Param]

    def release(self, allocator: Allocator):
        release_all(self.params, allocator)
        allocator.free(self.description)
        allocator.free(self.return_type)
        allocator.free(self.name)


@dataclass
class Function:
    name: str
    return_type: str
    description: str
    params: List[Param]

    def release(self, allocator: Allocator):
        release_all(self.params, allocator)
        allocator.free(self.description)
        allocator.free(self.return_type)
        allocator.free(self.name)


# Section attribute names in dump order
SECTION_ORDER = ('defines', 'structs', 'aliases', 'enums', 'callbacks', 'functions')


@dataclass
class ApiDescriptor:
    """
    Result of decoding a dump.

    Record order in each list is dump order, which is also declaration
    order in the described API.
    """
    defines: List[Define] = field(default_factory=list)
    structs: List[Struct] = field(default_factory=list)
    aliases: List[Alias] = field(default_factory=list)
    enums: List[Enum] = field(default_factory=list)
    callbacks: List[Callback] = field(default_factory=list)
    functions: List[Function] = field(default_factory=list)
    released: bool = field(default=False, compare=False, repr=False)

    def counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in SECTION_ORDER}

    def release(self, allocator: Allocator):
        """Release every section, last section first"""
        if self.released:
            raise ValueError("descriptor already released")
        for name in reversed(SECTION_ORDER):
            release_all(getattr(self, name), allocator)
        self.released = True
