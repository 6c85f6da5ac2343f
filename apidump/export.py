# -*- coding: utf-8 -*-
"""
Plain-data export of decoded descriptors

Downstream generators usually want JSON-like data rather than dataclasses.
descriptor_to_dict() renders a descriptor as dicts and lists (Define types
as their upper-case dump tag); descriptor_from_dict() is the inverse, for
callers that cache the rendered form on disk.
"""

import json
from dataclasses import asdict
from typing import Any, Dict

from .model import (
    ApiDescriptor, Define, DefineType, Struct, StructField, Alias, Enum,
    EnumValue, Callback, Function, Param, SECTION_ORDER,
)

EXPORT_VERSION = 1


def _define_to_dict(define: Define) -> Dict[str, Any]:
    data = asdict(define)
    data['type'] = define.type.tag
    return data


def descriptor_to_dict(api: ApiDescriptor) -> Dict[str, Any]:
    """Render a descriptor as plain dicts and lists, sections in dump order"""
    if api.released:
        raise ValueError("cannot export a released descriptor")
    data: Dict[str, Any] = {'version': EXPORT_VERSION}
    for name in SECTION_ORDER:
        if name == 'defines':
            data[name] = [_define_to_dict(d) for d in api.defines]
        else:
            data[name] = [asdict(record) for record in getattr(api, name)]
    return data


def descriptor_to_json(api: ApiDescriptor, indent: int = 2) -> str:
    return json.dumps(descriptor_to_dict(api), indent=indent, ensure_ascii=False)


def descriptor_from_dict(data: Dict[str, Any]) -> ApiDescriptor:
    """
    Rebuild a descriptor from descriptor_to_dict() output.

    Raises:
        ValueError: unsupported version or unknown define type tag
        KeyError: a required key is missing
    """
    version = data.get('version')
    if version != EXPORT_VERSION:
        raise ValueError(f"Unsupported export version: {version!r}")

    defines = []
    for d in data['defines']:
        define_type = DefineType.parse(d['type'])
        if define_type is None:
            raise ValueError(f"Unknown define type {d['type']!r}")
        defines.append(Define(d['name'], define_type, d['value'], d['description']))

    return ApiDescriptor(
        defines=defines,
        structs=[
            Struct(s['name'], s['description'],
                   [StructField(f['type'], f['name'], f['description']) for f in s['fields']])
            for s in data['structs']
        ],
        aliases=[Alias(a['type'], a['name'], a['description']) for a in data['aliases']],
        enums=[
            Enum(e['name'], e['description'],
                 [EnumValue(v['name'], v['value'], v['description']) for v in e['values']])
            for e in data['enums']
        ],
        callbacks=[
            Callback(c['name'], c['return_type'], c['description'],
                     [Param(p['type'], p['name']) for p in c['params']])
            for c in data['callbacks']
        ],
        functions=[
            Function(f['name'], f['return_type'], f['description'],
                     [Param(p['type'], p['name']) for p in f['params']])
            for f in data['functions']
        ],
    )
