# -*- coding: utf-8 -*-
"""
Decoder configuration

Field length ceilings. decode() reads these environment overrides through
FieldLimits.from_env() whenever the caller passes no limits:

    APIDUMP_MAX_NAME         identifiers (default 64)
    APIDUMP_MAX_TYPE         type strings (default 256)
    APIDUMP_MAX_VALUE        define and enum values (default 4096)
    APIDUMP_MAX_DESCRIPTION  free text descriptions (default 16384)
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

# Widest unsigned 64-bit literal is "0b" followed by 64 digits
MAX_COUNT_TOKEN = 66
# Decimal digits of 2**64 - 1
MAX_INDEX_TOKEN = 20

_ENV_FIELDS = {
    'APIDUMP_MAX_NAME': 'name',
    'APIDUMP_MAX_TYPE': 'type',
    'APIDUMP_MAX_VALUE': 'value',
    'APIDUMP_MAX_DESCRIPTION': 'description',
}


@dataclass(frozen=True)
class FieldLimits:
    """Per-field-class byte ceilings"""
    name: int = 64
    type: int = 256
    value: int = 4096
    description: int = 4096 * 4
    count: int = MAX_COUNT_TOKEN
    index: int = MAX_INDEX_TOKEN

    def __post_init__(self):
        for field_name in ('name', 'type', 'value', 'description', 'count', 'index'):
            limit = getattr(self, field_name)
            if not isinstance(limit, int) or limit <= 0:
                raise ValueError(f"FieldLimits.{field_name} must be a positive int, got {limit!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'FieldLimits':
        """
        Build limits from APIDUMP_MAX_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            FieldLimits with defaults for any variable that is unset
        """
        if environ is None:
            environ = os.environ
        overrides = {}
        for var, field_name in _ENV_FIELDS.items():
            raw = environ.get(var)
            if raw is None or raw.strip() == '':
                continue
            try:
                overrides[field_name] = int(raw)
            except ValueError:
                raise ValueError(f"{var} must be an integer, got {raw!r}") from None
        return replace(cls(), **overrides)


DEFAULT_LIMITS = FieldLimits()
