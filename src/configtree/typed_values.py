# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Typed scalar encoding for tree leaves.

Every leaf is text. Non-string values carry a ``type`` attribute naming
one of the tags below so that readers can restore the original value:

    <Value index="0" type="integer">42</Value>
    <Value key="debug" type="boolean">1</Value>
    <Value key="name">shop</Value>

Values that are none of the scalar types travel as an opaque blob
produced by a pluggable OpaqueCodec. The default codec is TYTX (the
typed text transport of genro_tytx): decoding a blob requires the same
codec that encoded it.

Object-typed entries of associative arrays are rebuilt through a
TypeRegistry supplied by the caller; type names found in documents are
never imported or instantiated directly.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable
from typing import Any

from genro_tytx import from_tytx, to_tytx

from .exceptions import UnknownTypeError

TYPE_BOOL = 'boolean'
TYPE_INT = 'integer'
TYPE_DOUBLE = 'double'
TYPE_STRING = 'string'
TYPE_ARRAY = 'array'
TYPE_OBJECT = 'object'
TYPE_RESOURCE = 'resource'
TYPE_NULL = 'NULL'
TYPE_UNKNOWN = 'unknown'

# tags whose text is an opaque blob when read through set_prop()
OPAQUE_TYPES = frozenset((TYPE_ARRAY, TYPE_OBJECT, TYPE_RESOURCE, TYPE_NULL, TYPE_UNKNOWN))

_LEADING_INT = re.compile(r'\s*[+-]?\d+')
_LEADING_FLOAT = re.compile(r'\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')


# =============================================================================
# OPAQUE CODEC
# =============================================================================


class OpaqueCodec:
    """Encoder/decoder pair for values outside the scalar types.

    Args:
        encode: Callable turning a value into text.
        decode: Callable turning that text back into the value.
    """

    def __init__(self, encode: Callable[[Any], str], decode: Callable[[str], Any]):
        self._encode = encode
        self._decode = decode

    def encode(self, value: Any) -> str:
        return self._encode(value)

    def decode(self, text: str) -> Any:
        return self._decode(text)


def _tytx_encode(value: Any) -> str:
    # wrapped so that scalars and containers share one envelope
    return to_tytx({'value': value})


def _tytx_decode(text: str) -> Any:
    return from_tytx(text)['value']


TYTX_CODEC = OpaqueCodec(_tytx_encode, _tytx_decode)


# =============================================================================
# TYPE REGISTRY
# =============================================================================


class TypeRegistry:
    """Lookup table between object types and the tags stored in documents.

    Example:
        >>> registry = TypeRegistry()
        >>> registry.register('Address', Address)
        >>> registry.tag_for(Address(street='Main'))
        'Address'
        >>> registry.build('Address', {'street': 'Main'})
        Address(street='Main')
    """

    def __init__(self) -> None:
        self._by_tag: dict[str, tuple[type, Callable[[Any], dict], Callable[[dict], Any]]] = {}
        self._by_class: dict[type, str] = {}

    def register(
        self,
        tag: str,
        cls: type,
        to_mapping: Callable[[Any], dict] | None = None,
        factory: Callable[[dict], Any] | None = None,
    ) -> None:
        """Register cls under tag.

        Args:
            tag: Name written to the ``class`` attribute.
            cls: The Python type.
            to_mapping: Returns the fields to serialize. Defaults to the
                dataclass fields, or the public instance attributes.
            factory: Rebuilds an instance from the read mapping.
                Defaults to ``cls(**mapping)``.
        """
        self._by_tag[tag] = (cls, to_mapping or _default_mapping, factory or (lambda mapping: cls(**mapping)))
        self._by_class[cls] = tag

    def __contains__(self, tag: str) -> bool:
        return tag in self._by_tag

    def tag_for(self, value: Any) -> str | None:
        for cls in type(value).__mro__:
            if cls in self._by_class:
                return self._by_class[cls]
        return None

    def to_mapping(self, value: Any) -> dict:
        tag = self.tag_for(value)
        if tag is None:
            raise UnknownTypeError(f'type {type(value).__name__} is not registered')
        return self._by_tag[tag][1](value)

    def build(self, tag: str, mapping: dict) -> Any:
        if tag not in self._by_tag:
            raise UnknownTypeError(f'type tag "{tag}" is not registered')
        return self._by_tag[tag][2](mapping)


def _default_mapping(value: Any) -> dict:
    if dataclasses.is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    return {k: v for k, v in vars(value).items() if not k.startswith('_')}


# =============================================================================
# ENCODING
# =============================================================================


def type_of(value: Any, registry: TypeRegistry | None = None) -> str:
    """Return the type tag of a Python value."""
    if isinstance(value, bool):
        return TYPE_BOOL
    if isinstance(value, int):
        return TYPE_INT
    if isinstance(value, float):
        return TYPE_DOUBLE
    if isinstance(value, str):
        return TYPE_STRING
    if isinstance(value, (list, tuple, dict)):
        return TYPE_ARRAY
    if value is None:
        return TYPE_NULL
    if registry is not None and registry.tag_for(value) is not None:
        return TYPE_OBJECT
    return TYPE_UNKNOWN


def scalar_text(value: Any) -> str:
    """Text of a scalar leaf. Booleans are written as '1' and '0'."""
    if isinstance(value, bool):
        return '1' if value else '0'
    if value is None:
        return ''
    return str(value)


def to_text(value: Any, codec: OpaqueCodec | None = None) -> str:
    """Text of a property value, falling back to the opaque codec."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return scalar_text(value)
    return (codec or TYTX_CODEC).encode(value)


# =============================================================================
# DECODING
# =============================================================================


def coerce(text: str, type_tag: str | None) -> Any:
    """Convert leaf text to the value named by type_tag.

    Numbers are read leniently from the leading numeric part of the text
    ('42abc' -> 42, '' -> 0). Booleans are False for '' and '0'. Tags
    without a scalar meaning yield None.
    """
    if not type_tag or type_tag == TYPE_STRING:
        return text
    if type_tag == TYPE_BOOL:
        return text not in ('', '0')
    if type_tag == TYPE_INT:
        match = _LEADING_INT.match(text)
        return int(match.group()) if match else 0
    if type_tag == TYPE_DOUBLE:
        try:
            return float(text)
        except ValueError:
            match = _LEADING_FLOAT.match(text)
            return float(match.group()) if match else 0.0
    return None


def decode_opaque(text: str, codec: OpaqueCodec | None = None) -> Any:
    """Decode an opaque blob written by to_text()."""
    return (codec or TYTX_CODEC).decode(text)
