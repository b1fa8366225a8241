# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Property tables for records exchanged with the tree writer and reader.

XmlTreeWriter.add_prop() and XmlTreeReader.set_prop() do not look up
accessors by name. Each record comes with a PropertyMap: property name
to getter, setter and semantic type tag.

Example:
    >>> props = PropertyMap.for_object(page, {'Position': 'integer', 'Description': 'string'})
    >>> writer.add_prop(props, 'Position')
    >>> reader.set_prop(props, 'Position')
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .typed_values import TYPE_STRING

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')


@dataclass(frozen=True)
class Property:
    """Accessors and type of a single record property."""

    getter: Callable[[], Any] | None = None
    setter: Callable[[Any], None] | None = None
    type: str = TYPE_STRING


class PropertyMap(Mapping):
    """Read-only mapping of property name to Property."""

    def __init__(self, properties: dict[str, Property] | None = None):
        self._properties: dict[str, Property] = dict(properties or {})

    def __getitem__(self, name: str) -> Property:
        return self._properties[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f'PropertyMap({list(self._properties)})'

    @classmethod
    def for_object(cls, obj: Any, types: dict[str, str], attributes: dict[str, str] | None = None) -> PropertyMap:
        """Table over object attributes.

        Args:
            obj: The record.
            types: Property name to type tag.
            attributes: Property name to attribute name, when they differ.
                By default the attribute is the property name itself, or its
                snake_case form (``'PageTitle'`` -> ``obj.page_title``) when
                obj has no attribute with the exact name. A property whose
                attribute does not exist has no getter.
        """
        attributes = attributes or {}
        properties = {}
        for name, type_tag in types.items():
            attr_name = attributes.get(name) or (name if hasattr(obj, name) else _snake_case(name))
            properties[name] = Property(
                getter=_attr_getter(obj, attr_name) if hasattr(obj, attr_name) else None,
                setter=_attr_setter(obj, attr_name),
                type=type_tag,
            )
        return cls(properties)

    @classmethod
    def for_mapping(cls, record: dict[str, Any], types: dict[str, str]) -> PropertyMap:
        """Table over the keys of a dict record. Missing keys read as None."""
        return cls({
            name: Property(
                getter=_key_getter(record, name),
                setter=_key_setter(record, name),
                type=type_tag,
            )
            for name, type_tag in types.items()
        })


def _snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub('_', name).lower()


def _attr_getter(obj: Any, attr_name: str) -> Callable[[], Any]:
    return lambda: getattr(obj, attr_name)


def _attr_setter(obj: Any, attr_name: str) -> Callable[[Any], None]:
    return lambda value: setattr(obj, attr_name, value)


def _key_getter(record: dict, key: str) -> Callable[[], Any]:
    return lambda: record.get(key)


def _key_setter(record: dict, key: str) -> Callable[[Any], None]:
    def setter(value: Any) -> None:
        record[key] = value
    return setter
