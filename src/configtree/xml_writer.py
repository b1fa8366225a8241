# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""XmlTreeWriter - forward-only builder of configuration tree documents.

The writer assembles an indented XML document from a sequence of calls
made while the producing code walks its records once, top to bottom:

    >>> writer = XmlTreeWriter('Root')
    >>> writer.add_attribute('version', '1.0')
    >>> writer.start_list('List')
    >>> writer.new_element('Item')
    >>> writer.add_attribute('name', 'a')
    >>> writer.set_text('42')
    >>> writer.new_element('Item')
    >>> writer.add_attribute('name', 'b')
    >>> writer.finish_list()
    >>> print(writer.get())
    <?xml version="1.0" encoding="UTF-8"?>
    <Root version="1.0">
        <List>
            <Item name="a">42</Item>
            <Item name="b"/>
        </List>
    </Root>

Structure:
    - new_element() opens a leaf, closing the previous open leaf of the
      same level. finish_element() closes it.
    - start_list()/finish_list() open and close a container. They must
      be paired; an unmatched finish_list() is refused.
    - add() writes a complete child element in one call.

Output is append-only. Attributes can only be added while the start tag
of the innermost element is still open, that is, right after
new_element()/start_list() and before any content or child.

Misuse never raises. The call returns False, the reason is appended to
``errors`` and logged, and the document written so far stays valid.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from typing import Any
from xml.sax.saxutils import escape

from .config import EmptyNodes, TreeConfig
from .properties import PropertyMap
from .typed_values import (
    TYPE_ARRAY,
    TYPE_OBJECT,
    TYPE_STRING,
    OpaqueCodec,
    TypeRegistry,
    scalar_text,
    to_text,
    type_of,
)
from .xml_parser import LINEBREAK_ATTR, LINEBREAK_MAC, LINEBREAK_UNIX, LINEBREAK_WINDOWS

logger = logging.getLogger(__name__)

# Regex for sanitizing XML tag names
_INVALID_XML_TAG_CHARS = re.compile(r'[^\w.]', re.ASCII)

_TEXT_ENTITIES = {'\r': '&#13;'}
_ATTR_ENTITIES = {'"': '&quot;', '\n': '&#10;', '\r': '&#13;', '\t': '&#9;'}

EMPTY_COMMENT = '<!-- empty -->'
ARRAY_ELEMENT = 'Element'

_ROOT = 'root'
_LIST = 'list'
_LEAF = 'leaf'


class _Frame:
    """An element whose end tag has not been written yet."""

    __slots__ = ('name', 'kind', 'tag_open', 'has_children', 'has_text')

    def __init__(self, name: str, kind: str):
        self.name = name
        self.kind = kind
        self.tag_open = True
        self.has_children = False
        self.has_text = False


class XmlTreeWriter:
    """Builder of one XML document.

    Args:
        root: Tag of the root element.
        config: Document settings (indentation, encoding, empty nodes).
        registry: Types allowed as object entries of add_assoc_array().
        codec: Opaque codec used by add_prop() for non-scalar values.

    Attributes:
        errors: Messages of refused calls, in call order.
    """

    def __init__(
        self,
        root: str,
        config: TreeConfig | None = None,
        registry: TypeRegistry | None = None,
        codec: OpaqueCodec | None = None,
    ):
        self.config = config or TreeConfig()
        self.empty_nodes = self.config.empty_nodes
        self.registry = registry
        self.codec = codec
        self.errors: list[str] = []
        self._frames: list[_Frame] = []
        self._parts: list[str] = [f'<?xml version="1.0" encoding="{self.config.encoding}"?>']
        self._finished = False
        self._output: str | None = None
        self._start(root, _ROOT)

    def __repr__(self) -> str:
        path = '/'.join(frame.name for frame in self._frames)
        return f'<{self.__class__.__name__} at {path or "(finished)"}>'

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        """True if the innermost element is a leaf opened by new_element()."""
        return bool(self._frames) and self._frames[-1].kind == _LEAF

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def depth(self) -> int:
        """Number of elements still open, root included."""
        return len(self._frames)

    def set_empty_nodes(self, policy: EmptyNodes | int = EmptyNodes.SINGLE) -> None:
        """Set how add() renders elements without text and attributes."""
        self.empty_nodes = EmptyNodes(policy or EmptyNodes.HIDE)

    def get_errors(self) -> list[str]:
        return list(self.errors)

    def _misuse(self, message: str) -> bool:
        self.errors.append(message)
        logger.warning('%s', message)
        return False

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    def new_element(self, name: str) -> bool:
        """Open a leaf, closing the currently open leaf first."""
        if self._finished:
            return self._misuse(f'new_element({name!r}) on a finished document')
        if self.is_open:
            self._end()
        self._start(name, _LEAF)
        return True

    def finish_element(self) -> bool:
        """Close the open leaf. Returns False if no leaf was open."""
        if not self.is_open or self._finished:
            return False
        self._end()
        return True

    def start_list(self, name: str) -> bool:
        """Open a container; children go beneath it via new_element()/add()."""
        if self._finished:
            return self._misuse(f'start_list({name!r}) on a finished document')
        self._start(name, _LIST)
        return True

    def finish_list(self) -> bool:
        """Close the open leaf, if any, then the innermost container."""
        if self._finished:
            return self._misuse('finish_list() on a finished document')
        container = self._frames[-2] if self.is_open else self._frames[-1]
        if container.kind != _LIST:
            return self._misuse(f'finish_list() without matching start_list() inside <{container.name}>')
        if self.is_open:
            self._end()
        self._end()
        return True

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def add(
        self,
        name: str,
        text: str | None,
        cdata: bool | None = False,
        attributes: Mapping[str, Any] | None = None,
    ) -> bool:
        """Write a complete child element of the innermost element.

        The open/closed state of the current element is not changed.
        Without text and attributes the empty-node policy applies; with
        the default policy (HIDE) nothing is written.

        Args:
            name: Tag of the new element.
            text: Element text.
            cdata: True for a CDATA section, None for raw markup, False
                for escaped text.
            attributes: Attributes of the new element.
        """
        if self._finished:
            return self._misuse(f'add({name!r}) on a finished document')
        text = scalar_text(text)
        if not text and not attributes and self.empty_nodes == EmptyNodes.HIDE:
            return True
        self._start(name, _LEAF)
        for attr_name, value in (attributes or {}).items():
            self._attribute(attr_name, scalar_text(value))
        if text:
            self._write_text(text, cdata)
        elif self.empty_nodes == EmptyNodes.COMMENT:
            self._raw(EMPTY_COMMENT)
        elif self.empty_nodes == EmptyNodes.FULL:
            self._text('')
        self._end()
        return True

    def add_prop(self, record: PropertyMap, prop: str, cdata: bool | None = False) -> bool:
        """Write a record property as a child element named after it.

        Booleans become '1'/'0', numbers and strings their text, None an
        empty element; other values are encoded by the opaque codec.
        Returns False if the record has no readable property prop, or if
        the codec cannot encode its value (a recorded misuse).
        """
        if self._finished:
            return self._misuse(f'add_prop({prop!r}) on a finished document')
        prop_def = record.get(prop)
        if prop_def is None or prop_def.getter is None:
            logger.debug('add_prop(): no readable property %r', prop)
            return False
        value = prop_def.getter()
        try:
            text = to_text(value, self.codec)
        except (TypeError, ValueError) as e:
            return self._misuse(f'add_prop({prop!r}): cannot encode {type(value).__name__} value: {e}')
        return self.add(prop, text, cdata)

    def add_attribute(self, name: str, value: Any) -> bool:
        """Add an attribute to the innermost element.

        Only valid right after new_element()/start_list(), before any
        content or child. None and '' are skipped; booleans are written
        as '1'/'0' like leaf values, so False is kept as '0'.
        """
        if self._finished:
            return self._misuse(f'add_attribute({name!r}) on a finished document')
        text = scalar_text(value)
        if text == '':
            return True
        frame = self._frames[-1]
        if not frame.tag_open:
            return self._misuse(f'add_attribute({name!r}) after content of <{frame.name}>')
        self._attribute(name, text)
        return True

    def add_comment(self, comment: str) -> bool:
        if self._finished:
            return self._misuse('add_comment() on a finished document')
        self._comment(comment)
        return True

    def set_text(self, text: str | None, cdata: bool | None = False) -> bool:
        """Set the text of the open leaf.

        Args:
            text: The text. Empty text is ignored.
            cdata: True writes a CDATA section and records the line-break
                style of text containing CR. Text mixing several styles
                keeps each CR as a character reference between CDATA
                sections instead. None writes text as raw,
                trusted markup; False writes escaped text.
        """
        if not text:
            return True
        if self._finished:
            return self._misuse('set_text() on a finished document')
        if not self.is_open:
            return self._misuse(f'set_text() without open element inside <{self._frames[-1].name}>')
        self._write_text(text, cdata)
        return True

    def add_array(self, node_name: str, array: list | tuple | Mapping) -> bool:
        """Write every entry of array as a ``node_name`` element.

        Sequence entries and integer keys get an ``index`` attribute,
        other keys a ``key`` attribute. Non-string values get a ``type``
        attribute; nested arrays are written as ``Element`` children.
        Objects and values of unknown type are written as empty elements.

            <Value index="0" type="integer">1</Value>
            <Value key="k">x</Value>
        """
        if self._finished:
            return self._misuse(f'add_array({node_name!r}) on a finished document')
        self._array_entries(node_name, array)
        return True

    def add_assoc_array(self, array: Mapping) -> bool:
        """Write every entry of a mapping as an element named after its key.

        Non-string values get a ``type`` attribute. Nested mappings and
        sequences are written recursively; objects whose type is in the
        writer's registry are written as their field mapping with a
        ``class`` attribute naming the registered tag. Keys that are not
        valid tag names are sanitized and kept in a ``_tag`` attribute;
        integer keys are kept in an ``index`` attribute.
        """
        if self._finished:
            return self._misuse('add_assoc_array() on a finished document')
        self._assoc_entries(array)
        return True

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def get(self) -> str:
        """Finish the document and return it. Later calls return the same text."""
        if not self._finished:
            while self._frames:
                self._end()
            self._parts.append('\n')
            self._output = ''.join(self._parts)
            self._parts = []
            self._finished = True
            logger.debug('document finished (%d chars, %d refused calls)', len(self._output), len(self.errors))
        return self._output

    def save(self, filename: str, autocreate: bool = True) -> str:
        """Finish the document and write it to filename.

        Args:
            filename: Destination path.
            autocreate: If True, create missing directories.

        Returns:
            The filename.
        """
        result_bytes = self.get().encode(self.config.encoding)
        if autocreate:
            dirname = os.path.dirname(filename)
            if dirname and not os.path.exists(dirname):
                os.makedirs(dirname)
        with open(filename, 'wb') as output:
            output.write(result_bytes)
        return filename

    # -------------------------------------------------------------------------
    # Arrays
    # -------------------------------------------------------------------------

    def _array_entries(self, node_name: str, array: list | tuple | Mapping) -> None:
        entries = array.items() if isinstance(array, Mapping) else enumerate(array)
        for key, value in entries:
            self._start(node_name, _LEAF)
            if isinstance(key, int) and not isinstance(key, bool):
                self._attribute('index', str(key))
            else:
                self._attribute('key', str(key))
            type_tag = type_of(value)
            if type_tag != TYPE_STRING:
                self._attribute('type', type_tag)
            if type_tag == TYPE_ARRAY:
                self._array_entries(ARRAY_ELEMENT, value)
            elif value is None or isinstance(value, (bool, int, float, str)):
                text = scalar_text(value)
                if text:
                    self._text(text)
            else:
                logger.debug('add_array(): dropped value of type %s under %r', type(value).__name__, key)
            self._end()

    def _assoc_entries(self, array: list | tuple | Mapping) -> None:
        entries = array.items() if isinstance(array, Mapping) else enumerate(array)
        for key, value in entries:
            if isinstance(key, int) and not isinstance(key, bool):
                self._start(f'_{key}', _LEAF)
                self._attribute('index', str(key))
            else:
                tag, original_tag = self._sanitize_tag(str(key))
                self._start(tag, _LEAF)
                if original_tag is not None:
                    self._attribute('_tag', original_tag)
            type_tag = type_of(value, self.registry)
            if type_tag != TYPE_STRING:
                self._attribute('type', type_tag)
            if type_tag == TYPE_OBJECT:
                self._attribute('class', self.registry.tag_for(value))
                self._assoc_entries(self.registry.to_mapping(value))
            elif type_tag == TYPE_ARRAY:
                self._assoc_entries(value)
            elif value is None or isinstance(value, (bool, int, float, str)):
                text = scalar_text(value)
                if text:
                    self._text(text)
            else:
                logger.debug('add_assoc_array(): dropped value of type %s under %r', type(value).__name__, key)
            self._end()

    @staticmethod
    def _sanitize_tag(tag: str) -> tuple[str, str | None]:
        """Return (sanitized_tag, original_tag_or_none)."""
        if not tag:
            return '_none_', ''
        sanitized = _INVALID_XML_TAG_CHARS.sub('_', tag).replace('__', '_')
        if sanitized[0].isdigit() or sanitized[0] == '.':
            sanitized = '_' + sanitized
        if sanitized != tag:
            return sanitized, tag
        return sanitized, None

    # -------------------------------------------------------------------------
    # Low level output
    # -------------------------------------------------------------------------

    def _start(self, name: str, kind: str) -> None:
        if self._frames:
            parent = self._frames[-1]
            self._close_start_tag(parent)
            parent.has_children = True
            if not parent.has_text:
                self._parts.append('\n' + self.config.indent * len(self._frames))
        else:
            self._parts.append('\n')
        self._parts.append(f'<{name}')
        self._frames.append(_Frame(name, kind))

    def _end(self) -> None:
        frame = self._frames.pop()
        if frame.tag_open:
            self._parts.append('/>')
            return
        if frame.has_children and not frame.has_text:
            self._parts.append('\n' + self.config.indent * len(self._frames))
        self._parts.append(f'</{frame.name}>')

    def _close_start_tag(self, frame: _Frame) -> None:
        if frame.tag_open:
            self._parts.append('>')
            frame.tag_open = False

    def _attribute(self, name: str, value: str) -> None:
        self._parts.append(f' {name}="{escape(value, _ATTR_ENTITIES)}"')

    def _write_text(self, text: str, cdata: bool | None) -> None:
        if cdata:
            styles = _linebreak_styles(text)
            if len(styles) > 1:
                # one marker cannot describe mixed endings: CRs go outside CDATA
                self._cdata(text, split_cr=True)
                return
            if LINEBREAK_WINDOWS in styles:
                self._linebreak_marker(LINEBREAK_WINDOWS)
            elif LINEBREAK_MAC in styles:
                self._linebreak_marker(LINEBREAK_MAC)
            self._cdata(text)
        elif cdata is None:
            self._raw(text)
        else:
            self._text(text)

    def _linebreak_marker(self, marker: str) -> None:
        frame = self._frames[-1]
        if frame.tag_open:
            self._attribute(LINEBREAK_ATTR, marker)
        else:
            self._misuse(f'line breaks of <{frame.name}> cannot be recorded after its content')

    def _text(self, text: str) -> None:
        frame = self._frames[-1]
        self._close_start_tag(frame)
        self._parts.append(escape(text, _TEXT_ENTITIES))
        frame.has_text = True

    def _cdata(self, text: str, split_cr: bool = False) -> None:
        frame = self._frames[-1]
        self._close_start_tag(frame)
        chunks = text.split('\r') if split_cr else [text]
        self._parts.append('&#13;'.join(
            '<![CDATA[' + chunk.replace(']]>', ']]]]><![CDATA[>') + ']]>' if chunk else ''
            for chunk in chunks
        ))
        frame.has_text = True

    def _raw(self, markup: str) -> None:
        frame = self._frames[-1]
        self._close_start_tag(frame)
        self._parts.append(markup)
        frame.has_text = True

    def _comment(self, comment: str) -> None:
        frame = self._frames[-1]
        self._close_start_tag(frame)
        frame.has_children = True
        if not frame.has_text:
            self._parts.append('\n' + self.config.indent * len(self._frames))
        comment = comment.replace('--', '- -')
        if comment.endswith('-'):
            comment += ' '
        self._parts.append(f'<!--{comment}-->')


def _linebreak_styles(text: str) -> set[str]:
    """Line-break markers of every style present in text."""
    styles = set()
    crlf = text.count('\r\n')
    if crlf:
        styles.add(LINEBREAK_WINDOWS)
    if text.count('\r') > crlf:
        styles.add(LINEBREAK_MAC)
    if text.count('\n') > crlf:
        styles.add(LINEBREAK_UNIX)
    return styles
