# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""XmlTreeReader - cursor based navigation of configuration tree documents.

The reader parses a whole document once and keeps a cursor into the tree
together with a history of previous positions. Lookups are relative to
the cursor; ``None`` as cursor means the document root:

    >>> reader = XmlTreeReader('/export/config/1_Main.xml', 'MndConfig')
    >>> for form in reader.get_list('Config'):
    ...     reader.change_cursor(form)
    ...     for value in reader.get_list('Value'):
    ...         print(value.get_attr('name'), value.text)
    ...     reader.cursor_out()

Every cursor_into()/change_cursor() must be balanced by a cursor_out().

Paths:
    Methods taking a node name also accept a list of names or a
    ``/``-separated path (``'Templates/Template'``); each step selects
    the first child with that name.

External files:
    Any node may carry a ``file`` attribute pointing to a document
    (relative to this one) whose root has the node's own tag.
    change_cursor(node, follow_file_ref=True) loads that document and
    moves the cursor to its root.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from typing import Any

from genro_toolbox import smartsplit

from .exceptions import ConfigFileNotFoundError, MalformedXmlError, UnknownTypeError, WrongRootError
from .properties import PropertyMap
from .resolvers import RawFileResolver, XmlDocResolver
from .typed_values import (
    OPAQUE_TYPES,
    TYPE_ARRAY,
    TYPE_NULL,
    TYPE_OBJECT,
    TYPE_STRING,
    OpaqueCodec,
    TypeRegistry,
    coerce,
    decode_opaque,
)
from .xml_node import XmlNode
from .xml_parser import parse_xml_file
from .xml_writer import ARRAY_ELEMENT

logger = logging.getLogger(__name__)

NodePath = str | Sequence[str]


class XmlTreeReader:
    """Navigator over one parsed document.

    Args:
        file_path: Path of the document.
        root: Expected root tag.
        registry: Types allowed as object entries of get_assoc_array().
        codec: Opaque codec used by set_prop() for non-scalar types.
        cache_time: How long a document loaded through a ``file``
            reference is reused by later change_cursor() calls, in
            seconds; negative keeps it for the reader's lifetime, 0
            reloads it every time.

    Raises:
        ConfigFileNotFoundError: If file_path does not exist.
        EmptyFileError: If the file is empty.
        MalformedXmlError: If the file is not well-formed XML.
        WrongRootError: If the root tag is not root.
    """

    def __init__(
        self,
        file_path: str,
        root: str,
        registry: TypeRegistry | None = None,
        codec: OpaqueCodec | None = None,
        cache_time: int = -1,
    ):
        self.file_path = os.path.abspath(file_path)
        self.registry = registry
        self.codec = codec
        self.cache_time = cache_time
        self._documents: dict[tuple[str, str], XmlDocResolver] = {}
        self._path = os.path.join(os.path.dirname(self.file_path), '')
        self._root = parse_xml_file(self.file_path)
        if self._root.label != root:
            raise WrongRootError(root, self._root.label, source=self.file_path)
        self._cursor: XmlNode | None = None
        self._history: list[XmlNode | None] = []

    def __repr__(self) -> str:
        label = self._cursor.label if self._cursor is not None else '(root)'
        return f'<{self.__class__.__name__} {self.file_path} at {label}>'

    # -------------------------------------------------------------------------
    # Cursor
    # -------------------------------------------------------------------------

    @property
    def root(self) -> XmlNode:
        return self._root

    @property
    def cursor(self) -> XmlNode | None:
        """Current cursor node; None means the document root."""
        return self._cursor

    @property
    def current(self) -> XmlNode:
        """The node lookups are relative to."""
        return self._cursor if self._cursor is not None else self._root

    @property
    def depth(self) -> int:
        """Number of saved cursor positions."""
        return len(self._history)

    def cursor_into(self, node_path: NodePath) -> bool:
        """Move the cursor down along node_path.

        Returns False and leaves the cursor unchanged if any step is missing.
        """
        node = self._resolve(self.current, node_path)
        if node is None:
            return False
        self._history.append(self._cursor)
        self._cursor = node
        return True

    def change_cursor(self, node: XmlNode, follow_file_ref: bool = False) -> str | bool:
        """Move the cursor to node, for instance one returned by get_list().

        With follow_file_ref, a node carrying a ``file`` attribute that
        names an ``.xml`` file is replaced by the root of that document,
        which must have the node's tag.

        Returns:
            The absolute path of the loaded document when a file reference
            was followed, True otherwise.

        Raises:
            ConfigFileNotFoundError, EmptyFileError, MalformedXmlError:
                If the referenced document cannot be loaded.
            WrongRootError: If its root tag differs from node's tag.
        """
        target: XmlNode = node
        result: str | bool = True
        file_ref = node.get_attr('file') if follow_file_ref else ''
        if file_ref:
            file_path = os.path.abspath(os.path.join(self._path, file_ref))
            if file_path.endswith('xml') and not os.path.isdir(file_path):
                logger.debug('following <%s file="%s"> to %s', node.label, file_ref, file_path)
                target = self._document(file_path, node.label)
                result = file_path
        self._history.append(self._cursor)
        self._cursor = target
        return result

    def cursor_out(self) -> None:
        """Restore the previous cursor position (the root once history is empty)."""
        if self._history:
            self._cursor = self._history.pop()
        else:
            self._cursor = None

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def has_node(self, node_path: NodePath) -> bool:
        return self._resolve(self.current, node_path) is not None

    def get_node(self, node_path: NodePath) -> XmlNode | None:
        return self._resolve(self.current, node_path)

    def get_list(self, node_name: str = '') -> list[XmlNode]:
        """Children of the cursor named node_name (all children if empty)."""
        if not node_name:
            return list(self.current.children)
        return self.current.children_named(node_name)

    def get_text(self, node_path: NodePath) -> str:
        """Text of a child of the cursor, '' if absent."""
        node = self._resolve(self.current, node_path)
        return node.text if node is not None else ''

    def get_attribute(self, node_path: NodePath, attribute: str) -> str:
        """Attribute of a child of the cursor, or of the cursor itself when node_path is ''."""
        node = self._resolve(self.current, node_path) if node_path else self.current
        if node is None:
            return ''
        return node.get_attr(attribute)

    def get_path(self) -> str:
        """Directory of the document, with trailing separator."""
        return self._path

    # -------------------------------------------------------------------------
    # Typed values
    # -------------------------------------------------------------------------

    def get_array(self, node_name: str, parent_path: NodePath = '') -> list | dict | bool:
        """Read entries written by XmlTreeWriter.add_array().

        Entries are the ``node_name`` children of the cursor, or of the
        node at parent_path below it. An ``index`` attribute addresses a
        sequence position, a ``key`` attribute a mapping entry.

        Values and keys round-trip with their types, but the container is
        normalized: a mapping written with keys 0..n-1 in order, such as
        ``{0: 1, 1: 2}``, reads back as the list ``[1, 2]``.

        Returns:
            A list if all entries are indexed 0..n-1 in order, else a dict.
            False if parent_path or node_name do not exist.

        Raises:
            MalformedXmlError: If an ``index`` attribute is not a number.
        """
        parent = self._resolve(self.current, parent_path) if parent_path else self.current
        if parent is None or parent.child(node_name) is None:
            return False
        return self._array_from(parent.children_named(node_name))

    def get_assoc_array(self, node_path: NodePath | None = None) -> dict | list | bool:
        """Read entries written by XmlTreeWriter.add_assoc_array().

        Every child of the cursor (or of the node at node_path) is an
        entry named after its tag. Object entries are rebuilt through the
        reader's type registry.

        Returns:
            The mapping, or False if node_path does not exist.

        Raises:
            MalformedXmlError: If an ``index`` attribute is not a number.
            UnknownTypeError: If an object entry names an unregistered type.
        """
        parent = self._resolve(self.current, node_path) if node_path else self.current
        if parent is None:
            return False
        return self._assoc_from(parent)

    def set_prop(self, record: PropertyMap, prop: str, value_type: str | None = None) -> bool:
        """Set a record property from the cursor child named prop.

        The text is converted to value_type, or to the type declared by
        the property. Empty text becomes None for every type but string;
        array, object, resource, NULL and unknown types are decoded with
        the opaque codec.

        Returns:
            False if the child or the property setter is missing.
        """
        node = self.current.child(prop)
        prop_def = record.get(prop)
        if node is None or prop_def is None or prop_def.setter is None:
            return False
        value_type = value_type or prop_def.type
        text = node.text
        if text == '' and value_type != TYPE_STRING:
            value = None
        elif value_type in OPAQUE_TYPES:
            value = decode_opaque(text, self.codec)
        else:
            value = coerce(text, value_type)
        prop_def.setter(value)
        return True

    # -------------------------------------------------------------------------
    # Side files
    # -------------------------------------------------------------------------

    def read_file(self, node_path: NodePath = '', attribute: str = '', path: str = '') -> bytes | None:
        """Return the content of a file named by a node.

        The filename is taken from, in order: the given attribute, the
        ``file`` attribute, the node text. It is relative to the document
        directory, joined with path if given.

        Returns:
            The file content, or None if it cannot be read.

        Raises:
            ConfigFileNotFoundError: If no filename is given, or the file
                does not exist or is a directory.
        """
        node = self._resolve(self.current, node_path) if node_path else self.current
        if node is None:
            raise ConfigFileNotFoundError(f'node {node_path!r} not found')
        if attribute:
            filename = node.get_attr(attribute)
        elif node.get_attr('file'):
            filename = node.get_attr('file')
        else:
            filename = node.text
        if not filename:
            raise ConfigFileNotFoundError('no value for filename given')
        if path:
            path = os.path.join(path, '')
        filename = self._path + path + filename
        try:
            return RawFileResolver(filename)()
        except ConfigFileNotFoundError:
            raise
        except OSError as e:
            logger.warning('could not read %s: %s', filename, e)
            return None

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _document(self, file_path: str, root: str) -> XmlNode:
        resolver = self._documents.get((file_path, root))
        if resolver is None:
            resolver = XmlDocResolver(file_path, root=root, cache_time=self.cache_time)
            self._documents[(file_path, root)] = resolver
        return resolver()

    @staticmethod
    def _resolve(start: XmlNode, node_path: NodePath | None) -> XmlNode | None:
        if not node_path:
            return None
        if isinstance(node_path, str):
            names = [x for x in smartsplit(node_path, '/') if x]
        else:
            names = list(node_path)
        node = start
        for name in names:
            node = node.child(name)
            if node is None:
                return None
        return node

    def _array_from(self, elements: list[XmlNode]) -> list | dict:
        result: dict[Any, Any] = {}
        for element in elements:
            type_tag = element.get_attr('type', TYPE_STRING)
            if type_tag == TYPE_ARRAY:
                value = self._array_from(element.children_named(ARRAY_ELEMENT))
            else:
                value = coerce(element.text, type_tag)
            if 'key' in element.attr:
                result[element.attr['key']] = value
            elif 'index' in element.attr:
                result[self._index_of(element)] = value
        return _as_sequence(result)

    def _assoc_from(self, parent: XmlNode) -> dict | list:
        result: dict[Any, Any] = {}
        for element in parent:
            type_tag = element.get_attr('type', TYPE_STRING)
            if type_tag == TYPE_ARRAY:
                value = self._assoc_from(element)
            elif type_tag == TYPE_OBJECT:
                value = self._build_object(element)
            elif type_tag == TYPE_NULL:
                value = None
            else:
                value = coerce(element.text, type_tag)
            if 'index' in element.attr:
                key = self._index_of(element)
            else:
                key = element.attr.get('_tag', element.label)
            result[key] = value
        return _as_sequence(result)

    def _index_of(self, element: XmlNode) -> int:
        index = element.attr['index']
        try:
            return int(index)
        except ValueError:
            raise MalformedXmlError(
                self.file_path, [f'<{element.label}> has a non-numeric index "{index}"']
            ) from None

    def _build_object(self, element: XmlNode) -> Any:
        mapping = self._assoc_from(element)
        if isinstance(mapping, list):
            mapping = dict(enumerate(mapping))
        type_name = element.get_attr('class')
        if self.registry is None:
            raise UnknownTypeError(f'type tag "{type_name}" is not registered')
        return self.registry.build(type_name, mapping)


def _as_sequence(entries: dict) -> list | dict:
    """A list when keys are exactly 0..n-1 in order, else the dict itself."""
    if entries and all(type(k) is int and k == i for i, k in enumerate(entries)):
        return list(entries.values())
    return entries
