# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""XmlNode module - elements of a parsed configuration tree.

An XmlNode is the in-memory form of one XML element as seen by
XmlTreeReader: a label (the tag name), a dict of string attributes,
the direct character data and an ordered list of child nodes. Sibling
labels are not unique: a list of ``<Item>`` elements stays a list of
nodes with the same label.

The tree is built once by the parser and never mutated by the reader.
"""

from __future__ import annotations

from collections.abc import Iterator


class XmlNode:
    """One element of a parsed document.

    Attributes:
        label: The element tag name.
        attr: Dict of attribute name to string value.
        text: Direct character data of the element ('' if none).
        children: Ordered child nodes.
        parent: Enclosing node, None for a document root.
    """

    __slots__ = ('label', 'attr', 'text', 'children', 'parent')

    def __init__(self, label: str, attr: dict[str, str] | None = None, text: str = '') -> None:
        self.label = label
        self.attr: dict[str, str] = dict(attr) if attr else {}
        self.text = text
        self.children: list[XmlNode] = []
        self.parent: XmlNode | None = None

    def __eq__(self, other: object) -> bool:
        """Structural equality: label, attributes, text and children."""
        if not isinstance(other, XmlNode):
            return False
        return (
            self.label == other.label
            and self.attr == other.attr
            and self.text == other.text
            and self.children == other.children
        )

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    __hash__ = None  # type: ignore[assignment]

    def __bool__(self) -> bool:
        # a node without children is still a node
        return True

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator[XmlNode]:
        return iter(self.children)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f'XmlNode : {self.label} at {id(self)}'

    # -------------------------------------------------------------------------
    # Children
    # -------------------------------------------------------------------------

    def append(self, child: XmlNode) -> XmlNode:
        """Append child as last child of this node and return it."""
        child.parent = self
        self.children.append(child)
        return child

    def child(self, label: str) -> XmlNode | None:
        """First child with the given label, or None."""
        for node in self.children:
            if node.label == label:
                return node
        return None

    def children_named(self, label: str) -> list[XmlNode]:
        """All children with the given label, in document order."""
        return [node for node in self.children if node.label == label]

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator[XmlNode]:
        """Depth-first iteration over this node and all its descendants."""
        yield self
        for node in self.children:
            yield from node.walk()

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    def get_attr(self, name: str, default: str = '') -> str:
        return self.attr.get(name, default)

    def set_attr(self, name: str, value: str) -> None:
        self.attr[name] = value

    def del_attr(self, name: str) -> None:
        self.attr.pop(name, None)
