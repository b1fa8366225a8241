# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for XmlNode and the exception messages."""

from configtree import MalformedXmlError, VersionMismatchError, WrongRootError, XmlNode


def build_tree():
    root = XmlNode('Root', {'version': '1.0'})
    items = root.append(XmlNode('List'))
    items.append(XmlNode('Item', {'name': 'a'}, '42'))
    items.append(XmlNode('Item', {'name': 'b'}))
    root.append(XmlNode('Other'))
    return root


class TestXmlNode:
    """Tests for XmlNode."""

    def test_children(self):
        """Children keep order and duplicate labels."""
        root = build_tree()
        items = root.child('List')
        assert len(items) == 2
        assert [node.get_attr('name') for node in items.children_named('Item')] == ['a', 'b']
        assert items.child('Item').text == '42'
        assert root.child('Missing') is None
        assert items.parent is root

    def test_leaf(self):
        """A node without children is a leaf and still truthy."""
        node = XmlNode('Leaf')
        assert node.is_leaf
        assert node
        assert str(XmlNode('Leaf', text='x')) == 'x'

    def test_walk(self):
        """walk() visits all nodes depth first."""
        assert [node.label for node in build_tree().walk()] == ['Root', 'List', 'Item', 'Item', 'Other']

    def test_attributes(self):
        """get_attr() defaults to the empty string."""
        node = XmlNode('Value')
        node.set_attr('a', '1')
        assert node.get_attr('a') == '1'
        assert node.get_attr('b') == ''
        assert node.get_attr('b', 'x') == 'x'
        node.del_attr('a')
        node.del_attr('a')
        assert node.attr == {}

    def test_equality(self):
        """Equality compares the whole subtree."""
        assert build_tree() == build_tree()
        other = build_tree()
        other.child('List').child('Item').text = '43'
        assert build_tree() != other
        assert XmlNode('A') != 'A'


class TestErrorMessages:
    """Tests for the messages of the reader exceptions."""

    def test_wrong_root(self):
        """The message names both tags and the file."""
        error = WrongRootError('MndConfig', 'Templates', source='/tmp/a.xml')
        assert str(error) == 'file /tmp/a.xml\nXML-Node "MndConfig" expected, but got "Templates"!'

    def test_missing_node(self):
        """Without found tag the node is reported missing."""
        assert str(WrongRootError('Mails', None)) == 'XML-Node "Mails" expected, but could not be found!'

    def test_version_mismatch(self):
        """The message names the mismatching version kind."""
        error = VersionMismatchError(VersionMismatchError.HOST, '5.4.6', '5.3.0')
        assert 'host application version' in str(error)
        assert "'5.3.0'" in str(error)

    def test_malformed(self):
        """All diagnostics are listed below the file name."""
        error = MalformedXmlError('a.xml', ['line 1', 'line 2'])
        assert str(error) == 'file: a.xml\nline 1\nline 2'
