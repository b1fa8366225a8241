# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for XmlTreeReader and the XML parser."""

import pytest

from configtree import (
    ConfigFileNotFoundError,
    EmptyFileError,
    MalformedXmlError,
    PropertyMap,
    WrongRootError,
    XmlTreeReader,
)
from configtree.xml_parser import parse_xml

DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<Root version="1.0">
    <List>
        <Item name="a">42</Item>
        <Item name="b"/>
    </List>
    <Mail id="7">
        <Subject>Order</Subject>
        <Templates>
            <Template lang="de">Hallo</Template>
            <Template lang="en">Hello</Template>
        </Templates>
    </Mail>
    <Content file="content.txt"/>
    <Body>body.html</Body>
</Root>
"""


@pytest.fixture
def reader(write_xml):
    return XmlTreeReader(write_xml('doc.xml', DOCUMENT), 'Root')


# =============================================================================
# Opening
# =============================================================================


class TestOpen:
    """Tests for the integrity checks of the constructor."""

    def test_missing_file(self, tmp_path):
        """A missing file raises ConfigFileNotFoundError."""
        with pytest.raises(ConfigFileNotFoundError):
            XmlTreeReader(str(tmp_path / 'missing.xml'), 'Root')

    def test_missing_file_is_file_not_found(self, tmp_path):
        """ConfigFileNotFoundError is also a FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            XmlTreeReader(str(tmp_path / 'missing.xml'), 'Root')

    def test_directory(self, tmp_path):
        """A directory is not a document."""
        with pytest.raises(ConfigFileNotFoundError):
            XmlTreeReader(str(tmp_path), 'Root')

    def test_empty_file(self, write_xml):
        """An empty file raises EmptyFileError."""
        with pytest.raises(EmptyFileError):
            XmlTreeReader(write_xml('empty.xml', ''), 'Root')

    def test_malformed(self, write_xml):
        """Malformed XML reports the file and the parser diagnostics."""
        path = write_xml('bad.xml', '<Root><Open></Root>')
        with pytest.raises(MalformedXmlError) as exc_info:
            XmlTreeReader(path, 'Root')
        assert exc_info.value.source == path
        assert exc_info.value.diagnostics
        assert str(exc_info.value).startswith(f'file: {path}\n')

    def test_wrong_root(self, write_xml):
        """A foreign root tag raises WrongRootError."""
        with pytest.raises(WrongRootError) as exc_info:
            XmlTreeReader(write_xml('doc.xml', DOCUMENT), 'Other')
        assert exc_info.value.expected == 'Other'
        assert exc_info.value.found == 'Root'

    def test_get_path(self, reader, tmp_path):
        """get_path() is the document directory with trailing separator."""
        assert reader.get_path() == str(tmp_path) + '/'

    def test_cursor_starts_at_root(self, reader):
        """A fresh reader has no cursor and an empty history."""
        assert reader.cursor is None
        assert reader.current is reader.root
        assert reader.depth == 0


# =============================================================================
# Navigation
# =============================================================================


class TestNavigation:
    """Tests for cursor movement."""

    def test_get_list(self, reader):
        """get_list() returns the named children of the cursor in order."""
        reader.cursor_into('List')
        items = reader.get_list('Item')
        assert [item.get_attr('name') for item in items] == ['a', 'b']
        assert items[0].text == '42'
        assert items[1].text == ''

    def test_get_list_all_children(self, reader):
        """Without a name get_list() returns all children."""
        labels = [node.label for node in reader.get_list()]
        assert labels == ['List', 'Mail', 'Content', 'Body']

    def test_get_list_missing(self, reader):
        """A missing name yields an empty list."""
        assert reader.get_list('Nothing') == []

    def test_cursor_into_missing(self, reader):
        """cursor_into() of a missing path leaves the cursor unchanged."""
        assert reader.cursor_into('Nothing') is False
        assert reader.cursor is None
        assert reader.depth == 0

    def test_cursor_into_path(self, reader):
        """cursor_into() accepts a slash separated path and a list of names."""
        assert reader.cursor_into('Mail/Templates') is True
        assert reader.current.label == 'Templates'
        reader.cursor_out()
        assert reader.cursor_into(['Mail', 'Templates']) is True
        assert reader.current.label == 'Templates'

    def test_balanced_navigation(self, reader):
        """Each cursor_out() undoes one cursor movement."""
        reader.cursor_into('Mail')
        for template in reader.get_list('Templates'):
            reader.change_cursor(template)
            assert reader.depth == 2
            langs = [node.get_attr('lang') for node in reader.get_list('Template')]
            assert langs == ['de', 'en']
            reader.cursor_out()
        assert reader.current.label == 'Mail'
        reader.cursor_out()
        assert reader.cursor is None

    def test_cursor_out_on_empty_history(self, reader):
        """cursor_out() with empty history goes back to the root."""
        reader.cursor_out()
        assert reader.cursor is None

    def test_change_cursor_returns_true(self, reader):
        """Without a followed file reference change_cursor() returns True."""
        node = reader.get_node('Mail')
        assert reader.change_cursor(node) is True
        assert reader.cursor is node


# =============================================================================
# Lookup
# =============================================================================


class TestLookup:
    """Tests for text and attribute access."""

    def test_get_text(self, reader):
        """get_text() reads a child of the cursor."""
        reader.cursor_into('Mail')
        assert reader.get_text('Subject') == 'Order'
        assert reader.get_text('Templates/Template') == 'Hallo'

    def test_get_text_missing(self, reader):
        """Missing nodes read as empty text."""
        assert reader.get_text('Nothing') == ''

    def test_get_text_of_container(self, reader):
        """Indentation between children is not text."""
        assert reader.get_text('Mail') == ''

    def test_get_attribute(self, reader):
        """get_attribute() reads a child's attribute, or the cursor's with ''."""
        assert reader.get_attribute('Mail', 'id') == '7'
        assert reader.get_attribute('', 'version') == '1.0'
        assert reader.get_attribute('Mail', 'missing') == ''
        assert reader.get_attribute('Nothing', 'id') == ''

    def test_has_node(self, reader):
        """has_node() checks paths relative to the cursor."""
        assert reader.has_node('Mail/Subject')
        assert not reader.has_node('Subject')
        reader.cursor_into('Mail')
        assert reader.has_node('Subject')


# =============================================================================
# Side files
# =============================================================================


class TestReadFile:
    """Tests for read_file()."""

    def test_file_attribute(self, reader, tmp_path):
        """The file attribute names the side file."""
        (tmp_path / 'content.txt').write_bytes(b'plain text')
        assert reader.read_file('Content') == b'plain text'

    def test_node_text(self, reader, tmp_path):
        """Without file attribute the node text is the filename."""
        (tmp_path / 'body.html').write_bytes(b'<p>hi</p>')
        assert reader.read_file('Body') == b'<p>hi</p>'

    def test_sub_path(self, reader, tmp_path):
        """path is joined between the document directory and the filename."""
        (tmp_path / 'html').mkdir()
        (tmp_path / 'html' / 'body.html').write_bytes(b'x')
        assert reader.read_file('Body', path='html') == b'x'

    def test_named_attribute(self, write_xml, tmp_path):
        """An explicit attribute takes precedence."""
        path = write_xml('doc.xml', '<Root><Mail src="a.txt" file="b.txt"/></Root>')
        (tmp_path / 'a.txt').write_bytes(b'a')
        (tmp_path / 'b.txt').write_bytes(b'b')
        reader = XmlTreeReader(path, 'Root')
        assert reader.read_file('Mail', attribute='src') == b'a'
        assert reader.read_file('Mail') == b'b'

    def test_missing_file(self, reader):
        """A missing side file raises ConfigFileNotFoundError."""
        with pytest.raises(ConfigFileNotFoundError):
            reader.read_file('Content')

    def test_no_filename(self, reader):
        """A node without filename raises ConfigFileNotFoundError."""
        reader.cursor_into('List')
        with pytest.raises(ConfigFileNotFoundError):
            reader.read_file()

    def test_directory(self, reader, tmp_path):
        """A directory is not a side file."""
        (tmp_path / 'body.html').mkdir()
        with pytest.raises(ConfigFileNotFoundError):
            reader.read_file('Body')


# =============================================================================
# Properties
# =============================================================================


class Settings:
    def __init__(self):
        self.position = None
        self.active = None
        self.ratio = None
        self.title = 'untouched'
        self.extra = 'untouched'


SETTINGS = """<Root>
    <Position>12abc</Position>
    <Active>0</Active>
    <Ratio>1.5</Ratio>
    <Title></Title>
    <Extra></Extra>
</Root>
"""


class TestSetProp:
    """Tests for set_prop()."""

    @pytest.fixture
    def settings_reader(self, write_xml):
        return XmlTreeReader(write_xml('settings.xml', SETTINGS), 'Root')

    def test_typed_values(self, settings_reader):
        """Text is converted to the declared type."""
        record = Settings()
        props = PropertyMap.for_object(record, {'Position': 'integer', 'Active': 'boolean', 'Ratio': 'double'})
        assert settings_reader.set_prop(props, 'Position') is True
        settings_reader.set_prop(props, 'Active')
        settings_reader.set_prop(props, 'Ratio')
        assert record.position == 12
        assert record.active is False
        assert record.ratio == 1.5

    def test_empty_string(self, settings_reader):
        """Empty text stays an empty string for string properties."""
        record = Settings()
        props = PropertyMap.for_object(record, {'Title': 'string'})
        settings_reader.set_prop(props, 'Title')
        assert record.title == ''

    def test_empty_non_string(self, settings_reader):
        """Empty text becomes None for any other type."""
        record = Settings()
        props = PropertyMap.for_object(record, {'Extra': 'integer'})
        settings_reader.set_prop(props, 'Extra')
        assert record.extra is None

    def test_explicit_type(self, settings_reader):
        """value_type overrides the declared type."""
        record = Settings()
        props = PropertyMap.for_object(record, {'Position': 'string'})
        settings_reader.set_prop(props, 'Position', 'integer')
        assert record.position == 12

    def test_missing_node(self, settings_reader):
        """A missing node leaves the record untouched."""
        record = {'Other': 'x'}
        props = PropertyMap.for_mapping(record, {'Other': 'string'})
        assert settings_reader.set_prop(props, 'Other') is False
        assert record == {'Other': 'x'}

    def test_unknown_property(self, settings_reader):
        """A property missing from the table is not set."""
        props = PropertyMap.for_mapping({}, {})
        assert settings_reader.set_prop(props, 'Position') is False


# =============================================================================
# Parser
# =============================================================================


class TestParser:
    """Tests for parse_xml()."""

    def test_tree(self):
        """Elements, attributes and texts are kept in document order."""
        root = parse_xml('<A x="1"><B>b</B><C/><B>c</B></A>')
        assert root.label == 'A'
        assert root.attr == {'x': '1'}
        assert [child.label for child in root] == ['B', 'C', 'B']
        assert [child.text for child in root.children_named('B')] == ['b', 'c']
        assert root.children[0].parent is root

    def test_leaf_whitespace_kept(self):
        """Whitespace of leaves is significant."""
        root = parse_xml('<A><B>  b  </B></A>')
        assert root.child('B').text == '  b  '

    def test_comments_dropped(self):
        """Comments never reach the tree."""
        root = parse_xml('<A><!-- note --><B/></A>')
        assert [child.label for child in root] == ['B']

    def test_character_reference(self):
        """Escaped carriage returns survive parsing."""
        root = parse_xml('<A>a&#13;\nb</A>')
        assert root.text == 'a\r\nb'

    def test_malformed(self):
        """Parse errors name the source."""
        with pytest.raises(MalformedXmlError) as exc_info:
            parse_xml('<A>', source='inline')
        assert exc_info.value.source == 'inline'
