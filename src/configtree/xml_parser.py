# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""XML parsing into XmlNode trees.

The whole document is parsed at once with a SAX content handler and held
in memory. Parser diagnostics are collected by an error handler so that a
malformed file reports everything the parser had to say about it.

Line-break markers:
    XML parsers normalize CR and CRLF to LF, also inside CDATA sections.
    XmlTreeWriter therefore records the original style of CDATA text in a
    ``linebreak`` attribute (``\\r\\n`` or ``\\r``, written as escaped
    literals). restore_linebreaks() puts the original bytes back and drops
    the attribute, so readers never see it. Text mixing several styles
    carries no marker: its CRs are written as ``&#13;`` outside CDATA.
"""

from __future__ import annotations

import logging
import os
from typing import Any
from xml import sax

from .exceptions import ConfigFileNotFoundError, EmptyFileError, MalformedXmlError
from .xml_node import XmlNode

logger = logging.getLogger(__name__)

LINEBREAK_ATTR = 'linebreak'
LINEBREAK_WINDOWS = '\\r\\n'
LINEBREAK_MAC = '\\r'
LINEBREAK_UNIX = '\\n'

_LINEBREAKS = {
    LINEBREAK_WINDOWS: '\r\n',
    LINEBREAK_MAC: '\r',
    LINEBREAK_UNIX: '\n',
}


class XmlTreeParser(sax.handler.ContentHandler):
    """SAX handler building an XmlNode tree.

    Text of an element is its direct character data. Whitespace between
    child elements (indentation) is dropped; the text of leaves is kept
    byte for byte. Comments are not reported by SAX and so never reach
    the tree.
    """

    def startDocument(self) -> None:
        self.root: XmlNode | None = None
        self.stack: list[tuple[XmlNode, list[str]]] = []

    def startElement(self, name: str, attributes: Any) -> None:
        node = XmlNode(name, {str(k): v for k, v in attributes.items()})
        if self.stack:
            self.stack[-1][0].append(node)
        self.stack.append((node, []))

    def characters(self, content: str) -> None:
        if self.stack:
            self.stack[-1][1].append(content)

    def endElement(self, name: str) -> None:
        node, chunks = self.stack.pop()
        text = ''.join(chunks)
        if node.children and not text.strip():
            text = ''
        node.text = text
        if not self.stack:
            self.root = node


class _CollectingErrorHandler(sax.handler.ErrorHandler):
    """Keeps every diagnostic; fatal errors still stop the parse."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def warning(self, exception: sax.SAXParseException) -> None:
        self.messages.append(f'warning: {exception}')

    def error(self, exception: sax.SAXParseException) -> None:
        self.messages.append(str(exception))

    def fatalError(self, exception: sax.SAXParseException) -> None:
        self.messages.append(str(exception))
        raise exception


def parse_xml(content: str | bytes, source: str = '<string>') -> XmlNode:
    """Parse XML text and return the root node.

    Raises:
        MalformedXmlError: If the content is not well-formed.
    """
    handler = XmlTreeParser()
    errors = _CollectingErrorHandler()
    try:
        sax.parseString(content, handler, errors)
    except sax.SAXParseException as e:
        raise MalformedXmlError(source, errors.messages or [str(e)]) from e
    if errors.messages:
        logger.warning('parsed %s with diagnostics: %s', source, '; '.join(errors.messages))
    return handler.root


def parse_xml_file(path: str) -> XmlNode:
    """Read and parse an XML file, restoring marked line breaks.

    Raises:
        ConfigFileNotFoundError: If path does not exist or is a directory.
        EmptyFileError: If the file has no content.
        MalformedXmlError: If the content is not well-formed.
    """
    if not os.path.isfile(path):
        raise ConfigFileNotFoundError(f'file {path} not found!')
    with open(path, 'rb') as f:
        content = f.read()
    if not content:
        raise EmptyFileError(f'file {path} is empty!')
    logger.debug('parsing %s (%d bytes)', path, len(content))
    root = parse_xml(content, source=path)
    restore_linebreaks(root)
    return root


def restore_linebreaks(root: XmlNode) -> None:
    """Apply and remove ``linebreak`` markers in the whole tree."""
    for node in root.walk():
        marker = node.attr.pop(LINEBREAK_ATTR, None)
        if marker is None:
            continue
        linebreak = _LINEBREAKS.get(marker)
        if linebreak is None:
            logger.warning('unknown linebreak marker %r on <%s>', marker, node.label)
        elif linebreak != '\n':
            node.text = node.text.replace('\n', linebreak)
