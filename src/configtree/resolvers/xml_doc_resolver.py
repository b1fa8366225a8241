# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""XmlDocResolver - lazily loads an external XML document."""

from __future__ import annotations

from ..exceptions import WrongRootError
from ..resolver import FileResolver
from ..xml_node import XmlNode
from ..xml_parser import parse_xml_file


class XmlDocResolver(FileResolver):
    """Resolver returning the root XmlNode of an XML file.

    Parameters (class_args):
        path: Filesystem path of the document.

    Parameters (class_kwargs):
        root: Expected root tag. None accepts any root.
        cache_time: Cache duration in seconds. Default 0.

    Example:
        >>> resolver = XmlDocResolver('/export/mail/Templates.xml', root='Templates')
        >>> root = resolver()
        >>> [node.label for node in root]
        ['Template', 'Template']
    """

    class_kwargs = {'cache_time': 0, 'root': None}

    def load(self) -> XmlNode:
        """Parse the document and check its root tag.

        Raises:
            ConfigFileNotFoundError: If the file does not exist.
            EmptyFileError: If the file is empty.
            MalformedXmlError: If the file is not well-formed.
            WrongRootError: If the root tag is not the expected one.
        """
        root = parse_xml_file(self.path)
        expected = self._kw['root']
        if expected is not None and root.label != expected:
            raise WrongRootError(expected, root.label, source=self.path)
        return root
