# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exceptions raised while reading configuration tree documents.

The reader is fail-fast on document integrity: missing or empty files,
malformed XML, unexpected root tags and version mismatches all raise.
The writer never raises on structural misuse (see XmlTreeWriter.errors).
"""

from __future__ import annotations


class ConfigTreeError(Exception):
    """Base class for all configtree errors."""
    pass


class ConfigFileNotFoundError(ConfigTreeError, FileNotFoundError):
    """Input or referenced file is absent, or is a directory."""
    pass


class EmptyFileError(ConfigTreeError):
    """Input file exists but has no content."""
    pass


class MalformedXmlError(ConfigTreeError):
    """Document is not well-formed XML.

    Attributes:
        source: Path (or label) of the parsed document.
        diagnostics: Messages collected from the SAX parser.
    """

    def __init__(self, source: str, diagnostics: list[str]):
        self.source = source
        self.diagnostics = list(diagnostics)
        message = f'file: {source}\n' + '\n'.join(self.diagnostics)
        super().__init__(message)


class WrongRootError(ConfigTreeError):
    """Root element differs from the expected one."""

    def __init__(self, expected: str, found: str | None, source: str = ''):
        self.expected = expected
        self.found = found
        self.source = source
        if found is None:
            message = f'XML-Node "{expected}" expected, but could not be found!'
        else:
            message = f'XML-Node "{expected}" expected, but got "{found}"!'
        if source:
            message = f'file {source}\n{message}'
        super().__init__(message)


class VersionMismatchError(ConfigTreeError):
    """Document was written by another host or format version.

    Attributes:
        reason: 'host' or 'format'.
        expected: Version of the running system.
        found: Version recorded in the document.
    """

    HOST = 'host'
    FORMAT = 'format'

    def __init__(self, reason: str, expected: str, found: str, source: str = ''):
        self.reason = reason
        self.expected = expected
        self.found = found
        self.source = source
        what = 'host application' if reason == self.HOST else 'format'
        super().__init__(
            f'exported data comes from another {what} version: '
            f'expected {expected!r}, found {found!r}'
        )


class UnknownTypeError(ConfigTreeError):
    """An object-typed entry names a type tag that is not registered."""
    pass
