# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Document-wide settings for configuration tree files."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from enum import IntEnum

from . import __version__


class EmptyNodes(IntEnum):
    """How XmlTreeWriter.add() renders a leaf without text or attributes."""

    HIDE = 0     # no element at all
    SINGLE = 1   # <Node/>
    FULL = 2     # <Node></Node>
    COMMENT = 3  # <Node><!-- empty --></Node>


@dataclass(frozen=True)
class TreeConfig:
    """Settings shared by writers and readers of one document family.

    Attributes:
        indent: Indentation unit of the written document.
        encoding: Encoding declared in the header and used for files.
        empty_nodes: Empty-node policy of plain writers.
        root_node: Fixed root tag of versioned documents.
        format_version: Version of the document format (this package).
        host_version: Version of the host application, stamped on write
            and compared on read. Versioned wrappers require it.
        version_attr: Root attribute carrying format_version.
        host_version_attr: Root attribute carrying host_version.
    """

    indent: str = '    '
    encoding: str = 'UTF-8'
    empty_nodes: EmptyNodes = EmptyNodes.HIDE
    root_node: str = 'MndConfig'
    format_version: str = __version__
    host_version: str | None = None
    version_attr: str = 'version'
    host_version_attr: str = 'shopware'

    @classmethod
    def from_env(cls, prefix: str = 'CONFIGTREE_', environ=None, **overrides) -> TreeConfig:
        """Build a config from environment variables.

        Every field can be set through ``<prefix><FIELD_NAME>``, e.g.
        ``CONFIGTREE_HOST_VERSION=5.4.6``. ``empty_nodes`` accepts either
        the policy name (``comment``) or its number. Keyword overrides win
        over the environment.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for f in fields(cls):
            raw = environ.get(f'{prefix}{f.name.upper()}')
            if raw is None:
                continue
            if f.name == 'empty_nodes':
                values[f.name] = EmptyNodes[raw.upper()] if not raw.isdigit() else EmptyNodes(int(raw))
            else:
                values[f.name] = raw
        values.update(overrides)
        return cls(**values)

    def with_options(self, **changes) -> TreeConfig:
        """Return a copy with some fields replaced."""
        return replace(self, **changes)
