# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Versioned documents: fixed root tag stamped with two versions.

    <MndConfig version="1.2.0" shopware="5.4.6">
        <Mails>
            ...
        </Mails>
    </MndConfig>

VersionedXmlWriter stamps the format version and the host application
version on the root. VersionedXmlReader refuses documents written by
another version of either, before any navigation is possible.
"""

from __future__ import annotations

import logging

from .config import EmptyNodes, TreeConfig
from .exceptions import VersionMismatchError, WrongRootError
from .typed_values import OpaqueCodec, TypeRegistry
from .xml_reader import XmlTreeReader
from .xml_writer import XmlTreeWriter

logger = logging.getLogger(__name__)


def _require_host_version(config: TreeConfig) -> str:
    if not config.host_version:
        raise ValueError('versioned documents need config.host_version')
    return config.host_version


class VersionedXmlWriter(XmlTreeWriter):
    """Writer of a versioned document.

    The root is config.root_node with the version attributes; empty nodes
    are rendered with a comment. If root_list is given it is opened
    right away as the top-level list.
    """

    def __init__(
        self,
        root_list: str | None = None,
        config: TreeConfig | None = None,
        registry: TypeRegistry | None = None,
        codec: OpaqueCodec | None = None,
    ):
        config = config or TreeConfig.from_env()
        host_version = _require_host_version(config)
        super().__init__(config.root_node, config=config, registry=registry, codec=codec)
        self.add_attribute(config.version_attr, config.format_version)
        self.add_attribute(config.host_version_attr, host_version)
        self.set_empty_nodes(EmptyNodes.COMMENT)
        if root_list:
            self.start_list(root_list)


class VersionedXmlReader(XmlTreeReader):
    """Reader of a versioned document.

    Raises:
        WrongRootError: If the root tag is not config.root_node, or
            root_list is given and missing below it.
        VersionMismatchError: If the document was written by another
            host application version (reason 'host') or another format
            version (reason 'format').
    """

    def __init__(
        self,
        file_path: str,
        root_list: str | None = None,
        config: TreeConfig | None = None,
        registry: TypeRegistry | None = None,
        codec: OpaqueCodec | None = None,
    ):
        config = config or TreeConfig.from_env()
        host_version = _require_host_version(config)
        super().__init__(file_path, config.root_node, registry=registry, codec=codec)
        self.config = config

        found = self.get_attribute('', config.host_version_attr)
        if found != host_version:
            raise VersionMismatchError(VersionMismatchError.HOST, host_version, found, source=self.file_path)
        found = self.get_attribute('', config.version_attr)
        if found != config.format_version:
            raise VersionMismatchError(VersionMismatchError.FORMAT, config.format_version, found, source=self.file_path)

        if root_list and not self.cursor_into(root_list):
            raise WrongRootError(root_list, None, source=self.file_path)
        logger.debug('opened %s (format %s, host %s)', self.file_path, config.format_version, host_version)
