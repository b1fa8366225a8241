# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""configtree - bidirectional XML serialization of configuration trees.

XmlTreeWriter builds a document from a sequence of calls; XmlTreeReader
navigates a parsed document with a cursor and restores typed values,
arrays and objects. The versioned variants stamp and check a format
version and a host application version on a fixed root tag.
"""

__version__ = '0.1.0'

from .batch import ImportReport, import_directory
from .config import EmptyNodes, TreeConfig
from .exceptions import (
    ConfigFileNotFoundError,
    ConfigTreeError,
    EmptyFileError,
    MalformedXmlError,
    UnknownTypeError,
    VersionMismatchError,
    WrongRootError,
)
from .file_io import ConfigIO
from .properties import Property, PropertyMap
from .typed_values import TYTX_CODEC, OpaqueCodec, TypeRegistry
from .versioned import VersionedXmlReader, VersionedXmlWriter
from .xml_node import XmlNode
from .xml_reader import XmlTreeReader
from .xml_writer import XmlTreeWriter

__all__ = [
    'ConfigFileNotFoundError',
    'ConfigIO',
    'ConfigTreeError',
    'EmptyFileError',
    'EmptyNodes',
    'ImportReport',
    'MalformedXmlError',
    'OpaqueCodec',
    'Property',
    'PropertyMap',
    'TYTX_CODEC',
    'TreeConfig',
    'TypeRegistry',
    'UnknownTypeError',
    'VersionMismatchError',
    'VersionedXmlReader',
    'VersionedXmlWriter',
    'WrongRootError',
    'XmlNode',
    'XmlTreeReader',
    'XmlTreeWriter',
    'import_directory',
]
