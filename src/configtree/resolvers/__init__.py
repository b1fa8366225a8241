# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Concrete FileResolver implementations.

- XmlDocResolver: loads an external XML document as an XmlNode tree
- RawFileResolver: loads the raw bytes of a side file
"""

from .raw_file_resolver import RawFileResolver
from .xml_doc_resolver import XmlDocResolver

__all__ = [
    'RawFileResolver',
    'XmlDocResolver',
]
