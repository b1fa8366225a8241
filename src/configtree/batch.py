# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Import of a directory of versioned documents.

One broken file must not stop an import: every document is opened and
handled on its own, failures are logged and collected, and the walk goes
on with the next file.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field

from .config import TreeConfig
from .exceptions import ConfigTreeError, WrongRootError
from .typed_values import OpaqueCodec, TypeRegistry
from .versioned import VersionedXmlReader

logger = logging.getLogger(__name__)

ImportHandler = Callable[[VersionedXmlReader, str], None]


@dataclass
class ImportReport:
    """Outcome of import_directory().

    Attributes:
        imported: Files handled successfully.
        skipped: Files ignored because of a foreign root tag.
        errors: Error messages, without duplicates.
    """

    imported: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        if message not in self.errors:
            self.errors.append(message)

    @property
    def ok(self) -> bool:
        return not self.errors


def find_documents(path: str, pattern: str = '*.xml') -> list[str]:
    """Files below path matching pattern, sorted."""
    found = []
    for dirpath, dirnames, filenames in os.walk(path):
        dirnames.sort()
        for filename in sorted(filenames):
            if fnmatch.fnmatch(filename, pattern):
                found.append(os.path.join(dirpath, filename))
    return found


def import_directory(
    path: str,
    handler: ImportHandler,
    root_list: str | None = None,
    config: TreeConfig | None = None,
    pattern: str = '*.xml',
    registry: TypeRegistry | None = None,
    codec: OpaqueCodec | None = None,
) -> ImportReport:
    """Open every document below path and pass it to handler.

    Documents with another root tag (side files referenced by other
    documents, for instance) are skipped. Any other ConfigTreeError,
    raised while opening a document or by handler, is recorded in the
    report and the import continues.

    Args:
        path: Directory to walk.
        handler: Called as handler(reader, file_path) for each document.
        root_list: Top-level list every document must contain.
        config: Document settings; defaults to TreeConfig.from_env().
        pattern: Filename pattern of documents.
    """
    config = config or TreeConfig.from_env()
    report = ImportReport()
    for file_path in find_documents(path, pattern):
        try:
            reader = VersionedXmlReader(file_path, root_list, config=config, registry=registry, codec=codec)
        except WrongRootError as e:
            if e.found is not None:
                logger.debug('skipped %s: %s', file_path, e)
                report.skipped.append(file_path)
                continue
            logger.error('%s', e)
            report.add_error(str(e))
            continue
        except ConfigTreeError as e:
            logger.error('skipped file %s: %s', file_path, e)
            report.add_error(f'skipped file {file_path}: {e}')
            continue
        logger.info('import file %s', file_path)
        try:
            handler(reader, file_path)
        except ConfigTreeError as e:
            logger.error('import of %s failed: %s', file_path, e)
            report.add_error(f'import of {file_path} failed: {e}')
            continue
        report.imported.append(file_path)
    return report
