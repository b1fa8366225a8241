# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""ConfigIO - target directory handling for exports.

Files are written below ``base_path/module_path/sub_path``. Existing
targets are refused unless the export runs in clean mode, in which case
the module directory is removed and rebuilt.

Example:
    >>> io = ConfigIO('/var/export', clean=True)
    >>> io.set_module_path('mail')
    >>> io.write('sOrder.xml', writer.get())
    >>> io.last_file
    '/var/export/mail/sOrder.xml'
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile

logger = logging.getLogger(__name__)


def _dir_path(path: str) -> str:
    """path with a trailing separator, '' for an empty path."""
    return os.path.join(path, '') if path else ''


class ConfigIO:
    """Path handling and write/copy functionality of an export.

    Args:
        base_path: Absolute target directory.
        clean: If True, existing module directories are recreated.

    Raises:
        ValueError: If base_path is not absolute.
    """

    def __init__(self, base_path: str, clean: bool = False):
        if not os.path.isabs(base_path):
            raise ValueError(f'Path {base_path} is not absolute.')
        self.base_path = _dir_path(base_path)
        self.clean = clean
        self.module_path = ''
        self.sub_path = ''
        self.last_file = ''

    def set_module_path(self, path: str) -> None:
        """Select the module directory below base_path.

        Raises:
            FileExistsError: If it exists and clean mode is off.
        """
        full_path = self.base_path + path
        if os.path.exists(full_path):
            if not self.clean:
                raise FileExistsError(
                    f"Path '{full_path}' already exists. "
                    'If you want to overwrite files use a clean export.'
                )
            logger.info('removing %s for clean export', full_path)
            shutil.rmtree(full_path)
        self.module_path = _dir_path(path)

    def set_sub_path(self, path: str) -> None:
        """Select a directory below the module directory.

        Raises:
            FileExistsError: If it exists and clean mode is off.
        """
        full_path = self.base_path + self.module_path + path
        if path and os.path.exists(full_path) and not self.clean:
            raise FileExistsError(
                f"Path '{full_path}' already exists. "
                'If you want to overwrite files use a clean export.'
            )
        self.sub_path = _dir_path(path)

    def target_path(self, filename: str) -> str:
        return self.base_path + self.module_path + self.sub_path + filename

    def exists(self, filename: str) -> bool:
        """True if filename exists in the target directory. Always False in clean mode."""
        if self.clean:
            return False
        return os.path.exists(self.target_path(filename))

    def write(self, filename: str, content: str | bytes, encoding: str = 'UTF-8') -> str:
        """Atomically write content to filename in the target directory.

        Returns:
            The full path written.
        """
        if not filename:
            raise ValueError("Can't write file: filename is empty!")
        target = self.target_path(filename)
        dirname = os.path.dirname(target)
        os.makedirs(dirname, exist_ok=True)
        data = content.encode(encoding) if isinstance(content, str) else content
        fd, tmp_path = tempfile.mkstemp(dir=dirname, prefix='.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_path, target)
        except BaseException:
            os.unlink(tmp_path)
            raise
        self.last_file = target
        logger.debug('wrote %s (%d bytes)', target, len(data))
        return target

    def copy(self, source_file: str, filename: str) -> str:
        """Copy source_file to filename in the target directory."""
        if not filename:
            raise ValueError("Can't copy file: filename is empty!")
        target = self.target_path(filename)
        os.makedirs(os.path.dirname(target), exist_ok=True)
        shutil.copyfile(source_file, target)
        logger.debug('copied %s to %s', source_file, target)
        return target
