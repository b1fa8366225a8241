# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""RawFileResolver - content of a side file stored next to a document."""

from __future__ import annotations

import os

from ..exceptions import ConfigFileNotFoundError
from ..resolver import FileResolver


class RawFileResolver(FileResolver):
    """Resolver returning the bytes of a side file.

    Parameters (class_args):
        path: Filesystem path of the file.

    Raises:
        ConfigFileNotFoundError: If path does not exist or is a directory.
        OSError: If the file exists but cannot be read.
    """

    def load(self) -> bytes:
        if not os.path.exists(self.path) or os.path.isdir(self.path):
            raise ConfigFileNotFoundError(self.path)
        with open(self.path, 'rb') as f:
            return f.read()
