# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pytest configuration and fixtures."""

import pytest

from configtree import TreeConfig


@pytest.fixture
def config():
    """Settings of a versioned document family for host 5.4.6."""
    return TreeConfig(host_version='5.4.6', format_version='1.0.0')


@pytest.fixture
def write_xml(tmp_path):
    """Write a document below tmp_path and return its path as string."""

    def write(name, content, encoding='utf-8'):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode(encoding)
        path.write_bytes(content)
        return str(path)

    return write
