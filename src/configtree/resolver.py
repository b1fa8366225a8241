# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""FileResolver module - lazy loading of side files.

A resolver is a small callable bound to one file. XmlTreeReader keeps
one resolver per referenced document, so navigating into the same
``file`` reference twice parses it once:

    >>> resolver = XmlDocResolver('/export/mail/templates.xml', root='Templates')
    >>> resolver() is resolver()   # cache_time=-1
    True

Caching Semantics:
    - cache_time = 0  -> NO cache, load() called ALWAYS
    - cache_time > 0  -> cache for N seconds (TTL)
    - cache_time < 0  -> INFINITE cache (until manual reset())
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any


class FileResolver:
    """Base class for values loaded from a file on demand.

    Class Attributes:
        class_args: Positional parameter names.
        class_kwargs: Keyword parameters with their defaults.
            ``cache_time`` is always present.

    Subclasses implement load(), reading their parameters from ``_kw``.
    """

    class_kwargs: dict[str, Any] = {'cache_time': 0}
    class_args: list[str] = ['path']

    __slots__ = ('_kw', '_loaded_at', '_cached')

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._kw: dict[str, Any] = dict(zip(self.class_args, args))
        for parname, dflt in self.class_kwargs.items():
            self._kw[parname] = kwargs.pop(parname, dflt)
        if kwargs:
            raise TypeError(f'{self.__class__.__name__}: unexpected parameters {sorted(kwargs)}')
        self._loaded_at: datetime | None = None
        self._cached: Any = None

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.path!r})'

    @property
    def path(self) -> str:
        return self._kw['path']  # type: ignore[no-any-return]

    @property
    def cache_time(self) -> int:
        return self._kw['cache_time']  # type: ignore[no-any-return]

    @property
    def expired(self) -> bool:
        cache_time = self.cache_time
        if cache_time == 0 or self._loaded_at is None:
            return True
        if cache_time < 0:
            return False
        return datetime.now() - self._loaded_at > timedelta(seconds=cache_time)

    def reset(self) -> None:
        """Invalidate cache, forcing reload on next call."""
        self._loaded_at = None
        self._cached = None

    def __call__(self) -> Any:
        """Return the loaded value, from cache when still valid."""
        if not self.expired:
            return self._cached
        result = self.load()
        if self.cache_time != 0:
            self._cached = result
            self._loaded_at = datetime.now()
        return result

    def load(self) -> Any:
        """Load and return the value. MUST be overridden in subclasses."""
        raise NotImplementedError('Subclasses must implement load()')
