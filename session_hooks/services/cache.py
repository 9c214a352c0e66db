"""
Session lookup cache.

Content-stage lookups scan every log under the projects root, so their result
is remembered per session id. The cache is injected into SessionLocator;
which implementation backs it is the caller's choice:

- MemorySessionCache: lives for one process (tests, long-running callers)
- FileSessionCache: one small file per session id, shared by the short-lived
  hook processes that run for every event of a session

Entries never expire. A cached path is only trusted while it still exists.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from session_hooks.paths import sanitize_cache_key

__all__ = [
    'FileSessionCache',
    'MemorySessionCache',
    'SessionCache',
]

logger = logging.getLogger(__name__)


class SessionCache(Protocol):
    """Mapping of session id -> previously resolved log path."""

    def get(self, session_id: str) -> Path | None: ...
    def put(self, session_id: str, path: Path) -> None: ...


class MemorySessionCache:
    """Process-local cache backed by a dict."""

    def __init__(self) -> None:
        self._entries: dict[str, Path] = {}

    def get(self, session_id: str) -> Path | None:
        return self._entries.get(session_id)

    def put(self, session_id: str, path: Path) -> None:
        self._entries[session_id] = path

    def __len__(self) -> int:
        return len(self._entries)


class FileSessionCache:
    """
    Filesystem-backed cache shared across hook invocations.

    Each entry is `<directory>/session_<sanitised id>.cache` holding the
    resolved path as text. Read and write failures are logged and treated as
    misses, the cache is never a reason for a lookup to fail.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def entry_path(self, session_id: str) -> Path:
        return self.directory / f'session_{sanitize_cache_key(session_id)}.cache'

    def get(self, session_id: str) -> Path | None:
        entry = self.entry_path(session_id)
        try:
            cached = entry.read_text(encoding='utf-8').strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug('Cannot read cache entry %s: %s', entry, e)
            return None
        return Path(cached) if cached else None

    def put(self, session_id: str, path: Path) -> None:
        entry = self.entry_path(session_id)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            entry.write_text(f'{path}\n', encoding='utf-8')
        except OSError as e:
            logger.debug('Cannot write cache entry %s: %s', entry, e)
