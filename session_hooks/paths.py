"""
Path utilities for locating Claude Code session logs.

Claude Code keeps one directory per project under ~/.claude/projects/, named
by a lossy encoding of the project path, so the real project name has to be
read from the `cwd` field of the log records rather than decoded from the
directory name.
"""

from __future__ import annotations

import re
from pathlib import Path

__all__ = [
    'is_null_value',
    'is_within',
    'project_name_from_cwd',
    'sanitize_cache_key',
]

_CACHE_KEY_UNSAFE = re.compile(r'[^a-zA-Z0-9_-]')


def is_null_value(value: str | None) -> bool:
    """
    True for values hooks send when a field is absent.

    Hook payloads produced by shell tooling may carry the literal string
    "null" instead of omitting the field, so both count as absent.
    """
    return value is None or value == '' or value == 'null'


def is_within(path: Path, root: Path) -> bool:
    """
    Check whether path lies strictly inside root.

    Both sides are resolved first, so `..` segments and symlinks cannot be
    used to escape the root.

    Examples:
        >>> is_within(Path('/home/u/.claude/projects/-x'), Path('/home/u/.claude/projects'))
        True

        >>> is_within(Path('/home/u/.claude/projects/../x'), Path('/home/u/.claude/projects'))
        False
    """
    try:
        resolved = path.resolve()
        resolved_root = root.resolve()
    except (OSError, RuntimeError):
        return False
    return resolved != resolved_root and resolved.is_relative_to(resolved_root)


def sanitize_cache_key(session_id: str) -> str:
    """
    Make a session id safe to embed in a cache file name.

    Examples:
        >>> sanitize_cache_key('abc/../def')
        'abc____def'
    """
    return _CACHE_KEY_UNSAFE.sub('_', session_id)


def project_name_from_cwd(cwd: str) -> str | None:
    """Last path component of a recorded working directory, None if it has none."""
    name = Path(cwd.rstrip('/')).name
    return name or None
