"""
Project name lookup from session logs.

Project directory names under ~/.claude/projects/ are a lossy encoding of the
project path, so the name is taken from the first record's `cwd` field.
"""

from __future__ import annotations

from pathlib import Path

from session_hooks.exceptions import MissingCwdError
from session_hooks.paths import project_name_from_cwd
from session_hooks.schemas.session import decode_record, metadata_text

__all__ = ['extract_project_cwd', 'extract_project_name']


def extract_project_cwd(session_file: Path) -> str:
    """
    First non-empty `cwd` recorded in a session log.

    Raises:
        MissingCwdError: If no record carries a cwd
        OSError: If the file cannot be read
    """
    with open(session_file, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            record = decode_record(line)
            cwd = metadata_text(record.cwd) if record is not None else None
            if cwd and cwd != 'null':
                return cwd
    raise MissingCwdError(str(session_file))


def extract_project_name(session_file: Path) -> str:
    """
    Name of the project a session log belongs to.

    Raises:
        MissingCwdError: If no record carries a usable cwd
        OSError: If the file cannot be read
    """
    name = project_name_from_cwd(extract_project_cwd(session_file))
    if name is None:
        raise MissingCwdError(str(session_file))
    return name
