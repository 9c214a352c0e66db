"""
Session discovery service - resolves a hook payload to one session log.

Hooks identify their session sparsely: sometimes a transcript path, sometimes
only a session id, sometimes a transcript path that no longer exists. The
locator tries, in order:

1. the transcript path itself, if it names an existing file
2. a cached result for the session id
3. a file named `<session_id>.jsonl` under the search root
4. any `*.jsonl` under the search root with a matching "sessionId" field

The search root is the transcript's directory when that is an existing
directory inside the projects root, otherwise the whole projects root.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from session_hooks.domain import ResolutionStage, ResolvedSession
from session_hooks.paths import is_null_value, is_within
from session_hooks.schemas.session import SchemaVariant
from session_hooks.services.cache import SessionCache

__all__ = [
    'LocatorStats',
    'SessionLocator',
    'session_id_pattern',
]

logger = logging.getLogger(__name__)


def session_id_pattern(session_id: str) -> re.Pattern[str]:
    """Regex matching a `"sessionId": "<id>"` pair, whitespace-tolerant."""
    return re.compile(rf'"sessionId"\s*:\s*"{re.escape(session_id)}"')


@dataclass
class LocatorStats:
    """Counters for the expensive search stages."""

    cache_hits: int = 0
    filename_searches: int = 0
    content_searches: int = 0
    files_scanned: int = 0


class SessionLocator:
    """
    Service for finding the session log a hook payload refers to.

    Never raises for lookup problems: every failure is a miss (None).
    """

    def __init__(self, projects_dir: Path, cache: SessionCache) -> None:
        """
        Initialize locator.

        Args:
            projects_dir: Canonical session log root (~/.claude/projects)
            cache: Session id -> path cache for content-stage results
        """
        self.projects_dir = projects_dir
        self.cache = cache
        self.stats = LocatorStats()

    def resolve(self, session_id: str | None, transcript_path: str | None) -> ResolvedSession | None:
        """
        Resolve a session id and/or transcript path to an existing log file.

        Args:
            session_id: Session id from the hook payload (may be empty or "null")
            transcript_path: Transcript path from the hook payload (may be empty,
                "null", or point at a file that does not exist)

        Returns:
            ResolvedSession, or None if nothing could be found
        """
        if not is_null_value(transcript_path):
            transcript = Path(transcript_path)
            if transcript.is_file():
                logger.debug('Using transcript path: %s', transcript)
                return ResolvedSession(
                    path=transcript,
                    variant=self.variant_for(transcript),
                    stage=ResolutionStage.TRANSCRIPT_PATH,
                )

        if is_null_value(session_id):
            logger.debug('No usable session_id or transcript_path')
            return None

        return self._resolve_session_id(session_id, transcript_path)

    def variant_for(self, path: Path) -> SchemaVariant:
        """Logs under the projects root use the projects rules, anything else the transcript rules."""
        return SchemaVariant.PROJECTS if is_within(path, self.projects_dir) else SchemaVariant.TRANSCRIPT

    def search_root(self, transcript_path: str | None) -> Path:
        """
        Pick the directory to search for a session id.

        The transcript's parent directory narrows the search, but only when it
        exists and sits inside the projects root.
        """
        if not is_null_value(transcript_path):
            project_dir = Path(transcript_path).parent
            if project_dir.is_dir() and is_within(project_dir, self.projects_dir):
                logger.debug('Using narrowed search root: %s', project_dir)
                return project_dir
        logger.debug('Using full search root: %s', self.projects_dir)
        return self.projects_dir

    def find_by_filename(self, session_id: str, root: Path) -> Path | None:
        """First `<session_id>.jsonl` under root, in sorted walk order."""
        self.stats.filename_searches += 1
        target = f'{session_id}.jsonl'
        for path in _iter_jsonl_files(root):
            if path.name == target:
                return path
        return None

    def find_by_content(self, session_id: str, root: Path) -> Path | None:
        """First `*.jsonl` under root containing the session id as its sessionId."""
        self.stats.content_searches += 1
        pattern = session_id_pattern(session_id)
        logger.debug('Content search pattern: %s', pattern.pattern)
        for path in _iter_jsonl_files(root):
            self.stats.files_scanned += 1
            if _file_contains(path, pattern):
                return path
        return None

    def _resolve_session_id(self, session_id: str, transcript_path: str | None) -> ResolvedSession | None:
        cached = self.cache.get(session_id)
        if cached is not None and cached.is_file():
            self.stats.cache_hits += 1
            logger.debug('Cache hit for session %s: %s', session_id, cached)
            return ResolvedSession(path=cached, variant=SchemaVariant.PROJECTS, stage=ResolutionStage.CACHE)

        root = self.search_root(transcript_path)
        if not root.is_dir():
            logger.debug('Search root not found: %s', root)
            return None

        found = self.find_by_filename(session_id, root)
        if found is not None:
            logger.debug('Found session file by filename: %s', found)
            return ResolvedSession(path=found, variant=SchemaVariant.PROJECTS, stage=ResolutionStage.FILENAME)

        found = self.find_by_content(session_id, root)
        if found is not None:
            logger.debug('Found session file by content search: %s', found)
            self.cache.put(session_id, found)
            return ResolvedSession(path=found, variant=SchemaVariant.PROJECTS, stage=ResolutionStage.CONTENT)

        logger.debug('Session file not found for %s under %s', session_id, root)
        return None


def _iter_jsonl_files(root: Path) -> Iterator[Path]:
    """Walk root depth-first in sorted order, yielding `*.jsonl` regular files."""

    def on_error(error: OSError) -> None:
        logger.debug('Skipping unreadable directory: %s', error)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.endswith('.jsonl'):
                path = Path(dirpath) / filename
                if path.is_file():
                    yield path


def _file_contains(path: Path, pattern: re.Pattern[str]) -> bool:
    """Stream a file looking for a line matching pattern. Unreadable files do not match."""
    try:
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            return any(pattern.search(line) for line in f)
    except OSError as e:
        logger.debug('Cannot scan %s: %s', path, e)
        return False
