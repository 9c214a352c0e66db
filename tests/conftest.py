"""Shared fixtures: throwaway ~/.claude/projects trees and record factories."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from session_hooks.services.cache import MemorySessionCache
from session_hooks.services.classifier import RecordClassifier
from session_hooks.services.discovery import SessionLocator
from session_hooks.services.enrichment import EnrichmentService
from session_hooks.services.extraction import ExtractionPipeline


def _write_log(path: Path, records: Sequence[dict[str, Any] | str]) -> Path:
    """Write records as JSONL; str records are written verbatim (for malformed lines)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
    path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
    return path


def _user_record(
    content: Any,
    *,
    session_id: str = 'session-1',
    cwd: str | None = '/home/dev/webapp',
    uuid: Any = 'uuid-1',
    timestamp: Any = '2025-01-01T10:00:00.000Z',
    **extra: Any,
) -> dict[str, Any]:
    return {
        'type': 'user',
        'message': {'role': 'user', 'content': content},
        'cwd': cwd,
        'sessionId': session_id,
        'uuid': uuid,
        'timestamp': timestamp,
        **extra,
    }


@pytest.fixture
def write_log() -> Callable[[Path, Sequence[dict[str, Any] | str]], Path]:
    return _write_log


@pytest.fixture
def user_record() -> Callable[..., dict[str, Any]]:
    return _user_record


@pytest.fixture
def projects_dir(tmp_path: Path) -> Path:
    """Empty stand-in for ~/.claude/projects."""
    directory = tmp_path / 'projects'
    directory.mkdir()
    return directory


@pytest.fixture
def cache() -> MemorySessionCache:
    return MemorySessionCache()


@pytest.fixture
def locator(projects_dir: Path, cache: MemorySessionCache) -> SessionLocator:
    return SessionLocator(projects_dir, cache)


@pytest.fixture
def classifier() -> RecordClassifier:
    return RecordClassifier(max_length=100)


@pytest.fixture
def pipeline(classifier: RecordClassifier) -> ExtractionPipeline:
    return ExtractionPipeline(classifier)


@pytest.fixture
def enrichment(locator: SessionLocator, pipeline: ExtractionPipeline) -> EnrichmentService:
    return EnrichmentService(locator, pipeline, default_project_name='unknown')
