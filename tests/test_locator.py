"""Tests for session log resolution and the lookup cache."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from session_hooks.domain import ResolutionStage
from session_hooks.schemas.session import SchemaVariant
from session_hooks.services.cache import FileSessionCache, MemorySessionCache
from session_hooks.services.discovery import SessionLocator, session_id_pattern

WriteLog = Callable[..., Path]
UserRecord = Callable[..., dict[str, Any]]


@pytest.fixture
def project(projects_dir: Path) -> Path:
    directory = projects_dir / '-home-dev-webapp'
    directory.mkdir()
    return directory


class TestTranscriptPath:
    def test_existing_transcript_wins(
        self, locator: SessionLocator, project: Path, write_log: WriteLog, user_record: UserRecord
    ) -> None:
        named = write_log(project / 'abc.jsonl', [user_record('from filename', session_id='abc')])
        transcript = write_log(project / 'other.jsonl', [user_record('from transcript', session_id='abc')])

        resolved = locator.resolve('abc', str(transcript))

        assert resolved is not None
        assert resolved.path == transcript != named
        assert resolved.stage is ResolutionStage.TRANSCRIPT_PATH
        assert resolved.variant is SchemaVariant.PROJECTS

    def test_transcript_outside_projects_root_uses_transcript_rules(
        self, locator: SessionLocator, tmp_path: Path, write_log: WriteLog, user_record: UserRecord
    ) -> None:
        transcript = write_log(tmp_path / 'elsewhere' / 't.jsonl', [user_record('hi')])

        resolved = locator.resolve(None, str(transcript))

        assert resolved is not None
        assert resolved.variant is SchemaVariant.TRANSCRIPT

    @pytest.mark.parametrize('session_id', [None, '', 'null'])
    @pytest.mark.parametrize('transcript_path', [None, '', 'null'])
    def test_nothing_usable(
        self, locator: SessionLocator, session_id: str | None, transcript_path: str | None
    ) -> None:
        assert locator.resolve(session_id, transcript_path) is None

    def test_missing_transcript_falls_back_to_session_id(
        self, locator: SessionLocator, project: Path, write_log: WriteLog, user_record: UserRecord
    ) -> None:
        named = write_log(project / 'abc.jsonl', [user_record('x', session_id='abc')])

        resolved = locator.resolve('abc', str(project / 'gone.jsonl'))

        assert resolved is not None
        assert resolved.path == named
        assert resolved.stage is ResolutionStage.FILENAME


class TestSessionIdSearch:
    def test_filename_before_content(
        self, locator: SessionLocator, projects_dir: Path, write_log: WriteLog, user_record: UserRecord
    ) -> None:
        # "a-..." sorts first and would win a content search
        write_log(projects_dir / 'a-first' / 'log.jsonl', [user_record('x', session_id='abc')])
        named = write_log(projects_dir / 'z-last' / 'abc.jsonl', [user_record('y', session_id='other')])

        resolved = locator.resolve('abc', None)

        assert resolved is not None
        assert resolved.path == named
        assert locator.stats.content_searches == 0

    def test_content_search_matches_session_id_field(
        self, locator: SessionLocator, project: Path, write_log: WriteLog, user_record: UserRecord
    ) -> None:
        write_log(project / 'a-unrelated.jsonl', [user_record('mentions abc in text', session_id='zzz')])
        target = write_log(project / 'renamed.jsonl', [user_record('x', session_id='abc')])

        resolved = locator.resolve('abc', None)

        assert resolved is not None
        assert resolved.path == target
        assert resolved.stage is ResolutionStage.CONTENT
        assert resolved.variant is SchemaVariant.PROJECTS
        assert locator.stats.files_scanned == 2

    def test_content_search_escapes_regex(
        self, locator: SessionLocator, project: Path, write_log: WriteLog, user_record: UserRecord
    ) -> None:
        write_log(project / 'a.jsonl', [user_record('x', session_id='aXb')])

        assert locator.resolve('a.b', None) is None

    def test_not_found(self, locator: SessionLocator, project: Path) -> None:
        assert locator.resolve('does-not-exist', None) is None

    def test_missing_projects_dir(self, tmp_path: Path) -> None:
        locator = SessionLocator(tmp_path / 'missing', MemorySessionCache())
        assert locator.resolve('abc', None) is None

    def test_ignores_non_jsonl_files(self, locator: SessionLocator, project: Path) -> None:
        (project / 'abc.json').write_text('{"sessionId": "abc"}\n')
        assert locator.resolve('abc', None) is None


class TestSearchRoot:
    def test_narrowed_to_transcript_directory(
        self, locator: SessionLocator, projects_dir: Path, write_log: WriteLog, user_record: UserRecord
    ) -> None:
        write_log(projects_dir / 'a-other' / 'log.jsonl', [user_record('x', session_id='abc')])
        here = projects_dir / 'b-here'
        target = write_log(here / 'log.jsonl', [user_record('y', session_id='abc')])

        resolved = locator.resolve('abc', str(here / 'missing.jsonl'))

        assert resolved is not None
        assert resolved.path == target

    def test_traversal_outside_root_is_ignored(
        self, locator: SessionLocator, projects_dir: Path, tmp_path: Path
    ) -> None:
        outside = tmp_path / 'outside'
        outside.mkdir()
        escaping = projects_dir / '..' / 'outside' / 'x.jsonl'

        assert locator.search_root(str(escaping)) == projects_dir

    def test_projects_root_itself_is_not_narrowed(self, locator: SessionLocator, projects_dir: Path) -> None:
        assert locator.search_root(str(projects_dir / 'x.jsonl')) == projects_dir

    def test_missing_directory_is_not_narrowed(self, locator: SessionLocator, projects_dir: Path) -> None:
        assert locator.search_root(str(projects_dir / 'nope' / 'x.jsonl')) == projects_dir


class TestCache:
    def test_content_result_is_cached(
        self,
        locator: SessionLocator,
        cache: MemorySessionCache,
        project: Path,
        write_log: WriteLog,
        user_record: UserRecord,
    ) -> None:
        target = write_log(project / 'renamed.jsonl', [user_record('x', session_id='abc')])

        first = locator.resolve('abc', None)
        second = locator.resolve('abc', None)

        assert first is not None and second is not None
        assert first.path == second.path == target
        assert second.stage is ResolutionStage.CACHE
        assert locator.stats.content_searches == 1
        assert locator.stats.cache_hits == 1
        assert len(cache) == 1

    def test_filename_result_is_not_cached(
        self,
        locator: SessionLocator,
        cache: MemorySessionCache,
        project: Path,
        write_log: WriteLog,
        user_record: UserRecord,
    ) -> None:
        write_log(project / 'abc.jsonl', [user_record('x', session_id='abc')])

        locator.resolve('abc', None)

        assert len(cache) == 0

    def test_stale_entry_is_ignored(
        self,
        locator: SessionLocator,
        cache: MemorySessionCache,
        project: Path,
        write_log: WriteLog,
        user_record: UserRecord,
    ) -> None:
        cache.put('abc', project / 'deleted.jsonl')
        target = write_log(project / 'abc.jsonl', [user_record('x', session_id='abc')])

        resolved = locator.resolve('abc', None)

        assert resolved is not None
        assert resolved.path == target
        assert locator.stats.cache_hits == 0

    def test_file_cache_round_trip_across_instances(self, tmp_path: Path) -> None:
        directory = tmp_path / 'cache'
        FileSessionCache(directory).put('abc', tmp_path / 'log.jsonl')

        assert FileSessionCache(directory).get('abc') == tmp_path / 'log.jsonl'
        assert FileSessionCache(directory).get('missing') is None

    def test_file_cache_key_is_sanitised(self, tmp_path: Path) -> None:
        cache = FileSessionCache(tmp_path)

        entry = cache.entry_path('../../etc/passwd')

        assert entry.parent == tmp_path
        assert entry.name == 'session_______etc_passwd.cache'

    def test_file_cache_unwritable_directory_is_a_miss(self, tmp_path: Path) -> None:
        blocker = tmp_path / 'blocker'
        blocker.write_text('not a directory')
        cache = FileSessionCache(blocker / 'cache')

        cache.put('abc', tmp_path / 'log.jsonl')

        assert cache.get('abc') is None


def test_session_id_pattern_tolerates_whitespace() -> None:
    pattern = session_id_pattern('abc')
    assert pattern.search('{"sessionId" :  "abc"}')
    assert not pattern.search('{"sessionId": "abcd"}')
