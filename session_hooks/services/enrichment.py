"""
Enrichment service - adds project_name and user_inputs to a hook payload.

Every step after parsing the payload degrades to a default value instead of
failing, so the caller always gets a well-formed JSON object back:

    payload JSON -> resolve session log -> project_name (default: sentinel)
                                        -> user_inputs (default: '' or [])
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import orjson

from session_hooks.domain import ExtractedEntry, ExtractOptions, ResolvedSession
from session_hooks.exceptions import InvalidPayloadError, SessionResolutionError
from session_hooks.paths import is_null_value
from session_hooks.schemas.session import SchemaVariant
from session_hooks.services.discovery import SessionLocator
from session_hooks.services.extraction import ExtractionPipeline, render_entries
from session_hooks.services.project import extract_project_name

__all__ = ['EnrichmentService', 'parse_payload']

logger = logging.getLogger(__name__)


def parse_payload(raw: str | bytes) -> dict[str, Any]:
    """
    Parse a hook payload.

    Fields are passed through as orjson decodes them. Integers that do not fit
    in 64 bits come back as floats, so they are re-emitted in float form.

    Raises:
        InvalidPayloadError: If raw is empty, not JSON, or not a JSON object
    """
    if not raw.strip():
        raise InvalidPayloadError('empty input')
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise InvalidPayloadError(f'not valid JSON ({e})') from e
    if not isinstance(payload, dict):
        raise InvalidPayloadError(f'expected a JSON object, got {type(payload).__name__}')
    return payload


def _string_field(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) and not is_null_value(value) else None


class EnrichmentService:
    """Combines session lookup and extraction into one enriched payload."""

    def __init__(
        self,
        locator: SessionLocator,
        pipeline: ExtractionPipeline,
        default_project_name: str = 'unknown',
    ) -> None:
        self.locator = locator
        self.pipeline = pipeline
        self.default_project_name = default_project_name

    def enrich(self, raw: str | bytes, options: ExtractOptions) -> dict[str, Any]:
        """
        Enrich a raw hook payload.

        Args:
            raw: Hook payload JSON (stdin of the hook command)
            options: Shaping of user_inputs

        Returns:
            The payload with project_name and user_inputs merged in

        Raises:
            InvalidPayloadError: If raw is not a JSON object (the only failure
                that is not degraded to a default)
        """
        payload = parse_payload(raw)
        return self.enrich_payload(payload, options)

    def enrich_payload(self, payload: dict[str, Any], options: ExtractOptions) -> dict[str, Any]:
        """Enrich an already parsed payload. Never raises."""
        resolved = self.resolve(payload)
        enriched = _merge(payload, project_name=self.project_name(resolved))
        entries = self.user_inputs(resolved, _string_field(payload, 'transcript_path'), options)
        return _merge(enriched, user_inputs=render_entries(entries, options))

    def entries_for(self, payload: dict[str, Any], options: ExtractOptions) -> list[ExtractedEntry]:
        """User inputs for a parsed payload, without enriching it. Never raises."""
        return self.user_inputs(self.resolve(payload), _string_field(payload, 'transcript_path'), options)

    def resolve(self, payload: dict[str, Any]) -> ResolvedSession | None:
        """Locate the session log named by a payload's session_id/transcript_path."""
        session_id = _string_field(payload, 'session_id')
        transcript_path = _string_field(payload, 'transcript_path')
        resolved = self.locator.resolve(session_id, transcript_path)
        if resolved is None:
            logger.debug('No session log for session_id=%r transcript_path=%r', session_id, transcript_path)
        else:
            logger.debug('Resolved session log via %s: %s', resolved.stage, resolved.path)
        return resolved

    def project_name(self, resolved: ResolvedSession | None) -> str:
        """Project name for a resolved session, or the default sentinel."""
        if resolved is None:
            return self.default_project_name
        try:
            return extract_project_name(resolved.path)
        except (SessionResolutionError, OSError) as e:
            logger.warning('Failed to extract project name: %s', e)
            return self.default_project_name

    def user_inputs(
        self,
        resolved: ResolvedSession | None,
        transcript_path: str | None,
        options: ExtractOptions,
    ) -> list[ExtractedEntry]:
        """
        Extract user inputs, falling back to the transcript path on read errors.

        A session id that resolves to nothing is normal (the log may not have
        been written yet) and yields no entries.
        """
        candidates: list[tuple[Path, SchemaVariant]] = []
        if resolved is not None:
            candidates.append((resolved.path, resolved.variant))
        if transcript_path is not None:
            direct = Path(transcript_path)
            if resolved is None or direct != resolved.path:
                candidates.append((direct, SchemaVariant.TRANSCRIPT))

        for path, variant in candidates:
            if not path.is_file():
                logger.debug('Source file not found: %s', path)
                continue
            try:
                return self.pipeline.extract(path, variant, options)
            except OSError as e:
                logger.warning('Cannot read session log %s: %s', path, e)

        logger.debug('No readable session log, user_inputs left empty')
        return []


def _merge(payload: dict[str, Any], **fields: Any) -> dict[str, Any]:
    """
    Merge fields into payload, keeping payload unchanged if the result would not serialise.
    """
    merged = {**payload, **fields}
    try:
        orjson.dumps(merged)
    except (orjson.JSONEncodeError, TypeError) as e:
        logger.warning('Merged payload is not valid JSON (%s), using original input', e)
        return payload
    return merged
