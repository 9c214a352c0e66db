"""
Session log record models.

A session log is an append-only JSON-lines file, one record per line. Only the
fields needed to recognise user input are modelled; everything else is carried
through as extra fields. Lines are not guaranteed to be well formed, so
decoding returns None rather than raising.

Modelled fields are typed loosely. Claude Code has written numeric timestamps
and string isMeta flags in the past, and a line whose metadata is odd still
carries whatever the user typed.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

import orjson
import pydantic

from session_hooks.base_model import PermissiveModel


class SchemaVariant(StrEnum):
    """Which record-shape rules a log file is read under."""

    PROJECTS = 'projects'  # Lives under the canonical ~/.claude/projects root
    TRANSCRIPT = 'transcript'  # Supplied directly by the hook, anywhere on disk


class LogMessage(PermissiveModel):
    """The `message` object of a record."""

    role: Any = None
    # String, list of content blocks, or anything else a future version writes
    content: Any = None


class LogRecord(PermissiveModel):
    """One decoded line of a session log."""

    type: Any = None
    message: LogMessage | None = None
    timestamp: Any = None
    cwd: Any = None
    uuid: Any = None
    sessionId: Any = None
    isMeta: Any = None

    @pydantic.field_validator('message', mode='before')
    @classmethod
    def drop_non_object_message(cls, v: Any) -> Any:
        """A message that is not an object has no role or content to offer."""
        return v if isinstance(v, (dict, LogMessage)) else None

    @property
    def role(self) -> Any:
        return self.message.role if self.message is not None else None

    @property
    def content(self) -> Any:
        return self.message.content if self.message is not None else None


LogRecordAdapter = pydantic.TypeAdapter(LogRecord)


def metadata_text(value: Any) -> str | None:
    """
    Display form of a metadata field.

    Examples:
        >>> metadata_text('2025-01-01T10:00:00Z')
        '2025-01-01T10:00:00Z'

        >>> metadata_text(1700000000)
        '1700000000'

        >>> metadata_text(None) is None
        True
    """
    if value is None or isinstance(value, str):
        return value
    return orjson.dumps(value).decode()


def decode_record(line: str | bytes) -> LogRecord | None:
    """
    Decode one log line.

    Returns:
        The record, or None for blank lines, invalid JSON and JSON that is
        not an object.
    """
    if not line.strip():
        return None
    try:
        raw = orjson.loads(line)
    except orjson.JSONDecodeError:
        return None
    if not isinstance(raw, dict):
        return None
    return LogRecordAdapter.validate_python(raw)
