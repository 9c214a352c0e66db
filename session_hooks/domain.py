"""
Domain models for session lookup and user-input extraction.

Separation of concerns:
- schemas/session.py: what a log line looks like (parsing)
- domain.py: what this package derives from it (this file)
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any

import pydantic

from session_hooks.base_model import StrictModel
from session_hooks.schemas.session import SchemaVariant

# ==============================================================================
# Session resolution
# ==============================================================================


class ResolutionStage(StrEnum):
    """How a session log was found."""

    TRANSCRIPT_PATH = 'transcript_path'
    CACHE = 'cache'
    FILENAME = 'filename'
    CONTENT = 'content'


class ResolvedSession(StrictModel):
    """A concrete, existing session log and the rules to read it under."""

    path: Path
    variant: SchemaVariant
    stage: ResolutionStage


# ==============================================================================
# Extraction
# ==============================================================================


class OutputFormat(StrEnum):
    BASIC = 'basic'
    DETAILED = 'detailed'
    JSON = 'json'


class ExtractOptions(StrictModel):
    """Caller-controlled shaping of extracted user inputs."""

    format: OutputFormat = OutputFormat.BASIC
    limit: int = pydantic.Field(10, ge=0)  # 0 = unbounded
    reverse: bool = False  # Newest first
    include_multiline: bool = False  # Accepted, rendering is identical either way


class UserText(StrictModel):
    """Display text of a genuine user input, already truncated."""

    text: str
    truncated: bool = False


class ExtractedEntry(StrictModel):
    """One user input that survived classification, with its record metadata."""

    text: str
    timestamp: str | None = None
    cwd: str | None = None
    uuid: str | None = None
    sessionId: str | None = None
    isMeta: Any = None  # As logged, may be a non-boolean
