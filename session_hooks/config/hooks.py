"""
Hook configuration.

Names match the variables the shell hooks used, so an existing environment
keeps working unchanged.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Literal

import pydantic

from session_hooks.config.base import BaseHookSettings, lazy_settings


class HookSettings(BaseHookSettings):
    """Settings for session lookup, extraction and message rendering."""

    # Session log store
    CLAUDE_PROJECTS_DIR: Path = Path.home() / '.claude' / 'projects'

    # User input extraction
    USER_INPUT_TRUNCATE_LENGTH: int = 100
    USER_INPUT_DEFAULT_LIMIT: int = 10
    DEFAULT_EXTRACT_FORMAT: Literal['basic', 'detailed', 'json'] = 'basic'

    # Fallback values
    DEFAULT_PROJECT_NAME: str = 'unknown'
    DEFAULT_SESSION_ID: str = 'unknown'
    DEFAULT_MESSAGE: str = 'No message'
    DEFAULT_USER_INPUT: str = 'No user input'

    # Message size budget
    MAX_MESSAGE_LENGTH: int = 4096
    SAFE_MESSAGE_LENGTH: int = 4000
    CONTENT_TRUNCATE_LENGTH: int = 3000

    # Session lookup cache
    CACHE_DIR: Path = Path(tempfile.gettempdir()) / '.claude_hook_cache'
    CACHE_ENABLED: bool = True

    # Delivery (external command that receives the message as its last argument)
    NOTIFY_COMMAND: str | None = None
    NOTIFY_TIMEOUT_SECONDS: float = 30.0

    DEBUG: bool = False

    @pydantic.field_validator('USER_INPUT_TRUNCATE_LENGTH', 'CONTENT_TRUNCATE_LENGTH')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Truncation lengths must leave room for some text."""
        if v <= 0:
            raise ValueError('truncation lengths must be positive')
        return v

    @pydantic.field_validator('USER_INPUT_DEFAULT_LIMIT')
    @classmethod
    def validate_limit(cls, v: int) -> int:
        """Limit 0 means unlimited, negatives are meaningless."""
        if v < 0:
            raise ValueError('USER_INPUT_DEFAULT_LIMIT must be >= 0')
        return v

    @pydantic.model_validator(mode='after')
    def validate_message_budget(self) -> HookSettings:
        """Safe length must fit inside the hard limit, including the ellipsis."""
        if not 0 < self.SAFE_MESSAGE_LENGTH <= self.MAX_MESSAGE_LENGTH - 3:
            raise ValueError('SAFE_MESSAGE_LENGTH must be positive and at most MAX_MESSAGE_LENGTH - 3')
        return self


# Module-level singleton (lazy-loaded)
settings = lazy_settings(HookSettings)
