"""Configuration for claude-session-hooks."""

from session_hooks.config.base import BaseHookSettings, get_settings, lazy_settings
from session_hooks.config.hooks import HookSettings, settings

__all__ = [
    'BaseHookSettings',
    'HookSettings',
    'get_settings',
    'lazy_settings',
    'settings',
]
