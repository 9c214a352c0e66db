"""
Settings loading for claude-session-hooks.

Hooks run as short-lived processes started by Claude Code, so configuration
comes from the environment the hook inherits. A .env file can be layered on
top by pointing LOAD_ENV_FILE at it; the same file usually also holds the
delivery bot's credentials.
"""

from __future__ import annotations

import os
import pathlib
from typing import TypeVar

import lazy_object_proxy
import pydantic_settings

T = TypeVar('T', bound='BaseHookSettings')


class BaseHookSettings(pydantic_settings.BaseSettings):
    """Fields and loading rules shared by every hook command."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_file_encoding='utf-8',
        case_sensitive=True,  # Names match the hook scripts' variables exactly
        extra='ignore',  # .env files are shared with the bot credentials
    )

    APP_NAME: str = 'claude-session-hooks'
    VERSION: str = '0.1.0'


def get_settings(settings_class: type[T], env_file: str | None = None) -> T:
    """
    Build hook settings from the environment and an optional .env file.

    Args:
        settings_class: Settings class to build
        env_file: .env file to read; defaults to $LOAD_ENV_FILE, and to no
            file at all when that is unset

    Raises:
        FileNotFoundError: If a .env file was named but does not exist
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')
    if not env_file_path:
        return settings_class()

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')
    return settings_class(_env_file=resolved_path)


def lazy_settings(settings_class: type[T]) -> T:
    """
    Module-level settings that are only read when a command first uses them.

    Importing the package never touches the environment, so an invalid value
    surfaces inside the command that needs it, where the CLI can report it.
    """
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))
