"""
Message sinks - hand a finished message to whatever delivers it.

Delivery itself (bot API, retries) lives outside this package. A sink only
reports whether the hand-off succeeded.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from typing import Protocol

from session_hooks.exceptions import DeliveryError

__all__ = ['CommandSink', 'MessageSink', 'StdoutSink']

logger = logging.getLogger(__name__)


class MessageSink(Protocol):
    """Protocol for message delivery."""

    def send(self, message: str) -> bool: ...


class StdoutSink:
    """Writes the message to stdout, for piping into another tool."""

    def send(self, message: str) -> bool:
        print(message)
        return True


class CommandSink:
    """
    Runs an external command with the message as its last argument.

    Example:
        CommandSink.from_command_line('telegram-cli-bot --send-message')
        runs `telegram-cli-bot --send-message '<message>'`.
    """

    def __init__(self, argv: Sequence[str], timeout: float = 30.0) -> None:
        if not argv:
            raise ValueError('CommandSink needs a command to run')
        self.argv = list(argv)
        self.timeout = timeout

    @classmethod
    def from_command_line(cls, command_line: str, timeout: float = 30.0) -> CommandSink:
        return cls(shlex.split(command_line), timeout=timeout)

    def send(self, message: str) -> bool:
        """
        Run the command.

        Returns:
            True if the command exited with status 0

        Raises:
            DeliveryError: If the command cannot be started at all
        """
        try:
            result = subprocess.run(
                [*self.argv, message],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise DeliveryError(f'Notify command not found: {self.argv[0]}') from e
        except PermissionError as e:
            raise DeliveryError(f'Notify command not executable: {self.argv[0]}') from e
        except subprocess.TimeoutExpired:
            logger.error('Notify command timed out after %ss: %s', self.timeout, self.argv[0])
            return False

        if result.returncode != 0:
            logger.error('Notify command failed (exit %d): %s', result.returncode, result.stderr.strip())
            return False
        logger.info('Notify command succeeded: %s', result.stdout.strip())
        return True
