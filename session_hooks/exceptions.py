"""
Shared exceptions for claude-session-hooks.

Exception Hierarchy:
    SessionHooksError (base)
    ├── InvalidPayloadError (hook payload is not a JSON object)
    ├── SessionResolutionError (lookup/resolution failures, internal)
    │   └── MissingCwdError (resolved log exposes no cwd)
    └── DeliveryError (message sink could not be invoked)
"""

from __future__ import annotations


class SessionHooksError(Exception):
    """Base exception for all claude-session-hooks errors."""


class InvalidPayloadError(SessionHooksError):
    """Raised when the hook payload on stdin is not a JSON object."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f'Invalid hook payload: {reason}')


class SessionResolutionError(SessionHooksError):
    """Base exception for session lookup and resolution failures."""


class MissingCwdError(SessionResolutionError):
    """Raised when no record in a session log carries a cwd field."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f'No cwd field found in session log: {path}')


class DeliveryError(SessionHooksError):
    """Raised when a message sink cannot be invoked at all."""
