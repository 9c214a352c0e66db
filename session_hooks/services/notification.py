"""
Notification formatting - turns an enriched payload into message text.

Two hook kinds are supported:
- notification: Claude Code is waiting on the user; shows the latest input
- stop: the session stopped; shows the first input of the session

Messages are kept under a size budget. A stop message that is too long is
re-rendered with the user input cut short and a truncation notice; anything
still too long is cut with an ellipsis.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import StrEnum
from typing import Any

import orjson

from session_hooks.config.hooks import HookSettings
from session_hooks.domain import ExtractOptions, OutputFormat
from session_hooks.exceptions import InvalidPayloadError
from session_hooks.services.enrichment import EnrichmentService
from session_hooks.services.sinks import MessageSink

__all__ = [
    'HookKind',
    'HookNotifier',
    'NotificationFormatter',
    'format_timestamp',
    'truncate_message',
]

logger = logging.getLogger(__name__)

NOTIFICATION_EMOJI = '\U0001f514'
STOP_EMOJI = '\U0001f6d1'
PROJECT_EMOJI = '\U0001f4c1'
SESSION_EMOJI = '\U0001f511'
TIME_EMOJI = '⏰'
MESSAGE_EMOJI = '\U0001f4ac'
USER_EMOJI = '\U0001f464'
WARNING_EMOJI = '⚠️'


class HookKind(StrEnum):
    NOTIFICATION = 'notification'
    STOP = 'stop'

    @property
    def extract_options(self) -> ExtractOptions:
        """Notifications show the latest input, stop messages the first one."""
        return ExtractOptions(
            format=OutputFormat.BASIC,
            limit=1,
            reverse=self is HookKind.NOTIFICATION,
            include_multiline=True,
        )


def format_timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')


def truncate_message(message: str, max_length: int) -> str:
    """
    Cut message to max_length characters, appending an ellipsis when cut.

    Examples:
        >>> truncate_message('hello world', 5)
        'hello...'
    """
    if len(message) > max_length:
        return message[:max_length] + '...'
    return message


def _as_text(value: Any, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return orjson.dumps(value).decode()


class NotificationFormatter:
    """Renders hook messages from enriched payloads."""

    def __init__(
        self,
        default_project_name: str = 'unknown',
        default_session_id: str = 'unknown',
        default_message: str = 'No message',
        default_user_input: str = 'No user input',
        safe_length: int = 4000,
        content_truncate_length: int = 3000,
    ) -> None:
        self.default_project_name = default_project_name
        self.default_session_id = default_session_id
        self.default_message = default_message
        self.default_user_input = default_user_input
        self.safe_length = safe_length
        self.content_truncate_length = content_truncate_length

    @classmethod
    def from_settings(cls, settings: HookSettings) -> NotificationFormatter:
        return cls(
            default_project_name=settings.DEFAULT_PROJECT_NAME,
            default_session_id=settings.DEFAULT_SESSION_ID,
            default_message=settings.DEFAULT_MESSAGE,
            default_user_input=settings.DEFAULT_USER_INPUT,
            safe_length=settings.SAFE_MESSAGE_LENGTH,
            content_truncate_length=settings.CONTENT_TRUNCATE_LENGTH,
        )

    def fallback_payload(self, raw: str | bytes, kind: HookKind) -> dict[str, Any]:
        """
        Payload to render when enrichment failed.

        Fields present in raw (if it is a JSON object) win over the defaults.
        """
        defaults: dict[str, Any] = {
            'project_name': self.default_project_name,
            'session_id': self.default_session_id,
        }
        if kind is HookKind.NOTIFICATION:
            defaults['message'] = self.default_message
        defaults['user_inputs'] = self.default_user_input

        try:
            original = orjson.loads(raw) if raw.strip() else None
        except orjson.JSONDecodeError:
            original = None
        if not isinstance(original, dict):
            return defaults

        return {**defaults, **{k: v for k, v in original.items() if v is not None}}

    def render(self, payload: dict[str, Any], kind: HookKind, timestamp: str) -> str:
        """Render the message for kind, within the size budget."""
        project_name = _as_text(payload.get('project_name'), self.default_project_name)
        session_id = _as_text(payload.get('session_id'), self.default_session_id)
        user_inputs = _as_text(payload.get('user_inputs'), self.default_user_input) or self.default_user_input

        if kind is HookKind.NOTIFICATION:
            message = _as_text(payload.get('message'), self.default_message)
            text = (
                f'{NOTIFICATION_EMOJI} Claude Code notification\n'
                f'{PROJECT_EMOJI} Project: {project_name}\n'
                f'{SESSION_EMOJI} Session: {session_id}\n'
                f'{TIME_EMOJI} Time: {timestamp}\n'
                f'{MESSAGE_EMOJI} Message: {message}\n'
                f'{USER_EMOJI} Latest user input:\n'
                f'{user_inputs}'
            )
            return self._fit(text)

        text = self._stop_message(project_name, session_id, timestamp, user_inputs)
        if len(text) > self.safe_length:
            logger.debug('Stop message is %d characters, truncating user input', len(text))
            text = self._truncated_stop_message(
                project_name, session_id, timestamp, user_inputs[: self.content_truncate_length]
            )
        return self._fit(text)

    def _stop_message(self, project_name: str, session_id: str, timestamp: str, user_inputs: str) -> str:
        return (
            f'{STOP_EMOJI} Claude Code stopped\n'
            f'{PROJECT_EMOJI} Project: {project_name}\n'
            f'{SESSION_EMOJI} Session: {session_id}\n'
            f'{TIME_EMOJI} Time: {timestamp}\n'
            f'{USER_EMOJI} First user input of this session:\n'
            f'{user_inputs}'
        )

    def _truncated_stop_message(self, project_name: str, session_id: str, timestamp: str, user_inputs: str) -> str:
        return (
            f'{STOP_EMOJI} Claude Code stopped\n'
            '\n'
            f'{PROJECT_EMOJI} Project: {project_name}\n'
            f'{SESSION_EMOJI} Session: {session_id}\n'
            f'{TIME_EMOJI} Time: {timestamp}\n'
            '\n'
            f'{USER_EMOJI} User input of this session:\n'
            f'{user_inputs}\n'
            '\n'
            f'{WARNING_EMOJI} (Message truncated, see the session log for the full content)'
        )

    def _fit(self, text: str) -> str:
        if len(text) > self.safe_length:
            logger.warning('Message too long (%d characters), truncating', len(text))
        return truncate_message(text, self.safe_length)


class HookNotifier:
    """Enriches a hook payload, renders its message and hands it to a sink."""

    def __init__(self, enrichment: EnrichmentService, formatter: NotificationFormatter, sink: MessageSink) -> None:
        self.enrichment = enrichment
        self.formatter = formatter
        self.sink = sink

    def build_message(self, raw: str | bytes, kind: HookKind, timestamp: str | None = None) -> str:
        """Message for a raw payload. Never raises for bad payloads."""
        try:
            payload = self.enrichment.enrich(raw, kind.extract_options)
        except InvalidPayloadError as e:
            logger.info('Using fallback payload: %s', e)
            payload = self.formatter.fallback_payload(raw, kind)
        return self.formatter.render(payload, kind, timestamp or format_timestamp())

    def notify(self, raw: str | bytes, kind: HookKind, timestamp: str | None = None) -> bool:
        """
        Build and send the message.

        Returns:
            Whether the sink accepted the message

        Raises:
            DeliveryError: If the sink cannot be invoked
        """
        message = self.build_message(raw, kind, timestamp)
        logger.info('Sending %s message to %s', kind, type(self.sink).__name__)
        sent = self.sink.send(message)
        if sent:
            logger.info('%s message sent successfully', kind.capitalize())
        else:
            logger.error('Failed to send %s message', kind)
        return sent
