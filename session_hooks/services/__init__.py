"""Service layer for session lookup, extraction, enrichment and notifications."""

from session_hooks.services.cache import FileSessionCache, MemorySessionCache, SessionCache
from session_hooks.services.classifier import RecordClassifier
from session_hooks.services.discovery import LocatorStats, SessionLocator
from session_hooks.services.enrichment import EnrichmentService, parse_payload
from session_hooks.services.extraction import (
    ExtractionPipeline,
    render_entries,
    render_entry,
    render_json_entry,
    render_text_entry,
    select_entries,
)
from session_hooks.services.notification import HookKind, HookNotifier, NotificationFormatter
from session_hooks.services.sinks import CommandSink, MessageSink, StdoutSink

__all__ = [
    'CommandSink',
    'EnrichmentService',
    'ExtractionPipeline',
    'FileSessionCache',
    'HookKind',
    'HookNotifier',
    'LocatorStats',
    'MemorySessionCache',
    'MessageSink',
    'NotificationFormatter',
    'RecordClassifier',
    'SessionCache',
    'SessionLocator',
    'StdoutSink',
    'parse_payload',
    'render_entries',
    'render_entry',
    'render_json_entry',
    'render_text_entry',
    'select_entries',
]
