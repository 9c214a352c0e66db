"""Pydantic models for session log records."""

from session_hooks.schemas.session import (
    LogMessage,
    LogRecord,
    LogRecordAdapter,
    SchemaVariant,
    decode_record,
    metadata_text,
)

__all__ = [
    'LogMessage',
    'LogRecord',
    'LogRecordAdapter',
    'SchemaVariant',
    'decode_record',
    'metadata_text',
]
