"""
Record classifier - decides whether a log record is genuine user input.

Session logs record far more than what the user typed: tool results come back
as "user" records, slash commands and their output are wrapped in marker
tags, and Claude Code injects caveats and system reminders. The classifier
recovers only the text a person actually entered.

Classification is a fixed pipeline per record:

1. gate on record type and message role
2. extract candidate text from the message content by shape
3. evaluate the variant's ordered rejection rules; the first match rejects

The two schema variants share steps 1-2 and differ only in their rule tables.
PROJECTS logs get extra heuristics (bracketed prefixes, log-level prefixes)
that TRANSCRIPT logs do not; TRANSCRIPT logs get the system/meta checks.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from session_hooks.domain import UserText
from session_hooks.schemas.session import LogRecord, SchemaVariant

__all__ = [
    'ELLIPSIS',
    'RULES',
    'MARKER_TAGS',
    'RecordClassifier',
    'Rule',
    'extract_candidate_text',
    'truncate_text',
]

ELLIPSIS = '...'

# Substrings that only appear in command/system wrappers, never in typed input
MARKER_TAGS = (
    '<command-name>',
    '<command-message>',
    '<command-args>',
    '<local-command-stdout>',
    '<system-reminder>',
)

_BRACKET_PREFIX = re.compile(r'\[.*\]')
_LOG_LEVEL_PREFIX = re.compile(r'(?:ERROR|WARNING|INFO|DEBUG|SYSTEM):', re.IGNORECASE)
_TOOL_PHRASES = re.compile(r'Tool execution|Assistant response', re.IGNORECASE)


@dataclass(frozen=True)
class Rule:
    """A named rejection predicate over a record and its candidate text."""

    name: str
    rejects: Callable[[LogRecord, str], bool]


def _has_marker(record: LogRecord, text: str) -> bool:
    return any(tag in text for tag in MARKER_TAGS)


def _is_caveat(record: LogRecord, text: str) -> bool:
    return text.startswith('Caveat:')


# ==============================================================================
# Rule tables
# ==============================================================================

_PROJECTS_RULES = (
    Rule('bracket-prefix', lambda record, text: _BRACKET_PREFIX.match(text) is not None),
    Rule('log-level-prefix', lambda record, text: _LOG_LEVEL_PREFIX.match(text) is not None),
    Rule('tool-phrase', lambda record, text: _TOOL_PHRASES.search(text) is not None),
    Rule('marker-tag', _has_marker),
    Rule('caveat', _is_caveat),
)

_TRANSCRIPT_RULES = (
    Rule('assistant-type', lambda record, text: record.type == 'assistant'),
    Rule('assistant-role', lambda record, text: record.role == 'assistant'),
    Rule('meta', lambda record, text: record.isMeta is True),
    Rule('marker-tag', _has_marker),
    Rule('caveat', _is_caveat),
)

RULES: Mapping[SchemaVariant, tuple[Rule, ...]] = {
    SchemaVariant.PROJECTS: _PROJECTS_RULES,
    SchemaVariant.TRANSCRIPT: _TRANSCRIPT_RULES,
}


# ==============================================================================
# Content extraction
# ==============================================================================


def extract_candidate_text(content: Any) -> str | None:
    """
    Pull candidate user text out of a message's content.

    - string content is used with trailing newlines removed
    - a block list whose first block carries `tool_use_id` is a tool result
    - a block list whose first block is a text block yields all text blocks,
      in order, joined by one space with newlines flattened to spaces
    - anything else is not user input

    Returns:
        Candidate text, or None if the content cannot be user input
    """
    if isinstance(content, str):
        text = content.rstrip('\n')
    elif isinstance(content, list):
        if not content or not isinstance(content[0], dict):
            return None
        first = content[0]
        if 'tool_use_id' in first:
            return None
        if first.get('type') != 'text':
            return None
        text = ' '.join(
            block['text'].replace('\n', ' ')
            for block in content
            if isinstance(block, dict) and block.get('type') == 'text' and isinstance(block.get('text'), str)
        )
    else:
        return None

    if not text or text == 'null':
        return None
    return text


def truncate_text(text: str, max_length: int) -> UserText:
    """
    Cut text to max_length characters, marking the cut with an ellipsis.

    Examples:
        >>> truncate_text('abcdef', 4).text
        'abcd...'

        >>> truncate_text('abcd', 4).text
        'abcd'
    """
    if len(text) > max_length:
        return UserText(text=text[:max_length] + ELLIPSIS, truncated=True)
    return UserText(text=text)


# ==============================================================================
# Classifier
# ==============================================================================


class RecordClassifier:
    """
    Classifies records of either schema variant.

    Pure: the verdict depends only on the record, the variant and max_length.
    """

    def __init__(self, max_length: int, rules: Mapping[SchemaVariant, tuple[Rule, ...]] = RULES) -> None:
        """
        Initialize classifier.

        Args:
            max_length: Maximum characters of user text kept before the ellipsis
            rules: Rejection rule table per schema variant
        """
        if max_length <= 0:
            raise ValueError('max_length must be positive')
        self.max_length = max_length
        self.rules = rules

    def classify(self, record: LogRecord, variant: SchemaVariant) -> UserText | None:
        """
        Decide whether record is genuine user input.

        Returns:
            Truncated UserText, or None if the record is not user input
        """
        text = self.candidate_text(record)
        if text is None or self.rejection_reason(record, text, variant) is not None:
            return None
        return truncate_text(text, self.max_length)

    def candidate_text(self, record: LogRecord) -> str | None:
        """
        Apply the type/role gate and content-shape extraction.

        The gate is the same for both variants; the TRANSCRIPT table repeats
        the assistant checks as rules of its own.
        """
        if record.type != 'user' or record.role != 'user':
            return None
        return extract_candidate_text(record.content)

    def rejection_reason(self, record: LogRecord, text: str, variant: SchemaVariant) -> str | None:
        """Name of the first rule of the variant's table that rejects text, if any."""
        for rule in self.rules[variant]:
            if rule.rejects(record, text):
                return rule.name
        return None
