"""
Extraction pipeline - streams a session log into rendered user inputs.

The log is read one line at a time, so arbitrarily large sessions are fine.
Selection happens while streaming:

- oldest first with a limit: reading stops once `limit` entries are found
- newest first with a limit: a bounded deque keeps the last `limit` entries
- limit 0: every entry is kept

Rendering is separate from extraction: ExtractedEntry holds what was found,
render_text_entry and render_json_entry decide how one entry looks in each output format.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator, Sequence
from itertools import islice
from pathlib import Path
from typing import Any, Literal, overload

import orjson

from session_hooks.domain import ExtractedEntry, ExtractOptions, OutputFormat
from session_hooks.schemas.session import SchemaVariant, decode_record, metadata_text
from session_hooks.services.classifier import RecordClassifier

__all__ = [
    'ExtractionPipeline',
    'RenderedEntry',
    'render_entries',
    'render_entry',
    'render_json_entry',
    'render_text_entry',
    'select_entries',
]

logger = logging.getLogger(__name__)

# A text block for basic/detailed output, a JSON object for json output
RenderedEntry = str | dict[str, Any]


class ExtractionPipeline:
    """Reads user inputs out of one session log."""

    def __init__(self, classifier: RecordClassifier) -> None:
        self.classifier = classifier

    def iter_entries(self, path: Path, variant: SchemaVariant) -> Iterator[ExtractedEntry]:
        """
        Yield user inputs in file order.

        Malformed lines and non-user records are skipped.

        Raises:
            OSError: If the file cannot be opened or read
        """
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            for line_num, line in enumerate(f, 1):
                record = decode_record(line)
                if record is None:
                    if line.strip():
                        logger.debug('%s:%d: skipping malformed line', path.name, line_num)
                    continue

                user_text = self.classifier.classify(record, variant)
                if user_text is None:
                    continue

                yield ExtractedEntry(
                    text=user_text.text,
                    timestamp=metadata_text(record.timestamp),
                    cwd=metadata_text(record.cwd),
                    uuid=metadata_text(record.uuid),
                    sessionId=metadata_text(record.sessionId),
                    isMeta=record.isMeta,
                )

    def extract(self, path: Path, variant: SchemaVariant, options: ExtractOptions) -> list[ExtractedEntry]:
        """
        Extract user inputs, applying limit and ordering.

        Args:
            path: Session log to read
            variant: Schema rules to classify records under
            options: Limit and ordering (format is applied later by render_entries)

        Returns:
            Entries oldest-first, or newest-first when options.reverse is set

        Raises:
            OSError: If the file cannot be opened or read
        """
        entries = select_entries(self.iter_entries(path, variant), options.limit, options.reverse)
        logger.debug('Extracted %d user inputs from %s', len(entries), path)
        return entries


def select_entries(entries: Iterable[ExtractedEntry], limit: int, reverse: bool) -> list[ExtractedEntry]:
    """
    Apply limit and ordering to entries given in file order.

    Examples:
        Given E1..E10 in file order:
        - limit=3, reverse=False -> [E1, E2, E3]
        - limit=3, reverse=True  -> [E10, E9, E8]
        - limit=0                -> all, in the requested order
    """
    if limit < 0:
        raise ValueError('limit must be >= 0')
    if not reverse:
        return list(islice(entries, limit)) if limit else list(entries)
    tail = deque(entries, maxlen=limit or None)
    tail.reverse()
    return list(tail)


# ==============================================================================
# Rendering
# ==============================================================================


def _fenced(text: str) -> str:
    return f'```\n{text}\n```'


def render_json_entry(entry: ExtractedEntry) -> dict[str, Any]:
    """The record's metadata with `content` set to the extracted text."""
    return {
        'timestamp': entry.timestamp,
        'content': entry.text,
        'cwd': entry.cwd,
        'uuid': entry.uuid,
        'sessionId': entry.sessionId,
        'isMeta': entry.isMeta,
    }


def render_text_entry(entry: ExtractedEntry, output_format: OutputFormat) -> str:
    """
    Render one entry as text.

    - basic: the text in a fenced block
    - detailed: timestamped fenced block followed by CWD and UUID lines
    - json: the json rendering as one compact line
    """
    match output_format:
        case OutputFormat.BASIC:
            return _fenced(entry.text)
        case OutputFormat.DETAILED:
            return (
                f'[{entry.timestamp or ""}] {_fenced(entry.text)}\n'
                f'  CWD: {entry.cwd or ""}\n'
                f'  UUID: {entry.uuid or ""}'
            )
        case OutputFormat.JSON:
            return orjson.dumps(render_json_entry(entry)).decode()


@overload
def render_entry(entry: ExtractedEntry, output_format: Literal[OutputFormat.JSON]) -> dict[str, Any]: ...
@overload
def render_entry(entry: ExtractedEntry, output_format: Literal[OutputFormat.BASIC, OutputFormat.DETAILED]) -> str: ...
@overload
def render_entry(entry: ExtractedEntry, output_format: OutputFormat) -> RenderedEntry: ...
def render_entry(entry: ExtractedEntry, output_format: OutputFormat) -> RenderedEntry:
    """Render one entry for output: an object for json, text otherwise."""
    if output_format is OutputFormat.JSON:
        return render_json_entry(entry)
    return render_text_entry(entry, output_format)


def render_entries(entries: Sequence[ExtractedEntry], options: ExtractOptions) -> str | list[dict[str, Any]]:
    """
    Render entries as the value of the `user_inputs` field.

    Returns:
        A list of objects for json format, otherwise one string: entries on
        consecutive lines for basic, separated by a blank line for detailed.
        Empty input gives [] or ''.
    """
    # include_multiline is accepted but both settings render the same fenced blocks
    if options.format is OutputFormat.JSON:
        return [render_json_entry(entry) for entry in entries]

    separator = '\n\n' if options.format is OutputFormat.DETAILED else '\n'
    return separator.join(render_text_entry(entry, options.format) for entry in entries)
