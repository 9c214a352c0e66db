"""Claude Code hook helpers: session log lookup, user-input extraction and payload enrichment."""

__version__ = '0.1.0'
