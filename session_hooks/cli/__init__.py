"""Command-line interface for claude-session-hooks."""
