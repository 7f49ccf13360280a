"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit, including a declined download or a cancelled prompt."""

GENERAL_ERROR: int = 1
"""A known YtdlpInteractiveError was caught. User-facing message was displayed."""

UNEXPECTED_ERROR: int = 1
"""An unhandled exception escaped all known error boundaries."""
