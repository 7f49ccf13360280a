"""Allow ``python -m ytdlp_interactive`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m ytdlp_interactive`` behaves identically to the
``ytdlp-interactive`` console script.
"""

from __future__ import annotations

from ytdlp_interactive.cli.app import cli

if __name__ == "__main__":
    cli()
