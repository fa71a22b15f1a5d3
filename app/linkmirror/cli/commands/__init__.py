"""CLI commands for linkmirror.

This package contains all subcommand implementations.
"""

from linkmirror.cli.commands import batch, config, patterns, run

__all__ = ["batch", "config", "patterns", "run"]
