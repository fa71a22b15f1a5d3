"""CLI package for linkmirror.

This package contains the Typer application and all subcommands.
"""

from linkmirror.cli.main import app

__all__ = ["app"]
