"""Patterns command implementation.

Shows how pattern lines are classified into folder-name rules and
file-pattern rules.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from linkmirror.core.paths import get_exclude_patterns_path, get_protect_patterns_path
from linkmirror.core.patterns import RuleSet, load_pattern_set
from linkmirror.utils.formatting import console


def patterns(
    exclude_file: Annotated[
        Path | None,
        typer.Option(
            "--exclude-file",
            "-x",
            help="Exclude pattern file (default: ~/.config/linkmirror/exclude.txt).",
        ),
    ] = None,
    protect_file: Annotated[
        Path | None,
        typer.Option(
            "--protect-file",
            "-p",
            help="Protect pattern file (default: ~/.config/linkmirror/protect.txt).",
        ),
    ] = None,
) -> None:
    """Show the classified exclude and protect rules.

    A missing exclude file shows the built-in defaults; a missing
    protect file shows no protect rules.
    """
    exclude_path = exclude_file or get_exclude_patterns_path()
    protect_path = protect_file or get_protect_patterns_path()
    pattern_set = load_pattern_set(exclude_path, protect_path)

    table = Table(
        title="Pattern Rules",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Family", width=8)
    table.add_column("Kind", width=8)
    table.add_column("Rule", no_wrap=True)

    _add_rules(table, "exclude", pattern_set.exclude)
    _add_rules(table, "protect", pattern_set.protect)

    console.print(table)
    source = exclude_path if exclude_path.exists() else "built-in defaults"
    console.print(f"\n[muted]Exclude rules from: {escape(str(source))}[/muted]")


def _add_rules(table: Table, family: str, rules: RuleSet) -> None:
    """Add one row per rule of a family."""
    for name in sorted(rules.folder_names):
        table.add_row(family, "folder", escape(name))
    for pattern in rules.file_patterns:
        table.add_row(family, "file", escape(pattern))
