"""Run command implementation.

Mirrors one source root into one destination root.
"""

from functools import partial
from pathlib import Path
from typing import Annotated

import typer

from linkmirror.cli.display import print_action, print_run_summary
from linkmirror.core.config import DEFAULT_MAX_SIZE_MB, build_mirror_config
from linkmirror.core.errors import ConfigError, MirrorError
from linkmirror.core.paths import get_exclude_patterns_path, get_protect_patterns_path
from linkmirror.core.runner import run_mirror
from linkmirror.utils.formatting import print_error, print_info

# Exit code for conditions that stop a run before any change
EXIT_FATAL = 2


def run(
    ctx: typer.Context,
    source: Annotated[
        Path,
        typer.Argument(help="Source root to mirror."),
    ],
    dest: Annotated[
        Path,
        typer.Argument(help="Destination root (created if missing)."),
    ],
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
    max_size: Annotated[
        float,
        typer.Option(
            "--max-size",
            "-m",
            help="Largest file copied into materialized directories, in MB.",
        ),
    ] = DEFAULT_MAX_SIZE_MB,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show every decision without changing anything.",
        ),
    ] = False,
    no_prune: Annotated[
        bool,
        typer.Option(
            "--no-prune",
            help="Skip deleting orphaned destination entries.",
        ),
    ] = False,
) -> None:
    """Mirror SOURCE into DEST using junctions for clean subtrees.

    Subtrees without excluded content become a single junction. Subtrees
    with excluded content become real directories holding copies of
    their small files. Orphaned destination entries are deleted unless
    a protect rule matches them.

    Examples:
        linkmirror run D:/Projects C:/Users/me/OneDrive/Projects
        linkmirror run ~/src ~/Dropbox/src --dry-run
        linkmirror run ~/src ~/Dropbox/src -x exclude.txt -p protect.txt -m 2
    """
    quiet = bool((ctx.obj or {}).get("quiet", False))

    try:
        config = build_mirror_config(
            source_root=source,
            dest_root=dest,
            exclude_file=exclude_file or get_exclude_patterns_path(),
            protect_file=protect_file or get_protect_patterns_path(),
            max_size_mb=max_size,
            dry_run=dry_run,
            prune=not no_prune,
        )
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_FATAL) from e

    if dry_run:
        print_info("Dry-run: no changes will be made.")

    try:
        report = run_mirror(config, listener=partial(print_action, dry_run=dry_run, quiet=quiet))
    except MirrorError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_FATAL) from e

    print_run_summary(report)

    if report.failures:
        raise typer.Exit(code=1)
