"""Batch command implementation.

Mirrors every root pair of a batch configuration concurrently.
"""

from pathlib import Path
from typing import Annotated

import typer

from linkmirror.cli.display import create_batch_table, print_action
from linkmirror.core.config import load_batch_config
from linkmirror.core.errors import ConfigError, ConfigNotFoundError
from linkmirror.core.runner import run_batch
from linkmirror.models.action import SyncAction
from linkmirror.utils.formatting import console, print_error, print_info, print_success


def batch(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Argument(help="Batch config (default: ~/.config/linkmirror/pairs.toml)."),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option(
            "--jobs",
            "-j",
            min=1,
            help="Number of pairs mirrored at the same time.",
        ),
    ] = None,
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
    """Mirror every root pair listed in a batch configuration.

    Pairs run concurrently and must not overlap. A pair whose source
    root is missing fails on its own without stopping the others.

    Examples:
        linkmirror batch
        linkmirror batch pairs.toml --jobs 2
        linkmirror batch --dry-run
    """
    quiet = bool((ctx.obj or {}).get("quiet", False))

    try:
        batch_config = load_batch_config(config_path)
    except ConfigNotFoundError as e:
        print_error(str(e))
        print_info("Run 'linkmirror config init' to create a starter configuration.")
        raise typer.Exit(code=1) from e
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    configs = batch_config.to_mirror_configs(dry_run=dry_run, prune=not no_prune)
    runs = [(pair.label, config) for pair, config in zip(batch_config.pairs, configs, strict=True)]

    if dry_run:
        print_info("Dry-run: no changes will be made.")

    def _on_action(label: str, action: SyncAction) -> None:
        print_action(action, dry_run=dry_run, quiet=quiet, label=label)

    reports = run_batch(runs, jobs=jobs, listener=_on_action)

    console.print()
    console.print(create_batch_table(reports))

    if any(not r.succeeded for r in reports):
        raise typer.Exit(code=1)

    print_success(f"All {len(reports)} pair(s) mirrored.")
