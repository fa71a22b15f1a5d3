"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from linkmirror import __version__
from linkmirror.cli.commands import batch, config, patterns, run
from linkmirror.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="linkmirror",
    help="Mirror directory trees into cloud-synced folders with junctions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"linkmirror version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich on stderr.

    Args:
        verbose: Log debug diagnostics instead of warnings only.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only show changes, warnings, and failures.",
        ),
    ] = False,
) -> None:
    """linkmirror - Link-first mirroring for cloud-synced folders.

    Clean subtrees become one junction, subtrees with excluded content
    become real directories with small-file copies, and orphaned
    destination entries are pruned.
    """
    configure_logging(verbose)
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="run")(run.run)
app.command(name="batch")(batch.batch)
app.command(name="patterns")(patterns.patterns)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
