"""Configuration commands.

Creates starter configuration files and shows where linkmirror looks
for them.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from linkmirror.core.config import BatchConfig, PairConfig, save_batch_config
from linkmirror.core.errors import ConfigError
from linkmirror.core.paths import (
    ensure_config_dir,
    get_batch_config_path,
    get_exclude_patterns_path,
    get_protect_patterns_path,
    get_user_theme_path,
)
from linkmirror.core.patterns import DEFAULT_EXCLUDE_PATTERNS
from linkmirror.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage linkmirror configuration files.",
    invoke_without_command=True,
    no_args_is_help=True,
)

_EXCLUDE_HEADER = """\
# linkmirror exclude patterns
#
# One pattern per line. Blank lines and lines starting with # are ignored.
#   *.tmp, ~$*     wildcard        -> file pattern
#   .git           leading dot     -> folder name
#   Thumbs.db      contains a dot  -> file pattern
#   node_modules   anything else   -> folder name
"""


def _starter_batch_config() -> BatchConfig:
    """Build the batch configuration written by ``config init``."""
    home = Path.home()
    return BatchConfig(
        pairs=[
            PairConfig(
                name="projects",
                source=home / "Projects",
                dest=home / "OneDrive" / "Projects",
            )
        ]
    )


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing files."),
    ] = False,
) -> None:
    """Create a starter pairs.toml and exclude.txt."""
    try:
        ensure_config_dir()
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    batch_path = get_batch_config_path()
    if batch_path.exists() and not force:
        print_info(f"Batch config already exists (use --force to overwrite): {batch_path}")
    else:
        try:
            save_batch_config(_starter_batch_config(), batch_path)
        except ConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        print_success(f"Batch config written: {batch_path}")

    exclude_path = get_exclude_patterns_path()
    if exclude_path.exists() and not force:
        print_info(f"Exclude file already exists (use --force to overwrite): {exclude_path}")
    else:
        content = _EXCLUDE_HEADER + "\n" + "\n".join(DEFAULT_EXCLUDE_PATTERNS) + "\n"
        try:
            exclude_path.write_text(content, encoding="utf-8")
        except OSError as e:
            print_error(f"Failed to write exclude file: {e}")
            raise typer.Exit(code=1) from e
        print_success(f"Exclude file written: {exclude_path}")


@app.command()
def path() -> None:
    """Show configuration file locations."""
    table = Table(
        title="Configuration Files",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("File")
    table.add_column("Path", no_wrap=True)
    table.add_column("Exists", justify="center")

    entries = (
        ("batch", get_batch_config_path()),
        ("exclude", get_exclude_patterns_path()),
        ("protect", get_protect_patterns_path()),
        ("theme", get_user_theme_path()),
    )
    for name, file_path in entries:
        exists = "[success]yes[/success]" if file_path.exists() else "[muted]no[/muted]"
        table.add_row(name, escape(str(file_path)), exists)

    console.print(table)
