"""Shared Rich display functions for the action log and run summaries.

Each recorded decision is printed as one line; runs end with a summary
of counts per action type, batches with one table row per pair.
"""

from rich.markup import escape
from rich.table import Table

from linkmirror.core.runner import RunReport
from linkmirror.models.action import ActionType, SyncAction
from linkmirror.utils.formatting import console, print_success, print_warning

# Style and short label per action type
ACTION_STYLES: dict[ActionType, tuple[str, str]] = {
    ActionType.LINK: ("linked", "link"),
    ActionType.LINK_EXISTS: ("muted", "linked"),
    ActionType.CONFLICT: ("conflict", "conflict"),
    ActionType.MKDIR: ("info", "mkdir"),
    ActionType.UNLINK: ("warning", "unlink"),
    ActionType.DESCEND: ("muted", "descend"),
    ActionType.COPY: ("copied", "copy"),
    ActionType.COPY_EXISTS: ("muted", "present"),
    ActionType.SKIP_EXCLUDED: ("skipped", "excluded"),
    ActionType.SKIP_TOO_LARGE: ("skipped", "too large"),
    ActionType.SKIP_LINK: ("skipped", "skip link"),
    ActionType.DELETE: ("removed", "delete"),
    ActionType.PROTECTED: ("info", "protected"),
    ActionType.WARNING: ("warning", "warning"),
    ActionType.ERROR: ("error", "error"),
}


def format_action(action: SyncAction, *, dry_run: bool = False, label: str | None = None) -> str:
    """Format one decision as a Rich markup line.

    Args:
        action: Decision to format.
        dry_run: Prefix the line with a dry-run marker.
        label: Optional batch pair name shown before the action.

    Returns:
        Rich markup string.
    """
    style, text = ACTION_STYLES[action.action_type]
    parts: list[str] = []
    if dry_run:
        parts.append("[dry_run]\\[dry-run][/dry_run]")
    if label:
        parts.append(f"[muted]{escape(label)}:[/muted]")
    parts.append(f"[{style}]{text:<10}[/{style}]")
    parts.append(escape(action.path))
    if action.detail:
        parts.append(f"[muted]({escape(action.detail)})[/muted]")
    return " ".join(parts)


def should_print(action: SyncAction, *, quiet: bool = False) -> bool:
    """Decide if a decision is shown.

    Quiet mode shows only mutations, warnings, and failures.
    """
    if not quiet:
        return True
    return action.is_mutating or action.is_warning or action.is_failure


def print_action(
    action: SyncAction,
    *,
    dry_run: bool = False,
    quiet: bool = False,
    label: str | None = None,
) -> None:
    """Print one decision of the action log."""
    if should_print(action, quiet=quiet):
        console.print(format_action(action, dry_run=dry_run, label=label), highlight=False)


def create_counts_table(report: RunReport) -> Table:
    """Create a table of action counts for one run.

    Args:
        report: Finished run.

    Returns:
        Rich Table with one row per recorded action type.
    """
    title = "Summary (Dry Run)" if report.dry_run else "Summary"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action")
    table.add_column("Count", justify="right")

    for action_type, count in report.counts().items():
        style, text = ACTION_STYLES[action_type]
        table.add_row(f"[{style}]{text}[/{style}]", str(count))

    return table


def print_run_summary(report: RunReport) -> None:
    """Print the summary of one run.

    Shows the counts table followed by a success line, or a warning
    with the number of failed items.
    """
    if report.actions:
        console.print()
        console.print(create_counts_table(report))

    fail_count = len(report.failures)
    mutation_count = len(report.mutations)
    verb = "would be applied" if report.dry_run else "applied"

    if fail_count:
        print_warning(f"{mutation_count} change(s) {verb}, {fail_count} item(s) failed")
    elif mutation_count:
        print_success(f"{mutation_count} change(s) {verb}.")
    else:
        print_success("Destination is up to date.")


def create_batch_table(reports: list[RunReport]) -> Table:
    """Create a table summarizing every run of a batch.

    Args:
        reports: Batch results, one per pair.

    Returns:
        Rich Table with Status, Pair, Changes, Warnings, Failures columns.
    """
    dry_run = any(r.dry_run for r in reports)
    table = Table(
        title="Batch Results (Dry Run)" if dry_run else "Batch Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Pair", no_wrap=True)
    table.add_column("Changes", justify="right")
    table.add_column("Warnings", justify="right")
    table.add_column("Failures", justify="right")
    table.add_column("Message")

    for report in reports:
        if report.error is not None:
            status = "[error]FAIL[/error]"
            message = escape(report.error)
        elif report.failures:
            status = "[warning]PARTIAL[/warning]"
            message = ""
        else:
            status = "[success]OK[/success]"
            message = ""

        table.add_row(
            status,
            escape(report.label or str(report.source_root)),
            str(len(report.mutations)),
            str(len(report.warnings)),
            str(len(report.failures)),
            f"[muted]{message}[/muted]",
        )

    return table
