# main.py

import sys

from rich.console import Console
from rich.table import Table

from pollmerge.config import get_config
from pollmerge.exceptions import PollMergeError
from pollmerge.logger import get_logger
from pollmerge.pipeline import run_pipeline

console = Console()
logger = get_logger("main")

MAX_KEYS_SHOWN = 15


def render_summary(result):
    stats = result.stats
    linkage = result.linkage

    counts = Table(title="Polling-place merge")
    counts.add_column("Measure")
    counts.add_column("Value", justify="right")
    counts.add_row("Polling lines read", str(stats.raw_polling_lines))
    counts.add_row("Lines replaced from corrections", str(stats.repaired_lines))
    counts.add_row("Malformed lines dropped", str(stats.dropped_lines))
    counts.add_row("Polling rows", str(stats.polling_rows))
    counts.add_row("Address rows", str(stats.address_rows))
    counts.add_row("Merged rows", str(stats.merged_rows))
    counts.add_row("Address rows matched", str(stats.matched_address_rows))
    counts.add_row("Address match rate", f"{stats.match_rate:.1f}%")
    counts.add_row("[red]Addresses without polling place (keys)", str(stats.unmatched_address_keys))
    counts.add_row("[yellow]Polling places without address (keys)", str(stats.unmatched_polling_keys))
    console.print(counts)

    if linkage.has_discrepancies:
        report = linkage.discrepancy_frame()
        keys = Table(title=f"Unmatched keys (first {MAX_KEYS_SHOWN} per side)")
        keys.add_column("Side")
        keys.add_column("Key")
        keys.add_column("Rows", justify="right")
        for side, group in report.groupby("side", sort=False):
            style = "red" if side == "address" else "yellow"
            for row in group.head(MAX_KEYS_SHOWN).itertuples():
                keys.add_row(f"[{style}]{side}", row.key, str(row.rows))
        console.print(keys)

    for path in result.written_paths:
        console.print(f"[green]✔[/green] {path}")


def main():
    """
    Run the merge with the environment config and print a summary.

    Returns 0 on success. On failure prints "<phase> failed: <message>"
    and returns 1.
    """
    config = get_config()
    logger.info("🗳️ Polling-place merge")

    try:
        result = run_pipeline(config)
    except PollMergeError as e:
        console.print(f"[bold red]{e.phase or 'Pipeline'} failed:[/bold red] {e.message}")
        if e.details:
            console.print(e.details)
        return 1

    render_summary(result)
    logger.info(f"🎉 Merge completed in {result.stats.total_time_sec:.2f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
