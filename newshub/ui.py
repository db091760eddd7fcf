"""Terminal output for the newshub CLI."""

from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text


class FriendlyUI:
    """Status messages and result tables, written to stderr."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.console = Console(stderr=True, highlight=False)

    def _message(self, label: str, message: str, style: str) -> None:
        styled_message = Text()
        styled_message.append(f"{label} ", style=f"bold {style}")
        styled_message.append(message, style=style)
        self.console.print(styled_message)

    def info(self, message: str) -> None:
        self._message("INFO", message, "bright_cyan")

    def success(self, message: str) -> None:
        self._message("OK", message, "bright_green")

    def warning(self, message: str) -> None:
        self._message("WARNING", message, "bright_yellow")

    def error(self, message: str) -> None:
        self._message("ERROR", message, "bright_red")

    def verbose_log(self, message: str) -> None:
        if self.verbose:
            self._message("DEBUG", message, "dim")

    def show_score_table(self, details: list[dict[str, Any]], title: str = "Top scored items") -> None:
        """Render score details as a ranked table."""
        if not details:
            self.warning("No items scored")
            return

        table = Table(title=title, box=box.SIMPLE_HEAVY)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Score", justify="right", style="bold bright_green")
        table.add_column("Title", max_width=70, no_wrap=True, overflow="ellipsis")
        table.add_column("Source", style="bright_cyan")

        for rank, detail in enumerate(details, start=1):
            table.add_row(
                str(rank),
                str(detail.get("final_score", "")),
                detail.get("title") or "",
                detail.get("source") or "",
            )
        self.console.print(table)

    def show_breakdown(self, breakdown: dict[str, Any]) -> None:
        """Render a single score breakdown."""
        table = Table(box=box.SIMPLE, show_header=False)
        table.add_column("Factor", style="bright_cyan")
        table.add_column("Value", justify="right")
        for key, value in breakdown.items():
            table.add_row(key, f"{value:.3f}" if isinstance(value, float) else str(value))
        self.console.print(table)

    def show_update_summary(self, total: int, updated: int, failed: int, dry_run: bool = False) -> None:
        if dry_run:
            self.info(f"Dry run: scored {total} items, nothing written")
        elif failed:
            self.warning(f"Updated {updated} of {total} items, {failed} failed")
        else:
            self.success(f"Updated {updated} of {total} items")


def init_ui(verbose: bool = False) -> FriendlyUI:
    return FriendlyUI(verbose=verbose)
