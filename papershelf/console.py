"""Console UI for terminal output using Rich."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from papershelf.database.migrations import CanonicalizeReport, MigrationReport
from papershelf.models.paper import Paper, TagIndex


def setup_logging(debug: bool = False, console: Optional[Console] = None) -> None:
    """Route all log records through a Rich handler on the root logger."""
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(
        RichHandler(console=console, show_path=debug, rich_tracebacks=True, markup=False)
    )
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    if not debug:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class ConsoleUI:
    """Rich-based console UI for paper display and notifications."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize console."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        return self._console

    def info(self, message: str) -> None:
        """Print an info message."""
        self._console.print(message)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        self._console.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning message in yellow."""
        self._console.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print an error message in red."""
        self._console.print(f"[red]Error:[/red] {message}")

    def display_papers(self, papers: list[Paper], title: str = "Papers") -> None:
        """Display papers in a formatted table.

        Args:
            papers: List of papers to display
            title: Table title
        """
        table = Table(title=title)
        table.add_column("ID", justify="right")
        table.add_column("Created", width=10)
        table.add_column("★", justify="center")
        table.add_column("Title", overflow="fold")
        table.add_column("Tags", overflow="fold")
        table.add_column("Source", overflow="fold")

        for paper in papers:
            if paper.category:
                classification = " / ".join(p for p in (paper.category, paper.subcategory) if p)
            else:
                classification = ", ".join(paper.tag_list)
            table.add_row(
                str(paper.id) if paper.id else "-",
                (paper.created_at or "-")[:10],
                "★" if paper.importance else "",
                escape(paper.title),
                escape(classification or "-"),
                paper.link or paper.pdf_path or "-",
            )

        self._console.print(table)
        if not papers:
            self._console.print("No papers found.")

    def display_tag_index(self, index: TagIndex) -> None:
        """Show every tag with its newest paper."""
        table = Table(title=f"Tags ({len(index.universe)})")
        table.add_column("Tag", overflow="fold")
        table.add_column("Latest paper", overflow="fold")
        table.add_column("ID", justify="right")

        for tag in index.universe:
            latest = index.latest_by_tag.get(tag)
            table.add_row(
                escape(tag),
                escape(latest.title) if latest else "-",
                str(latest.id) if latest and latest.id else "-",
            )
        self._console.print(table)

    def display_matches(self, query: str, matches: list[str]) -> None:
        if not matches:
            self._console.print(f"No tags match [bold]{escape(repr(query))}[/bold].")
            return
        for tag in matches:
            self._console.print(f"  {escape(tag)}")

    def migration_done(self, report: MigrationReport) -> None:
        if report.skipped:
            self._console.print("[yellow]No category/subcategory columns; skipped.[/yellow]")
            return
        if report.tags_column_added:
            self._console.print("Added [bold]tags[/bold] column.")
        self._console.print(
            f"[green]Migrated[/green] {len(report.converted)} papers to tags."
        )

    def canonicalize_done(self, report: CanonicalizeReport) -> None:
        for paper_id, before, after in report.converted:
            self._console.print(f"  ID {paper_id}: {escape(str(before))} → {escape(str(after))}")
        self._console.print(
            f"[green]Converted[/green]: {len(report.converted)}  "
            f"Already JSON: {report.already_canonical}"
        )
