"""Command-line interface handlers."""

import argparse
import sys
from typing import Optional

from papershelf.config import Settings, save_settings
from papershelf.console import ConsoleUI, setup_logging
from papershelf.database.migrations import canonicalize_tags, migrate_category_to_tags
from papershelf.database.repository import PaperRepository
from papershelf.errors import PaperShelfError
from papershelf.services.paper_service import PaperService


class PaperShelfCLI:
    """CLI application for PaperShelf."""

    def __init__(self, settings: Optional[Settings] = None, ui: Optional[ConsoleUI] = None):
        """Initialize CLI with settings.

        Args:
            settings: Application settings (loads from .metadata if not provided)
            ui: Console output (a fresh Rich console if not provided)
        """
        self.settings = settings or Settings.load()
        self.ui = ui or ConsoleUI()
        self._service: Optional[PaperService] = None

    @property
    def service(self) -> PaperService:
        # Opened lazily so `migrate` never creates a fresh-schema table first
        if self._service is None:
            repo = PaperRepository(self.settings.db_path, self.settings.classification_mode)
            self._service = PaperService(
                repo,
                mode=self.settings.classification_mode,
                empty_query=self.settings.empty_query,
                uncategorized_label=self.settings.uncategorized_label,
            )
        return self._service

    def cmd_list(self, tag: Optional[str] = None) -> None:
        """List papers, newest first.

        Args:
            tag: Only papers carrying this tag
        """
        papers = self.service.list_papers(tag)
        title = f"Papers (tag={tag})" if tag else "Papers"
        self.ui.display_papers(papers, title)

    def cmd_tags(self) -> None:
        """Show the tag universe with the newest paper per tag."""
        self.ui.display_tag_index(self.service.tag_index())

    def cmd_search(self, query: str) -> None:
        """Autocomplete-style tag search."""
        self.ui.display_matches(query, self.service.search_tags(query))

    def cmd_important(self, paper_id: int, important: bool = True) -> None:
        """Set or clear the importance flag."""
        self.service.set_importance(paper_id, important)
        state = "important" if important else "not important"
        self.ui.success(f"Paper {paper_id} marked {state}")

    def cmd_migrate(self) -> None:
        """Migrate category/subcategory to tags, then canonicalize tags."""
        report = migrate_category_to_tags(self.settings.db_path)
        self.ui.migration_done(report)
        self.cmd_normalize_tags()

    def cmd_normalize_tags(self) -> None:
        """Rewrite comma-separated tags as JSON arrays."""
        self.ui.canonicalize_done(canonicalize_tags(self.settings.db_path))

    def cmd_config(self, write: bool = False) -> None:
        """Show current settings, optionally writing them to settings.yaml."""
        s = self.settings
        for name in ("db_path", "upload_dir", "host", "port", "classification_mode",
                     "empty_query", "uncategorized_label"):
            self.ui.info(f"{name}: {getattr(s, name)}")
        if write:
            path = save_settings(s)
            self.ui.success(f"Wrote {path}")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="papershelf",
        description="Personal paper catalog: tags, search and schema migration",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # list command
    list_parser = subparsers.add_parser("list", help="List papers, newest first")
    list_parser.add_argument("--tag", default=None, help="Only papers carrying this tag")

    # tags command
    subparsers.add_parser("tags", help="Show all tags with their newest paper")

    # search command
    search_parser = subparsers.add_parser("search", help="Search tags (case-insensitive substring)")
    search_parser.add_argument("query", nargs="?", default="", help="Search text")

    # important command
    important_parser = subparsers.add_parser("important", help="Mark a paper as important")
    important_parser.add_argument("id", type=int, help="Paper ID")
    important_parser.add_argument(
        "--off",
        action="store_true",
        help="Clear the flag instead of setting it",
    )

    # migration commands
    subparsers.add_parser(
        "migrate",
        help="Convert category/subcategory columns to tags (then normalize tags)",
    )
    subparsers.add_parser("normalize-tags", help="Rewrite comma-separated tags as JSON arrays")

    # config command
    config_parser = subparsers.add_parser("config", help="Show settings")
    config_parser.add_argument(
        "--write",
        action="store_true",
        help="Write current settings to .metadata/settings.yaml",
    )

    return parser


def main(argv: Optional[list[str]] = None, cli: Optional[PaperShelfCLI] = None) -> int:
    """Main entry point for CLI.

    Returns:
        Process exit status
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug)

    cli = cli or PaperShelfCLI()

    try:
        if args.command == "list":
            cli.cmd_list(args.tag)
        elif args.command == "tags":
            cli.cmd_tags()
        elif args.command == "search":
            cli.cmd_search(args.query)
        elif args.command == "important":
            cli.cmd_important(args.id, not args.off)
        elif args.command == "migrate":
            cli.cmd_migrate()
        elif args.command == "normalize-tags":
            cli.cmd_normalize_tags()
        elif args.command == "config":
            cli.cmd_config(args.write)
    except PaperShelfError as e:
        cli.ui.error(str(e))
        return 1
    return 0


def run_cli() -> None:
    sys.exit(main())
