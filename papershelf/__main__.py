"""Entry point for running papershelf as a module or installed script.

Usage:
    papershelf / python -m papershelf         → web app (uvicorn)
    papershelf <command> ... / python -m papershelf <command> ... → CLI
"""

import sys

import uvicorn


def run() -> None:
    """Entry point: no args → web app, else → CLI."""
    if len(sys.argv) == 1:
        from papershelf.config import Settings
        from papershelf.console import setup_logging

        setup_logging()
        settings = Settings.load()
        uvicorn.run(
            "papershelf.gui.app:create_app",
            factory=True,
            host=settings.host,
            port=settings.port,
        )
    else:
        from papershelf.cli import run_cli
        run_cli()


if __name__ == "__main__":
    run()
