"""Main CLI entry point for webmctl."""

from __future__ import annotations

import click

from webmctl import __version__
from webmctl.cli.config_cmd import config
from webmctl.cli.upload import upload


# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="webmctl")
def cli() -> None:
    """webmctl - Upload a live WebM stream as chunked HTTP POSTs.

    Get started:

      webmctl config init --url https://example.org/upload

      webmctl upload recording.webm --follow

    Use --help on any command for more information.
    """
    pass


cli.add_command(config)
cli.add_command(upload)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
