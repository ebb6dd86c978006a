"""CLI commands for webmctl."""
