"""Config commands for webmctl."""

from __future__ import annotations

import click

from webmctl.cli.common import ExitCode
from webmctl.core.config import CONFIG_FILE, Config
from webmctl.core.exceptions import WebmCtlError
from webmctl.core.output import (
    OutputFormat,
    format_bytes,
    print_error,
    print_key_value,
    print_output,
    print_profiles,
    print_success,
)
from webmctl.core.validation import (
    parse_key_value_pairs,
    validate_chunk_size,
    validate_headers,
    validate_target_url,
)
from webmctl.uploaders.constants import DEFAULT_CHUNK_SIZE


@click.group()
def config() -> None:
    """Manage webmctl configuration."""
    pass


@config.command("init")
@click.option("--url", prompt="Upload endpoint URL", help="Upload endpoint URL")
@click.option("--profile", default="default", help="Profile name")
@click.option("--header", "-H", "headers", multiple=True, help="HTTP header as NAME=VALUE")
@click.option("--form", "-F", "form_vars", multiple=True, help="Form field as NAME=VALUE")
@click.option("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE, help="Bytes per chunk")
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification")
@click.option("--force", is_flag=True, help="Overwrite existing profile")
def config_init(
    url: str,
    profile: str,
    headers: tuple[str, ...],
    form_vars: tuple[str, ...],
    chunk_size: int,
    insecure: bool,
    force: bool,
) -> None:
    """Create configuration file with a new profile.

    Example:
        webmctl config init --url https://example.org/upload -H Authorization=Bearer-xyz
    """
    try:
        url = validate_target_url(url)
        header_map = validate_headers(parse_key_value_pairs(headers, option="--header"))
        form_map = parse_key_value_pairs(form_vars, option="--form")
        chunk_size = validate_chunk_size(chunk_size, default=DEFAULT_CHUNK_SIZE)
    except WebmCtlError as e:
        print_error(str(e))
        raise SystemExit(ExitCode.GENERAL_ERROR)

    if CONFIG_FILE.exists():
        cfg = Config.load()
        if cfg.has_profile(profile) and not force:
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(ExitCode.GENERAL_ERROR)
    else:
        cfg = Config()

    cfg.add_profile(
        profile,
        url,
        headers=header_map,
        form_variables=form_map,
        verify_ssl=not insecure,
        chunk_size=chunk_size,
    )

    # Set as default if it's the first profile
    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save()

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value(
        {
            "profile": profile,
            "url": url,
            "chunk_size": format_bytes(chunk_size),
            "headers": sorted(header_map) or None,
        }
    )


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    try:
        cfg = Config.load()
    except WebmCtlError as e:
        print_error(str(e))
        raise SystemExit(ExitCode.GENERAL_ERROR)

    if not cfg.profiles:
        print_error("No configuration found. Run 'webmctl config init' first.")
        raise SystemExit(ExitCode.GENERAL_ERROR)

    if output == "json":
        print_output(
            {
                "config_file": str(CONFIG_FILE),
                "default_profile": cfg.default_profile,
                "profiles": {name: p.to_dict() for name, p in cfg.profiles.items()},
            },
            format=OutputFormat.JSON,
        )
        return

    print_key_value(
        {"config_file": str(CONFIG_FILE), "default_profile": cfg.default_profile},
        title="Configuration",
    )
    print_profiles(
        {name: p.to_dict() for name, p in cfg.profiles.items()},
        default=cfg.default_profile,
    )
