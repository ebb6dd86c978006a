"""Upload command for webmctl."""

from __future__ import annotations

import sys
from functools import partial
from pathlib import Path
from typing import Optional

import click

from webmctl.cli.common import ExitCode, handle_errors
from webmctl.core.config import Config, Profile
from webmctl.core.exceptions import ConfigurationError, ProfileNotFoundError
from webmctl.core.logging import setup_logging
from webmctl.core.output import (
    OutputFormat,
    create_transfer_progress,
    print_error,
    print_output,
    print_success,
    print_warning,
)
from webmctl.core.validation import (
    parse_key_value_pairs,
    validate_chunk_size,
    validate_timeout,
)
from webmctl.models.progress import OperationPhase, UploadProgress
from webmctl.services.uploads import Uploader, upload_file
from webmctl.uploaders.constants import DEFAULT_IDLE_TIMEOUT
from webmctl.uploaders.transport import HttpxTransport


def _resolve_profile(url: Optional[str], profile_name: Optional[str]) -> Profile:
    """Pick the configured profile, letting --url stand in for a missing one."""
    config = Config.load()
    try:
        profile = config.get_profile(profile_name)
    except ProfileNotFoundError:
        if not url:
            raise ConfigurationError(
                f"Profile '{profile_name or config.default_profile}' not found. "
                "Pass --url or run 'webmctl config init'."
            )
        return Profile(url=url)

    if url:
        profile = Profile.from_dict({**profile.to_dict(), "url": url})
    return profile


@click.command("upload")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--url", help="Upload endpoint (overrides the profile URL)")
@click.option("--profile", "-p", "profile_name", envvar="WEBMCTL_PROFILE", help="Config profile to use")
@click.option("--header", "-H", "headers", multiple=True, help="Extra HTTP header as NAME=VALUE")
@click.option("--form", "-F", "form_vars", multiple=True, help="Extra form field as NAME=VALUE")
@click.option("--name", "local_name", help="Filename declared for each chunk (default: FILE name)")
@click.option("--chunk-size", type=int, default=None, help="Bytes per chunk")
@click.option("--timeout", type=int, default=None, help="HTTP timeout per chunk in seconds")
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification")
@click.option("--follow", is_flag=True, help="Keep uploading as FILE grows")
@click.option(
    "--idle-timeout",
    type=float,
    default=DEFAULT_IDLE_TIMEOUT,
    show_default=True,
    help="With --follow, stop after FILE stays unchanged this many seconds",
)
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
@click.option("--quiet", "-q", is_flag=True, help="No progress bar")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@handle_errors
def upload(
    file: Path,
    url: Optional[str],
    profile_name: Optional[str],
    headers: tuple[str, ...],
    form_vars: tuple[str, ...],
    local_name: Optional[str],
    chunk_size: Optional[int],
    timeout: Optional[int],
    insecure: bool,
    follow: bool,
    idle_timeout: float,
    output: str,
    quiet: bool,
    verbose: bool,
) -> None:
    """Upload FILE as a series of multipart POSTs, one per chunk.

    Example:
        webmctl upload live.webm --url https://example.org/upload --follow
    """
    setup_logging(quiet=quiet, verbose=verbose)

    profile = _resolve_profile(url, profile_name)
    profile.headers.update(parse_key_value_pairs(headers, option="--header"))
    profile.form_variables.update(parse_key_value_pairs(form_vars, option="--form"))
    chunk_size = validate_chunk_size(chunk_size, default=profile.chunk_size)
    timeout = validate_timeout(timeout, default=profile.timeout)
    if insecure:
        print_warning("TLS certificate verification disabled")

    uploader = Uploader(
        transport_factory=partial(
            HttpxTransport,
            timeout=timeout,
            verify_ssl=profile.verify_ssl and not insecure,
        )
    )
    uploader.init(profile.to_settings(local_name or file.name))
    uploader.run()

    try:
        if quiet:
            summary = upload_file(
                uploader, file, chunk_size=chunk_size, follow=follow, idle_timeout=idle_timeout
            )
        else:
            with create_transfer_progress() as progress:
                task = progress.add_task(
                    f"Uploading {file.name}",
                    total=None if follow else file.stat().st_size,
                )

                def on_progress(update: UploadProgress) -> None:
                    """Advance the bar by bytes actually sent."""
                    if update.phase is OperationPhase.UPLOADING:
                        progress.update(task, completed=update.session_bytes_sent)
                    elif update.phase is OperationPhase.COMPLETE:
                        progress.update(task, completed=update.total_bytes)

                summary = upload_file(
                    uploader,
                    file,
                    chunk_size=chunk_size,
                    follow=follow,
                    idle_timeout=idle_timeout,
                    progress_callback=on_progress,
                )
    finally:
        uploader.stop()

    result = {
        "file": summary.file_path,
        "chunks": summary.chunks_submitted,
        "bytes": summary.total_bytes,
        "duration": f"{summary.duration:.2f}s",
        "throughput": f"{summary.throughput_mbps:.2f} MB/s",
        "success": summary.success,
    }
    if summary.errors:
        result["errors"] = summary.errors

    if summary.success and output == "table" and not quiet:
        print_success(f"Submitted {summary.chunks_submitted} chunks from {file.name}")
    print_output(result, format=OutputFormat.from_string(output))

    if not summary.success:
        for error in summary.errors:
            print_error(error)
        sys.exit(ExitCode.UPLOAD_FAILED)
