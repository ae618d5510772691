"""auditpager CLI using Click."""

from __future__ import annotations

import logging
import sys
from importlib.metadata import version

import click

from .cli_types import AuditArgs
from .commands import cmd_audit
from .constants import DEFAULT_PER_PAGE
from .exceptions import AuditPagerError, UserError

# Module logger
logger = logging.getLogger("auditpager")


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if debug else logging.WARNING
    logger.setLevel(level)
    if any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    ):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=version("auditpager"), prog_name="auditpager")
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    help="Enable debug logging to stderr.",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """auditpager: page through audit logs in the terminal."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    setup_logging(debug=debug)


@cli.command("audit")
@click.argument("source", metavar="FILE_OR_URL")
@click.option(
    "--tree",
    metavar="FILE_OR_URL",
    help="Directory tree snapshot (JSON) of the audited repository. "
    "Adds an EVENT SUBJECT column resolved against the snapshot.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output the audit log in JSON format.",
)
@click.option(
    "--timestamp",
    "-T",
    "timestamps",
    is_flag=True,
    help="Show timestamps formatted to RFC3339 instead of human readable durations.",
)
@click.option(
    "--per-page",
    type=int,
    default=DEFAULT_PER_PAGE,
    show_default=True,
    hidden=True,
    help="Number of audit events fetched per page.",
)
def audit(
    source: str,
    tree: str | None,
    json_output: bool,
    timestamps: bool,
    per_page: int,
):
    """Show the audit log.

    FILE_OR_URL is a JSONL file with one audit event per line, or an
    http(s) URL of a paginated audit events endpoint. If the output is
    parsed by a script, use --json instead of the default table format.
    """
    args = AuditArgs(
        source=source,
        tree=tree,
        json=json_output,
        timestamps=timestamps,
        per_page=per_page,
    )
    cmd_audit(args)


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except UserError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.rc)
    except AuditPagerError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)
    except KeyboardInterrupt:
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)
