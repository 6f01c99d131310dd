"""binchotan-filters CLI entry point and global options."""

import sys
from pathlib import Path
from typing import Literal

import click

from binchotan import __version__
from binchotan.cli.filters import list_filters, run
from binchotan.cli.output import OutputFormat, OutputFormatter
from binchotan.core.logging import configure_logging, set_verbose
from binchotan.filters.loader import DEFAULT_FILTER_DIR


@click.group()
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "jsonl", "human"]),
    default="json",
    help="Output format (default: json)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose logging to stderr",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress progress output",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Log format for stderr (default: text)",
)
@click.option(
    "--filters-dir",
    "-d",
    type=click.Path(path_type=Path),
    default=DEFAULT_FILTER_DIR,
    envvar="BINCHOTAN_FILTERS_DIR",
    show_default=True,
    help="Filter repository directory",
)
@click.version_option(version=__version__, prog_name="binchotan-filters")
@click.pass_context
def cli(
    ctx: click.Context,
    format: OutputFormat,
    verbose: bool,
    quiet: bool,
    log_format: Literal["text", "json"],
    filters_dir: Path,
) -> None:
    """Load and try out binchotan post filters.

    A filter is a directory holding binchotan.toml and a Lua script.
    The script sees the post as the global `post` and returns it
    (possibly changed) to keep it, or nil to drop it.
    """
    ctx.ensure_object(dict)
    ctx.obj = {
        "format": format,
        "verbose": verbose,
        "quiet": quiet,
        "log_format": log_format,
        "filters_dir": filters_dir,
        "formatter": OutputFormatter(format=format),
    }

    set_verbose(verbose)
    configure_logging(log_format=log_format, quiet=quiet)


cli.add_command(list_filters)
cli.add_command(run)


# Exit code for errors escaping the commands
EXIT_ERROR = 1


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
