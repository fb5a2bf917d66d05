# SPDX-License-Identifier: MIT
"""Command-line interface for drivecache configuration."""

import functools
import sys
import traceback
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click
import yaml
from pydantic import ValidationError

from . import __version__
from .config import get_config_manager
from .logging_config import get_status_logger, setup_logging


F = TypeVar("F", bound=Callable[..., Any])


def handle_cli_errors(func: F) -> F:
    """Decorator to handle common CLI error patterns.

    Logs the error through the status logger (with a traceback when the
    command was called with ``--verbose``) and exits with status code 1.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        status_logger = get_status_logger()
        verbose = kwargs.get("verbose", False)

        try:
            return func(*args, **kwargs)
        except (OSError, ValueError, ValidationError, yaml.YAMLError) as e:
            if verbose:
                status_logger.error(f"Error in {func.__name__}: {e}")
                traceback.print_exc()
            else:
                status_logger.error(f"Error: {e}")
            sys.exit(1)

    return wrapper  # type: ignore


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit if requested."""
    if value:
        click.echo(f"drivecache version {__version__}")
        ctx.exit(0)


@click.group()
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version information and exit",
)
def main() -> None:
    """drivecache - expiring cache mirrored to a storage driver."""
    detail_logger, _ = setup_logging()
    detail_logger.debug("CLI initialized")


@main.command()
@click.option("--verbose", "-v", is_flag=True, help="Show tracebacks on errors")
@handle_cli_errors
def config(verbose: bool) -> None:
    """Show the effective configuration (file, defaults and environment)."""
    click.echo(get_config_manager().show_config())


@main.command("init-config")
@click.argument("output_path", type=click.Path(path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.option("--verbose", "-v", is_flag=True, help="Show tracebacks on errors")
@handle_cli_errors
def init_config(output_path: Path, force: bool, verbose: bool) -> None:
    """Write the default configuration to OUTPUT_PATH."""
    status_logger = get_status_logger()
    if output_path.exists() and not force:
        status_logger.error(f"{output_path} already exists (use --force to overwrite)")
        sys.exit(1)

    get_config_manager().create_default_config(output_path)
    status_logger.info(f"Default configuration written to {output_path}")


if __name__ == "__main__":
    main()
