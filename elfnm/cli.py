"""
elfnm CLI -- ELF Symbol Lister
===============================

Click-based command-line interface.

Usage::

    # nm-style listing
    elfnm /path/to/object.o

    # JSON listing on stdout
    elfnm /path/to/object.o --json

    # Also save a JSON report
    elfnm /path/to/object.o --output symbols.json

    # Debug logging on stderr
    elfnm /path/to/object.o --verbose

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys

import click

from shared.config import ElfnmConfig
from shared.console import NmConsole
from shared.logger import NmLogger

from elfnm.core.engine import NmEngine


@click.command("elfnm")
@click.argument("path", type=click.Path())
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the listing as JSON instead of text lines.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Also write a JSON report to this path.",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file.  Default: config.toml in the project root.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging on stderr.",
)
def elfnm_cli(
    path: str,
    json_output: bool,
    output_path: str | None,
    config_path: str | None,
    verbose: bool,
) -> None:
    """List the symbols of the ELF object file PATH.

    Each symbol is printed as ADDRESS TYPE NAME in symbol table order.
    Undefined symbols have a blank address column.

    \b
    Examples:
        elfnm /usr/lib/x86_64-linux-gnu/crt1.o
        elfnm libfoo.so --json
    """
    console = NmConsole()

    try:
        config = ElfnmConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"cannot load configuration: {exc}")
        sys.exit(2)

    settings = config.global_settings
    log_level = "DEBUG" if verbose or settings.debug else settings.log_level
    logger = NmLogger(
        "engine",
        log_level=log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
    )

    engine = NmEngine(config=config, logger=logger)
    ok = engine.run(
        path,
        console=console,
        json_output=json_output or config.nm.output_format == "json",
        report_path=output_path,
    )
    if not ok:
        sys.exit(1)


def main() -> None:
    """Entry point for the ``elfnm`` console script."""
    elfnm_cli()


if __name__ == "__main__":
    main()
