"""
elfnm Console Interface
========================

Rich-powered console abstraction for the symbol lister.

Two consoles are kept apart: listing lines go to stdout exactly as
formatted (written straight to the underlying stream, so names are
byte-exact) while diagnostics and status messages go to stderr with the
toolkit's colour palette.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import IO

from rich.console import Console
from rich.theme import Theme

_NM_THEME = Theme(
    {
        "nm.error": "bold red",
    }
)

PROGRAM_NAME = "elfnm"


class NmConsole:
    """Unified console interface for elfnm.

    Usage::

        con = NmConsole()
        con.line("0000000000401000 T main")
        con.diagnostic("a.out", "no symbols")
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        file: IO[str] | None = None,
        err_file: IO[str] | None = None,
    ) -> None:
        """Initialise the console pair.

        Args:
            quiet:    Suppress all output (library / test mode).
            file:     Destination for listing lines (default stdout).
            err_file: Destination for diagnostics (default stderr).
        """
        self._out = Console(
            file=file,
            theme=_NM_THEME,
            quiet=quiet,
            highlight=False,
            markup=False,
            emoji=False,
        )
        self._err = Console(
            file=err_file,
            stderr=err_file is None,
            theme=_NM_THEME,
            quiet=quiet,
            highlight=False,
        )

    # ------------------------------------------------------------------ #
    #  Listing output (stdout)
    # ------------------------------------------------------------------ #

    def line(self, text: str) -> None:
        """Write one listing line verbatim, newline-terminated.

        The text bypasses Rich rendering so tabs and control bytes in
        symbol names reach the stream unchanged.
        """
        if self._out.quiet:
            return
        self._out.file.write(text + "\n")

    # ------------------------------------------------------------------ #
    #  Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def diagnostic(self, path: str, condition: str) -> None:
        """Report a per-file failure as ``elfnm: <path>: <condition>``."""
        self._err.print(
            f"{PROGRAM_NAME}: {path}: {condition}",
            style="nm.error",
            markup=False,
            soft_wrap=True,
        )

    def error(self, message: str) -> None:
        self._err.print(
            f"{PROGRAM_NAME}: {message}",
            style="nm.error",
            markup=False,
            soft_wrap=True,
        )

