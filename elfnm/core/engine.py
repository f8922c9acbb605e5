"""
elfnm Engine
=============

Runs the symbol listing pipeline for one input file:

    1. Open the file (scoped; closed on every exit path)
    2. Read and validate the ELF header
    3. Load the section header array and locate ``SHT_SYMTAB``
    4. Extract the symbol table and its linked string table
    5. Classify and format every kept symbol

The engine is also the per-file error boundary.  :meth:`NmEngine.run`
catches any :class:`~elfnm.core.errors.NmError`, reports it as a single
diagnostic line and returns ``False``.  Because the whole listing is
built before anything is written, a failing file never produces partial
output on stdout.
"""

from __future__ import annotations

import io
from typing import BinaryIO

from shared.config import ElfnmConfig
from shared.console import NmConsole
from shared.logger import NmLogger

from elfnm.core.errors import FileOpenError, NmError
from elfnm.core.models import SymbolListing
from elfnm.output.console import NmConsoleOutput, SymbolTableRenderer
from elfnm.output.report import NmReportGenerator
from elfnm.parsers.elf_parser import ELFSymbolReader


class NmEngine:
    """Orchestrates reading, classifying and rendering one ELF file.

    Usage::

        engine = NmEngine()
        listing = engine.list_symbols("/usr/lib/crt1.o")
        for entry in listing.symbols:
            print(entry.type_char, entry.name)

    Or with diagnostics handled::

        ok = engine.run("a.out", console=NmConsole())
    """

    def __init__(
        self,
        config: ElfnmConfig | None = None,
        logger: NmLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: ElfnmConfig = config or ElfnmConfig()
        self._logger: NmLogger = logger or NmLogger(
            "engine",
            log_level=self._config.global_settings.log_level,
        )
        self._renderer = SymbolTableRenderer(
            name_encoding=self._config.nm.name_encoding
        )

    # ------------------------------------------------------------------ #
    #  Listing
    # ------------------------------------------------------------------ #

    def list_symbols(self, file_path: str) -> SymbolListing:
        """Build the symbol listing of the file at *file_path*.

        Raises:
            NmError: Any per-file failure, with ``path`` set.
        """
        try:
            fh = open(file_path, "rb")
        except OSError as exc:
            raise FileOpenError(exc.strerror or "", path=file_path) from exc

        with fh:
            return self._list_stream(fh, file_path)

    def list_data(self, data: bytes, file_path: str = "<memory>") -> SymbolListing:
        """Build the symbol listing of an in-memory ELF image."""
        with io.BytesIO(data) as stream:
            return self._list_stream(stream, file_path)

    def _list_stream(self, stream: BinaryIO, file_path: str) -> SymbolListing:
        nm_cfg = self._config.nm
        reader = ELFSymbolReader(
            stream,
            max_table_bytes=nm_cfg.max_table_bytes,
            name_encoding=nm_cfg.name_encoding,
            logger=self._logger,
        )

        with self._logger.operation("list_symbols", file_path=file_path):
            try:
                with self._logger.timed("read tables"):
                    tables = reader.read_all()
            except NmError as exc:
                exc.path = file_path
                raise

            header = tables.header
            self._logger.debug(
                "ELF%d %s-endian, %d sections, symtab at index %d "
                "with %d records, strtab %d bytes",
                int(header.word_size),
                header.byte_order.value,
                len(tables.sections),
                tables.symtab_index,
                len(tables.symbols),
                len(tables.strtab),
            )

            listing = self._renderer.build_listing(tables, path=file_path)
            self._logger.debug("Kept %d symbols", len(listing.symbols))

        return listing

    # ------------------------------------------------------------------ #
    #  Error boundary
    # ------------------------------------------------------------------ #

    def run(
        self,
        file_path: str,
        console: NmConsole | None = None,
        *,
        json_output: bool = False,
        report_path: str | None = None,
    ) -> bool:
        """List *file_path* to the console.

        Args:
            file_path: Input ELF file.
            console: Output console; a default stdout/stderr pair if omitted.
            json_output: Print the JSON report instead of text lines.
            report_path: Also write the JSON report to this path.

        Returns:
            ``True`` when the listing was printed, ``False`` after a
            diagnostic or when the report file cannot be written.
        """
        console = console or NmConsole()

        try:
            listing = self.list_symbols(file_path)
        except NmError as exc:
            self._logger.debug(
                "Stopped processing %s: %s", file_path, exc.message
            )
            console.diagnostic(exc.path or file_path, exc.message)
            return False

        report_gen = NmReportGenerator()
        if json_output:
            console.line(report_gen.to_json(listing))
        else:
            NmConsoleOutput(console=console, renderer=self._renderer).display(
                listing
            )

        if report_path:
            try:
                saved = report_gen.generate_json(listing, report_path)
            except OSError as exc:
                console.error(
                    f"{report_path}: cannot write report: {exc.strerror or exc}"
                )
                return False
            self._logger.info("JSON report saved: %s", saved)

        return True
