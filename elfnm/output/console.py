"""
elfnm Table Renderer
=====================

Turns extracted symbol tables into ``nm``-style listing lines and writes
them through :class:`~shared.console.NmConsole`.

Line formats::

    0000000000401000 T main          # defined, 64-bit
                     U printf        # undefined or weak undefined
    08049000 T main                  # defined, 32-bit

Records are emitted in symbol table order.  Unnamed records
(``st_name == 0``) and ``STT_FILE`` records are skipped.
"""

from __future__ import annotations

from typing import Iterator

from shared.console import NmConsole

from elfnm.analyzers.classifier import classify, is_undefined_type
from elfnm.core.models import (
    ClassifiedSymbol,
    SymbolKind,
    SymbolListing,
    SymbolTables,
)
from elfnm.parsers.elf_parser import ELFSymbolReader


class SymbolTableRenderer:
    """Classifies symbol records and formats listing lines.

    Usage::

        renderer = SymbolTableRenderer()
        listing = renderer.build_listing(tables, path="a.out")
        for line in renderer.format_lines(listing):
            print(line)
    """

    def __init__(self, name_encoding: str = "utf-8") -> None:
        self._name_encoding = name_encoding

    def iter_classified(self, tables: SymbolTables) -> Iterator[ClassifiedSymbol]:
        """Yield one :class:`ClassifiedSymbol` per kept record, in file order."""
        for symbol in tables.symbols:
            if symbol.st_name == 0 or symbol.kind == SymbolKind.FILE:
                continue
            name = ELFSymbolReader.read_cstring(
                tables.strtab, symbol.st_name, self._name_encoding
            )
            type_char = classify(symbol, tables.sections)
            yield ClassifiedSymbol(
                name=name,
                type_char=type_char,
                value=symbol.st_value,
                undefined=is_undefined_type(type_char),
            )

    def build_listing(self, tables: SymbolTables, path: str = "") -> SymbolListing:
        symtab = tables.sections[tables.symtab_index]
        return SymbolListing(
            path=path,
            word_size=tables.header.word_size,
            byte_order=tables.header.byte_order,
            symbols=list(self.iter_classified(tables)),
            symtab_name=symtab.name or None,
        )

    @staticmethod
    def format_line(entry: ClassifiedSymbol, hex_width: int) -> str:
        """Format one listing line.

        Undefined entries get ``hex_width + 1`` spaces in place of the
        address and its separator.
        """
        if entry.undefined:
            return f"{' ' * (hex_width + 1)}{entry.type_char} {entry.name}"
        return f"{entry.value:0{hex_width}x} {entry.type_char} {entry.name}"

    def format_lines(self, listing: SymbolListing) -> Iterator[str]:
        for entry in listing.symbols:
            yield self.format_line(entry, listing.hex_width)


class NmConsoleOutput:
    """Writes a :class:`SymbolListing` to the console's stdout stream."""

    def __init__(
        self,
        console: NmConsole | None = None,
        renderer: SymbolTableRenderer | None = None,
    ) -> None:
        self._console = console or NmConsole()
        self._renderer = renderer or SymbolTableRenderer()

    def display(self, listing: SymbolListing) -> int:
        """Print every line of *listing*; returns the number of lines."""
        count = 0
        for line in self._renderer.format_lines(listing):
            self._console.line(line)
            count += 1
        return count
