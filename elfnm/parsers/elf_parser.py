"""
ELF Symbol Table Reader
========================

Manual struct-based reader for the parts of an ELF object file needed to
list its static symbol table: the file header, the section header array,
the first ``SHT_SYMTAB`` section and the string table it links to.

All parsing is performed with :mod:`struct` through the width-generic
layouts in :mod:`elfnm.parsers.layout`, so ELF32 and ELF64 files in
either byte order share one code path.  Every multi-byte field is
decoded in the byte order the file declares.

The reader works on any seekable binary stream and reads only the byte
ranges it needs.  Every read is checked: a short read raises
:class:`~elfnm.core.errors.TruncatedReadError` instead of decoding
garbage.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
    - Linux man page: elf(5).
"""

from __future__ import annotations

from typing import Any, BinaryIO

from shared.logger import NmLogger

from elfnm.core.errors import (
    AllocationError,
    NmError,
    NoSymbolTableError,
    TruncatedReadError,
    UnsupportedEndiannessError,
    UnsupportedFormatError,
)
from elfnm.core.models import (
    ByteOrder,
    ContainerHeader,
    SectionHeader,
    SectionType,
    Symbol,
    SymbolTables,
    WordSize,
)
from elfnm.parsers.layout import EI_NIDENT, ElfLayout, layout_for


# ---------------------------------------------------------------------------
# ELF identification constants
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"

EI_CLASS: int = 4
EI_DATA: int = 5

ELFCLASS32: int = 1
ELFCLASS64: int = 2

ELFDATA2LSB: int = 1  # Little-endian
ELFDATA2MSB: int = 2  # Big-endian

_CLASS_TO_WORD_SIZE: dict[int, WordSize] = {
    ELFCLASS32: WordSize.ELF32,
    ELFCLASS64: WordSize.ELF64,
}

_DATA_TO_BYTE_ORDER: dict[int, ByteOrder] = {
    ELFDATA2LSB: ByteOrder.LITTLE,
    ELFDATA2MSB: ByteOrder.BIG,
}

DEFAULT_MAX_TABLE_BYTES: int = 268_435_456


class ELFSymbolReader:
    """Reads the static symbol table out of an ELF stream.

    Usage::

        with open(path, "rb") as fh:
            tables = ELFSymbolReader(fh).read_all()

    The individual stages are public so callers (and tests) can drive
    them one at a time::

        reader = ELFSymbolReader(fh)
        header = reader.read_header()
        sections = reader.load_sections(header)
        index = reader.find_symbol_table(sections)
        symbols, strtab = reader.extract_tables(header, sections, index)
    """

    def __init__(
        self,
        source: BinaryIO,
        *,
        max_table_bytes: int = DEFAULT_MAX_TABLE_BYTES,
        name_encoding: str = "utf-8",
        logger: NmLogger | None = None,
    ) -> None:
        """Bind the reader to a seekable binary stream.

        Args:
            source: Stream positioned anywhere; every read seeks first.
            max_table_bytes: Largest table the reader will load into memory.
            name_encoding: Codec for section names.
            logger: Receives debug records for recoverable problems.
        """
        self._source = source
        self._max_table_bytes = max_table_bytes
        self._name_encoding = name_encoding
        self._logger = logger

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def read_all(self) -> SymbolTables:
        """Run every stage and return the extracted tables."""
        header = self.read_header()
        sections = self.load_sections(header)
        symtab_index = self.find_symbol_table(sections)
        symbols, strtab = self.extract_tables(header, sections, symtab_index)
        return SymbolTables(
            header=header,
            sections=sections,
            symtab_index=symtab_index,
            symbols=symbols,
            strtab=strtab,
        )

    # ------------------------------------------------------------------ #
    #  ELF header
    # ------------------------------------------------------------------ #

    def read_header(self) -> ContainerHeader:
        """Read and validate the ELF file header.

        Raises:
            UnsupportedFormatError: Bad magic or unknown ``EI_CLASS``.
            UnsupportedEndiannessError: Unknown ``EI_DATA``.
            TruncatedReadError: File shorter than the header.
        """
        self._source.seek(0)
        ident = self._source.read(EI_NIDENT)
        if ident[:4] != ELF_MAGIC:
            raise UnsupportedFormatError("not an ELF file")
        if len(ident) < EI_NIDENT:
            raise TruncatedReadError(
                f"ELF identification needs {EI_NIDENT} bytes, got {len(ident)}"
            )

        word_size = _CLASS_TO_WORD_SIZE.get(ident[EI_CLASS])
        if word_size is None:
            raise UnsupportedFormatError(f"ELF class {ident[EI_CLASS]}")
        byte_order = _DATA_TO_BYTE_ORDER.get(ident[EI_DATA])
        if byte_order is None:
            raise UnsupportedEndiannessError(f"ELF data encoding {ident[EI_DATA]}")

        layout = layout_for(word_size, byte_order)
        raw = self._read_exact(EI_NIDENT, layout.header.size, "ELF header")
        fields = layout.header.decode(raw)

        return ContainerHeader(
            word_size=word_size,
            byte_order=byte_order,
            e_type=fields["e_type"],
            e_machine=fields["e_machine"],
            e_entry=fields["e_entry"],
            e_shoff=fields["e_shoff"],
            e_shentsize=fields["e_shentsize"],
            e_shnum=fields["e_shnum"],
            e_shstrndx=fields["e_shstrndx"],
        )

    # ------------------------------------------------------------------ #
    #  Section headers
    # ------------------------------------------------------------------ #

    def load_sections(self, header: ContainerHeader) -> list[SectionHeader]:
        """Read the whole section header array.

        Records are read at stride ``e_shentsize``, which must be at least
        the standard record size for the word size.  Section names are
        resolved from ``e_shstrndx`` when it names a real section.

        Raises:
            UnsupportedFormatError: ``e_shentsize`` too small.
            AllocationError: Declared array larger than the table limit.
            TruncatedReadError: Array runs past end of file.
        """
        if header.e_shoff == 0 or header.e_shnum == 0:
            return []

        layout = self._layout(header)
        stride = header.e_shentsize
        if stride < layout.section.size:
            raise UnsupportedFormatError(
                f"section header size {stride} is smaller than "
                f"{layout.section.size}"
            )

        raw = self._read_table(
            header.e_shoff, header.section_table_bytes, "section header table"
        )
        records = [
            layout.section.decode(raw, i * stride) for i in range(header.e_shnum)
        ]

        names = self._section_names(header, records)

        return [
            SectionHeader(name=name, **rec) for rec, name in zip(records, names)
        ]

    def _section_names(
        self, header: ContainerHeader, records: list[dict[str, Any]]
    ) -> list[str]:
        """Resolve section names through ``e_shstrndx``.

        Names are informational only, so an unreadable name table leaves
        every name empty instead of failing the listing.
        """
        names = [""] * len(records)
        shstrndx = header.e_shstrndx
        if not 0 < shstrndx < len(records):
            return names

        shstr = records[shstrndx]
        if shstr["sh_type"] == SectionType.NOBITS:
            return names
        try:
            shstrtab = self._read_table(
                shstr["sh_offset"], shstr["sh_size"], "section name table"
            )
        except NmError as exc:
            if self._logger is not None:
                self._logger.debug(
                    "Ignoring section names: %s", exc.message
                )
            return names

        return [
            self.read_cstring(shstrtab, rec["sh_name"], self._name_encoding)
            for rec in records
        ]

    @staticmethod
    def find_symbol_table(sections: list[SectionHeader]) -> int:
        """Return the index of the first ``SHT_SYMTAB`` section.

        Raises:
            NoSymbolTableError: No section has type SYMTAB.
        """
        for index, sh in enumerate(sections):
            if sh.sh_type == SectionType.SYMTAB:
                return index
        raise NoSymbolTableError()

    # ------------------------------------------------------------------ #
    #  Symbol and string tables
    # ------------------------------------------------------------------ #

    def extract_tables(
        self,
        header: ContainerHeader,
        sections: list[SectionHeader],
        symtab_index: int,
    ) -> tuple[list[Symbol], bytes]:
        """Decode the symbol table and read its linked string table.

        Returns:
            ``(symbols, strtab)`` with symbols in file order.

        Raises:
            TruncatedReadError: Short read, a symbol table size that is not
                a whole number of records, or a dangling ``sh_link``.
            AllocationError: A table larger than the table limit.
        """
        layout = self._layout(header)
        symtab = sections[symtab_index]
        record_size = layout.symbol.size

        count, remainder = divmod(symtab.sh_size, record_size)
        if remainder:
            raise TruncatedReadError(
                f"symbol table size {symtab.sh_size} is not a multiple of "
                f"{record_size}"
            )
        if symtab.sh_link >= len(sections):
            raise TruncatedReadError(
                f"symbol table links to missing section {symtab.sh_link}"
            )

        raw = self._read_table(symtab.sh_offset, symtab.sh_size, "symbol table")
        symbols = [
            Symbol(**layout.symbol.decode(raw, i * record_size))
            for i in range(count)
        ]

        strtab_sh = sections[symtab.sh_link]
        strtab = self._read_table(
            strtab_sh.sh_offset, strtab_sh.sh_size, "string table"
        )
        return symbols, strtab

    # ------------------------------------------------------------------ #
    #  Utility methods
    # ------------------------------------------------------------------ #

    @staticmethod
    def read_cstring(data: bytes, offset: int, encoding: str = "utf-8") -> str:
        """Read a NUL-terminated string from *data* at *offset*.

        Offsets outside the buffer yield the empty string; a missing
        terminator runs to the end of the buffer.
        """
        if offset < 0 or offset >= len(data):
            return ""
        end = data.find(b"\x00", offset)
        if end == -1:
            end = len(data)
        return data[offset:end].decode(encoding, errors="replace")

    @staticmethod
    def _layout(header: ContainerHeader) -> ElfLayout:
        return layout_for(header.word_size, header.byte_order)

    def _read_table(self, offset: int, size: int, what: str) -> bytes:
        """Read a whole table, enforcing the configured size limit."""
        if size > self._max_table_bytes:
            raise AllocationError(
                f"{what} of {size} bytes exceeds limit of "
                f"{self._max_table_bytes}"
            )
        try:
            return self._read_exact(offset, size, what)
        except MemoryError as exc:
            raise AllocationError(f"{what} of {size} bytes") from exc

    def _read_exact(self, offset: int, size: int, what: str) -> bytes:
        self._source.seek(offset)
        data = self._source.read(size)
        if len(data) != size:
            raise TruncatedReadError(
                f"{what} needs {size} bytes at offset {offset}, got {len(data)}"
            )
        return data
