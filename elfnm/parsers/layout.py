"""
ELF Record Layouts
===================

One description of the on-disk ELF structures, parameterised by word
size and byte order.  ELF32 and ELF64 differ only in field widths and,
for symbols, field order; both are expressed as a :class:`RecordLayout`
(field names plus a :class:`struct.Struct`) so the reader has a single
code path for either class.

References:
    - TIS Committee. (1995). ELF Specification, Version 1.2, Figure 1-3
      (ELF Header), Figure 1-9 (Section Header), Figure 1-16 (Symbol Table
      Entry).
    - System V ABI, Edition 4.1, "ELF64 Object File Format".
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from elfnm.core.models import ByteOrder, WordSize

EI_NIDENT: int = 16

# Header fields following e_ident
_HEADER_FIELDS: tuple[str, ...] = (
    "e_type", "e_machine", "e_version", "e_entry",
    "e_phoff", "e_shoff", "e_flags", "e_ehsize",
    "e_phentsize", "e_phnum", "e_shentsize", "e_shnum",
    "e_shstrndx",
)

_SECTION_FIELDS: tuple[str, ...] = (
    "sh_name", "sh_type", "sh_flags", "sh_addr",
    "sh_offset", "sh_size", "sh_link", "sh_info",
    "sh_addralign", "sh_entsize",
)

# Elf32_Sym puts value/size before info; Elf64_Sym puts them last.
_SYMBOL_FIELDS_32: tuple[str, ...] = (
    "st_name", "st_value", "st_size", "st_info", "st_other", "st_shndx",
)
_SYMBOL_FIELDS_64: tuple[str, ...] = (
    "st_name", "st_info", "st_other", "st_shndx", "st_value", "st_size",
)

_FORMATS: dict[WordSize, dict[str, str]] = {
    WordSize.ELF32: {
        "header": "HHIIIIIHHHHHH",   # 36 bytes, Elf32_Ehdr is 52
        "section": "IIIIIIIIII",     # Elf32_Shdr: 40 bytes
        "symbol": "IIIBBH",          # Elf32_Sym: 16 bytes
    },
    WordSize.ELF64: {
        "header": "HHIQQQIHHHHHH",   # 48 bytes, Elf64_Ehdr is 64
        "section": "IIQQQQIIQQ",     # Elf64_Shdr: 64 bytes
        "symbol": "IBBHQQ",          # Elf64_Sym: 24 bytes
    },
}


@dataclass(frozen=True, slots=True)
class RecordLayout:
    """A fixed-size record: field names and their packed encoding."""

    fields: tuple[str, ...]
    codec: struct.Struct

    @property
    def size(self) -> int:
        return self.codec.size

    def decode(self, buf: bytes, offset: int = 0) -> dict[str, Any]:
        """Unpack one record at *offset* into a field-name mapping."""
        return dict(zip(self.fields, self.codec.unpack_from(buf, offset)))

    def encode(self, **values: int) -> bytes:
        """Pack one record; fields not given default to zero."""
        return self.codec.pack(*(values.get(name, 0) for name in self.fields))


@dataclass(frozen=True, slots=True)
class ElfLayout:
    """Every record layout for one (word size, byte order) pair."""

    word_size: WordSize
    byte_order: ByteOrder
    header: RecordLayout
    section: RecordLayout
    symbol: RecordLayout

    @property
    def header_size(self) -> int:
        """Full ``Elf*_Ehdr`` size including ``e_ident``."""
        return EI_NIDENT + self.header.size


@lru_cache(maxsize=None)
def layout_for(word_size: WordSize, byte_order: ByteOrder) -> ElfLayout:
    """Return the (cached) layout for *word_size* and *byte_order*."""
    prefix = byte_order.struct_prefix
    formats = _FORMATS[word_size]
    symbol_fields = (
        _SYMBOL_FIELDS_64 if word_size == WordSize.ELF64 else _SYMBOL_FIELDS_32
    )
    return ElfLayout(
        word_size=word_size,
        byte_order=byte_order,
        header=RecordLayout(_HEADER_FIELDS, struct.Struct(prefix + formats["header"])),
        section=RecordLayout(_SECTION_FIELDS, struct.Struct(prefix + formats["section"])),
        symbol=RecordLayout(symbol_fields, struct.Struct(prefix + formats["symbol"])),
    )
