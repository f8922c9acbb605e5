"""
elfnm Data Models
==================

Pydantic models and ELF enumerations for the symbol lister.  Raw
records decoded from the file (:class:`ContainerHeader`,
:class:`SectionHeader`, :class:`Symbol`) are frozen once validated;
:class:`ClassifiedSymbol` and :class:`SymbolListing` carry the
rendered result.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
"""

from __future__ import annotations

import enum
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class WordSize(enum.IntEnum):
    """Address width selected by ``e_ident[EI_CLASS]``."""
    ELF32 = 32
    ELF64 = 64


class ByteOrder(str, enum.Enum):
    """Data encoding selected by ``e_ident[EI_DATA]``."""
    LITTLE = "little"
    BIG = "big"

    @property
    def struct_prefix(self) -> str:
        return "<" if self is ByteOrder.LITTLE else ">"


class SectionType(enum.IntEnum):
    """Section header types (``sh_type``) the classifier distinguishes."""
    NULL = 0
    PROGBITS = 1
    SYMTAB = 2
    STRTAB = 3
    RELA = 4
    HASH = 5
    DYNAMIC = 6
    NOTE = 7
    NOBITS = 8
    REL = 9
    DYNSYM = 11
    INIT_ARRAY = 14
    FINI_ARRAY = 15


class SectionFlag(enum.IntFlag):
    """Section attribute bits (``sh_flags``)."""
    WRITE = 0x1
    ALLOC = 0x2
    EXECINSTR = 0x4


class SymbolBinding(enum.IntEnum):
    """``ELF_ST_BIND(st_info)``."""
    LOCAL = 0
    GLOBAL = 1
    WEAK = 2
    GNU_UNIQUE = 10


class SymbolKind(enum.IntEnum):
    """``ELF_ST_TYPE(st_info)``."""
    NOTYPE = 0
    OBJECT = 1
    FUNC = 2
    SECTION = 3
    FILE = 4
    COMMON = 5
    TLS = 6


# Special section indices
SHN_UNDEF: int = 0
SHN_LORESERVE: int = 0xFF00
SHN_ABS: int = 0xFFF1
SHN_COMMON: int = 0xFFF2
SHN_XINDEX: int = 0xFFFF


class SectionRefKind(str, enum.Enum):
    """Tag of a decoded ``st_shndx`` value."""
    REAL = "real"
    UNDEFINED = "undefined"
    ABSOLUTE = "absolute"
    COMMON = "common"
    RESERVED = "reserved"


class SectionRef(BaseModel):
    """Tagged section index.

    ``index`` is the section array index for ``REAL`` references and the
    raw ``st_shndx`` value for ``RESERVED`` ones.  Sentinels never index
    the section array.
    """
    model_config = ConfigDict(frozen=True)

    kind: SectionRefKind
    index: int = 0

    @classmethod
    def from_raw(cls, shndx: int) -> SectionRef:
        """Return the shared instance for a raw ``st_shndx`` value."""
        return _section_ref(shndx)


@lru_cache(maxsize=None)
def _section_ref(shndx: int) -> SectionRef:
    # st_shndx is 16 bits, so the cache holds at most 65536 entries
    if shndx == SHN_UNDEF:
        return SectionRef(kind=SectionRefKind.UNDEFINED)
    if shndx == SHN_ABS:
        return SectionRef(kind=SectionRefKind.ABSOLUTE, index=shndx)
    if shndx == SHN_COMMON:
        return SectionRef(kind=SectionRefKind.COMMON, index=shndx)
    if shndx >= SHN_LORESERVE:
        return SectionRef(kind=SectionRefKind.RESERVED, index=shndx)
    return SectionRef(kind=SectionRefKind.REAL, index=shndx)


# ---------------------------------------------------------------------------
# Decoded records
# ---------------------------------------------------------------------------

class ContainerHeader(BaseModel):
    """Validated ELF file header.

    Attributes:
        word_size: 32 or 64, from ``EI_CLASS``.
        byte_order: Little or big endian, from ``EI_DATA``.
        e_type: Object file type (REL, EXEC, DYN, ...).
        e_machine: Target architecture number.
        e_entry: Entry point virtual address.
        e_shoff: File offset of the section header array.
        e_shentsize: Size of one section header record.
        e_shnum: Number of section header records.
        e_shstrndx: Index of the section name string table.
    """
    model_config = ConfigDict(frozen=True)

    word_size: WordSize
    byte_order: ByteOrder
    e_type: int = 0
    e_machine: int = 0
    e_entry: int = 0
    e_shoff: int = 0
    e_shentsize: int = 0
    e_shnum: int = 0
    e_shstrndx: int = 0

    @property
    def section_table_bytes(self) -> int:
        return self.e_shentsize * self.e_shnum


class SectionHeader(BaseModel):
    """One entry of the section header array.

    ``sh_type`` and ``sh_flags`` keep their raw integer values so that
    types and flag bits outside :class:`SectionType` / :class:`SectionFlag`
    survive decoding.
    """
    model_config = ConfigDict(frozen=True)

    sh_name: int = 0
    sh_type: int = 0
    sh_flags: int = 0
    sh_addr: int = 0
    sh_offset: int = 0
    sh_size: int = 0
    sh_link: int = 0
    sh_info: int = 0
    sh_addralign: int = 0
    sh_entsize: int = 0
    name: str = ""


class Symbol(BaseModel):
    """One raw symbol table record."""
    model_config = ConfigDict(frozen=True)

    st_name: int = 0
    st_value: int = 0
    st_size: int = 0
    st_info: int = 0
    st_other: int = 0
    st_shndx: int = 0

    @property
    def binding(self) -> int:
        return (self.st_info >> 4) & 0xF

    @property
    def kind(self) -> int:
        return self.st_info & 0xF

    @property
    def section_ref(self) -> SectionRef:
        return SectionRef.from_raw(self.st_shndx)


class SymbolTables(BaseModel):
    """Everything the extractor pulls out of one file.

    Attributes:
        header: The validated container header.
        sections: Full section header array (index 0 is the null section).
        symtab_index: Index of the chosen SYMTAB section.
        symbols: Decoded symbol records in file order.
        strtab: Raw bytes of the linked string table.
    """
    header: ContainerHeader
    sections: list[SectionHeader] = Field(default_factory=list)
    symtab_index: int = 0
    symbols: list[Symbol] = Field(default_factory=list)
    strtab: bytes = b""


# ---------------------------------------------------------------------------
# Rendered result
# ---------------------------------------------------------------------------

class ClassifiedSymbol(BaseModel):
    """A symbol paired with its resolved name and type character.

    Attributes:
        name: Name resolved from the string table.
        type_char: Single-letter nm type code.
        value: ``st_value`` of the record.
        undefined: True when the line is rendered without an address.
    """
    name: str
    type_char: str = Field(..., min_length=1, max_length=1)
    value: int = 0
    undefined: bool = False


class SymbolListing(BaseModel):
    """Result of listing one file."""
    path: str = ""
    word_size: WordSize = WordSize.ELF64
    byte_order: ByteOrder = ByteOrder.LITTLE
    symbols: list[ClassifiedSymbol] = Field(default_factory=list)
    symtab_name: Optional[str] = None

    @property
    def hex_width(self) -> int:
        return 16 if self.word_size == WordSize.ELF64 else 8
