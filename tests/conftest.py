"""Shared fixtures: an in-memory ELF object builder."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from elfnm.core.models import (
    ByteOrder,
    SectionFlag,
    SectionType,
    SymbolBinding,
    SymbolKind,
    WordSize,
)
from elfnm.parsers.layout import EI_NIDENT, layout_for

ALLOC = int(SectionFlag.ALLOC)
WRITE = int(SectionFlag.WRITE)
EXEC = int(SectionFlag.EXECINSTR)


@dataclass
class _Section:
    name: str
    sh_type: int
    sh_flags: int = 0
    data: bytes = b""
    sh_link: int = 0
    sh_entsize: int = 0
    sh_addr: int = 0


@dataclass
class _Sym:
    name: str
    value: int = 0
    size: int = 0
    bind: int = SymbolBinding.GLOBAL
    kind: int = SymbolKind.NOTYPE
    shndx: int = 0


@dataclass
class ElfBuilder:
    """Assembles a minimal relocatable ELF image.

    Layout: header, section contents, section header array.  Index 0 is
    the null section, user sections follow in insertion order, then
    ``.symtab``, ``.strtab`` and ``.shstrtab``.
    """

    word_size: WordSize = WordSize.ELF64
    byte_order: ByteOrder = ByteOrder.LITTLE
    sections: list[_Section] = field(default_factory=list)
    symbols: list[_Sym] = field(default_factory=list)

    def add_section(
        self, name: str, sh_type: int, flags: int = 0, data: bytes = b""
    ) -> int:
        self.sections.append(_Section(name, int(sh_type), flags, data))
        return len(self.sections)

    def add_text(self) -> int:
        return self.add_section(".text", SectionType.PROGBITS, ALLOC | EXEC, b"\x90" * 16)

    def add_symbol(
        self,
        name: str,
        value: int = 0,
        *,
        shndx: int = 0,
        bind: int = SymbolBinding.GLOBAL,
        kind: int = SymbolKind.NOTYPE,
        size: int = 0,
    ) -> None:
        self.symbols.append(_Sym(name, value, size, int(bind), int(kind), shndx))

    # ------------------------------------------------------------------ #

    def _string_table(self, names: list[str]) -> tuple[bytes, dict[str, int]]:
        blob = bytearray(b"\x00")
        offsets: dict[str, int] = {"": 0}
        for name in names:
            if name in offsets:
                continue
            offsets[name] = len(blob)
            blob += name.encode() + b"\x00"
        return bytes(blob), offsets

    def build(
        self,
        *,
        with_symtab: bool = True,
        class_byte: int | None = None,
        data_byte: int | None = None,
        symtab_size_delta: int = 0,
        symtab_link: int | None = None,
        shstrtab_size: int | None = None,
    ) -> bytes:
        layout = layout_for(self.word_size, self.byte_order)
        sections = list(self.sections)

        if with_symtab:
            strtab, str_offsets = self._string_table([s.name for s in self.symbols])
            records = [layout.symbol.encode()]
            for sym in self.symbols:
                records.append(layout.symbol.encode(
                    st_name=str_offsets[sym.name],
                    st_value=sym.value,
                    st_size=sym.size,
                    st_info=(sym.bind << 4) | sym.kind,
                    st_shndx=sym.shndx,
                ))
            symtab_index = len(sections) + 1
            sections.append(_Section(
                ".symtab", SectionType.SYMTAB, 0, b"".join(records),
                sh_link=symtab_link if symtab_link is not None else symtab_index + 1,
                sh_entsize=layout.symbol.size,
            ))
            sections.append(_Section(".strtab", SectionType.STRTAB, 0, strtab))

        shstrtab, sh_offsets = self._string_table(
            [s.name for s in sections] + [".shstrtab"]
        )
        sections.append(_Section(".shstrtab", SectionType.STRTAB, 0, shstrtab))

        body = bytearray(layout.header_size)
        headers = [layout.section.encode()]
        for sec in sections:
            while len(body) % 8:
                body.append(0)
            offset = len(body)
            body += sec.data
            size = len(sec.data)
            if sec.sh_type == SectionType.SYMTAB:
                size += symtab_size_delta
            elif sec.name == ".shstrtab" and shstrtab_size is not None:
                size = shstrtab_size
            headers.append(layout.section.encode(
                sh_name=sh_offsets[sec.name],
                sh_type=sec.sh_type,
                sh_flags=sec.sh_flags,
                sh_addr=sec.sh_addr,
                sh_offset=offset,
                sh_size=size,
                sh_link=sec.sh_link,
                sh_entsize=sec.sh_entsize,
            ))

        while len(body) % 8:
            body.append(0)
        shoff = len(body)
        body += b"".join(headers)

        ident = bytearray(EI_NIDENT)
        ident[0:4] = b"\x7fELF"
        ident[4] = class_byte if class_byte is not None else (
            2 if self.word_size == WordSize.ELF64 else 1
        )
        ident[5] = data_byte if data_byte is not None else (
            1 if self.byte_order == ByteOrder.LITTLE else 2
        )
        ident[6] = 1
        body[0:EI_NIDENT] = ident
        body[EI_NIDENT:layout.header_size] = layout.header.encode(
            e_type=1,
            e_machine=62 if self.word_size == WordSize.ELF64 else 3,
            e_version=1,
            e_shoff=shoff,
            e_ehsize=layout.header_size,
            e_shentsize=layout.section.size,
            e_shnum=len(headers),
            e_shstrndx=len(headers) - 1,
        )
        return bytes(body)


@pytest.fixture
def builder() -> ElfBuilder:
    return ElfBuilder()


@pytest.fixture(params=[
    (WordSize.ELF32, ByteOrder.LITTLE),
    (WordSize.ELF32, ByteOrder.BIG),
    (WordSize.ELF64, ByteOrder.LITTLE),
    (WordSize.ELF64, ByteOrder.BIG),
], ids=["elf32-le", "elf32-be", "elf64-le", "elf64-be"])
def any_builder(request: pytest.FixtureRequest) -> ElfBuilder:
    word_size, byte_order = request.param
    return ElfBuilder(word_size=word_size, byte_order=byte_order)
