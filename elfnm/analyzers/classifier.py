"""
Symbol Type Classifier
=======================

Maps one ELF symbol record to the single-letter type code used by
``nm``.  Upper case marks a global symbol, lower case a local one.

Codes produced:

    ===  ==========================================================
    T    code: PROGBITS section with flags ALLOC|EXECINSTR
    R    read-only data: PROGBITS with flags ALLOC
    D    initialised data: PROGBITS ALLOC|WRITE, or a DYNAMIC section
    B    uninitialised data: NOBITS with flags ALLOC|WRITE
    A    absolute value (``SHN_ABS``)
    C    common symbol (``SHN_COMMON``)
    U    undefined (``SHN_UNDEF``)
    u    GNU unique global
    W    weak symbol with a definition
    V    weak object with a definition
    w    weak undefined symbol
    t    defined in any other kind of section
    ?    unclassified
    ===  ==========================================================

Precedence matters because the categories overlap: weak binding is
checked before any section index sentinel, and sentinels before the
referenced section's attributes.

References:
    - GNU Binutils documentation, ``nm`` symbol types.
    - System V ABI, Edition 4.1, "Symbol Table".
"""

from __future__ import annotations

from typing import Sequence

from elfnm.core.models import (
    SectionFlag,
    SectionHeader,
    SectionRefKind,
    SectionType,
    Symbol,
    SymbolBinding,
    SymbolKind,
)

UNCLASSIFIED: str = "?"

_ALLOC_EXEC: int = SectionFlag.ALLOC | SectionFlag.EXECINSTR
_ALLOC_WRITE: int = SectionFlag.ALLOC | SectionFlag.WRITE
_ALLOC: int = int(SectionFlag.ALLOC)

# Flag values are compared exactly: extra bits (MERGE, STRINGS, TLS...)
# take a section out of its class.
_PROGBITS_CLASSES: dict[int, str] = {
    _ALLOC_EXEC: "T",
    _ALLOC: "R",
    _ALLOC_WRITE: "D",
}

UNDEFINED_TYPES: frozenset[str] = frozenset({"U", "w"})


def classify(symbol: Symbol, sections: Sequence[SectionHeader]) -> str:
    """Return the nm type character for *symbol*.

    Pure and total: the inputs are never mutated and an unmatched
    record yields ``"?"``.
    """
    binding = symbol.binding
    ref = symbol.section_ref

    if binding == SymbolBinding.WEAK:
        if ref.kind is SectionRefKind.UNDEFINED:
            return "w"
        if symbol.kind == SymbolKind.OBJECT:
            return "V"
        return "W"

    # Sentinel codes are returned as-is, whatever the binding.
    if ref.kind is SectionRefKind.UNDEFINED:
        return "U"
    if ref.kind is SectionRefKind.ABSOLUTE:
        return "A"
    if ref.kind is SectionRefKind.COMMON:
        return "C"

    if ref.kind is SectionRefKind.REAL and ref.index < len(sections):
        type_char = _classify_by_section(binding, sections[ref.index])
    else:
        type_char = UNCLASSIFIED

    if binding == SymbolBinding.LOCAL:
        return type_char.lower()
    return type_char


def _classify_by_section(binding: int, section: SectionHeader) -> str:
    if binding == SymbolBinding.GNU_UNIQUE:
        return "u"
    if section.sh_type == SectionType.NOBITS and section.sh_flags == _ALLOC_WRITE:
        return "B"
    if section.sh_type == SectionType.PROGBITS:
        return _PROGBITS_CLASSES.get(section.sh_flags, UNCLASSIFIED)
    if section.sh_type == SectionType.DYNAMIC:
        return "D"
    return "t"


def is_undefined_type(type_char: str) -> bool:
    """True for codes rendered without an address."""
    return type_char in UNDEFINED_TYPES
