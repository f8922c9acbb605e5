"""
elfnm Parsers
==============

Width-generic ELF record layouts and the symbol table reader.
"""

from elfnm.parsers.elf_parser import ELFSymbolReader
from elfnm.parsers.layout import ElfLayout, layout_for

__all__ = ["ELFSymbolReader", "ElfLayout", "layout_for"]
