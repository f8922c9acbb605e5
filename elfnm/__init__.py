"""
elfnm -- ELF Symbol Lister
===========================

Reads the static symbol table of an ELF object file and lists every
symbol as ``<address> <type> <name>``, the way ``nm`` does.

Capabilities:
    - ELF32 and ELF64, little- and big-endian, through one layout
    - Section header and symbol/string table extraction with checked reads
    - nm-style type classification (T, t, D, B, R, U, W, w, V, A, C, u, ?)
    - Plain text listing or JSON report

References:
    - TIS Committee. (1995). ELF Specification, Version 1.2.
    - GNU Binutils documentation, ``nm``.
"""

__version__ = "1.0.0"
__tool_name__ = "elfnm"
__all__ = [
    "NmEngine",
    "SymbolListing",
    "classify",
]

from elfnm.analyzers.classifier import classify
from elfnm.core.engine import NmEngine
from elfnm.core.models import SymbolListing
