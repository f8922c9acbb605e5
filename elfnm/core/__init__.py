"""
elfnm Core Module
==================

Data models and error taxonomy of the symbol lister.  The engine lives
in :mod:`elfnm.core.engine`.
"""

from elfnm.core.errors import (
    AllocationError,
    FileOpenError,
    NmError,
    NoSymbolTableError,
    TruncatedReadError,
    UnsupportedEndiannessError,
    UnsupportedFormatError,
)
from elfnm.core.models import (
    ClassifiedSymbol,
    ContainerHeader,
    SectionHeader,
    Symbol,
    SymbolListing,
    SymbolTables,
)

__all__ = [
    "AllocationError",
    "ClassifiedSymbol",
    "ContainerHeader",
    "FileOpenError",
    "NmError",
    "NoSymbolTableError",
    "SectionHeader",
    "Symbol",
    "SymbolListing",
    "SymbolTables",
    "TruncatedReadError",
    "UnsupportedEndiannessError",
    "UnsupportedFormatError",
]
