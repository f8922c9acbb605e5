"""
elfnm Error Taxonomy
=====================

Every failure the symbol lister can hit while processing one file.  All
of them are recoverable at file granularity: the engine catches
:class:`NmError`, prints one diagnostic line and moves on.
"""

from __future__ import annotations


class NmError(Exception):
    """Base class for per-file failures.

    Attributes:
        condition: Short human-readable condition (``"no symbols"``).
        detail: Optional extra context appended to the diagnostic.
        path: Input path, filled in by the engine when known.
    """

    condition: str = "error"

    def __init__(self, detail: str = "", *, path: str | None = None) -> None:
        self.detail = detail
        self.path = path
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.detail:
            return f"{self.condition}: {self.detail}"
        return self.condition


class FileOpenError(NmError):
    condition = "failed to open file"


class UnsupportedFormatError(NmError):
    """Bad magic, unknown ELF class, or an unusable record stride."""
    condition = "unsupported format"


class UnsupportedEndiannessError(NmError):
    condition = "unsupported endianness"


class NoSymbolTableError(NmError):
    condition = "no symbols"


class TruncatedReadError(NmError):
    """Fewer bytes than a header or section declares, or a table whose
    size is not a whole number of records."""
    condition = "truncated read"


class AllocationError(NmError):
    condition = "memory allocation error"
