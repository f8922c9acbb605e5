"""
elfnm Report Generator
=======================

JSON rendering of a :class:`~elfnm.core.models.SymbolListing` for
machine consumption.  Undefined entries carry ``"value": null`` in the
same way the text listing leaves their address column blank.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from elfnm.core.models import SymbolListing


class NmReportGenerator:
    """Builds JSON reports from symbol listings."""

    def to_dict(self, listing: SymbolListing) -> dict[str, Any]:
        """Return the report body as plain JSON-compatible data."""
        return {
            "report_type": "elfnm_symbol_listing",
            "version": "1.0.0",
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "path": listing.path,
            "word_size": int(listing.word_size),
            "byte_order": listing.byte_order.value,
            "symtab_name": listing.symtab_name,
            "symbol_count": len(listing.symbols),
            "symbols": [
                {
                    "name": entry.name,
                    "type": entry.type_char,
                    "value": None if entry.undefined else entry.value,
                }
                for entry in listing.symbols
            ],
        }

    def to_json(self, listing: SymbolListing, indent: int = 2) -> str:
        return json.dumps(
            self.to_dict(listing), indent=indent, ensure_ascii=False, default=str
        )

    def generate_json(self, listing: SymbolListing, output_path: str) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json(listing))
            f.write("\n")

        return str(path.resolve())
