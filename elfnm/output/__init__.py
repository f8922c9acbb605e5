"""
elfnm Output
=============

Text listing and JSON report rendering.
"""

from elfnm.output.console import NmConsoleOutput, SymbolTableRenderer
from elfnm.output.report import NmReportGenerator

__all__ = ["NmConsoleOutput", "NmReportGenerator", "SymbolTableRenderer"]
