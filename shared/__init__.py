"""
elfnm Shared Module
===================

Configuration, structured logging and console output shared by the
elfnm command line and engine.
"""

from shared.config import ElfnmConfig, get_config

__all__ = ["ElfnmConfig", "get_config"]
