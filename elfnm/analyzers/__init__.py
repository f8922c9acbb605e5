"""
elfnm Analyzers
================

Symbol type classification.
"""

from elfnm.analyzers.classifier import classify

__all__ = ["classify"]
