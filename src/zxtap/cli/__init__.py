"""
zxtap Command-Line Interface
============================

This package provides the `zxtapi` command-line tool, a Click-based
application for listing, printing and extracting the contents of
ZX-Spectrum .tap files.
"""

__all__ = ["zxtapi"]
