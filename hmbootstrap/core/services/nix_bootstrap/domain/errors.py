"""
L1 Domain — Bootstrap failure taxonomy.

Fatal conditions raise ``BootstrapAbort``; everything recoverable is
logged and reported through the stage outcome instead.
"""

from __future__ import annotations


class BootstrapAbort(Exception):
    """A condition the remaining stages cannot work around."""
