"""
Error types raised by shrink.

File-open and file-create failures are not wrapped: they surface as the
built-in FileNotFoundError / OSError straight from open().
"""

from __future__ import annotations


class ShrinkError(Exception):
    """Base class for every error shrink raises itself."""


class UnsupportedFormatError(ShrinkError, ValueError):
    """The format selector is not one of the known codecs."""

    def __init__(self, fmt: str) -> None:
        super().__init__(f"Unsupported format: {fmt!r}")
        self.format = fmt


class CodecError(ShrinkError):
    """The codec library rejected its settings or the stream it was given."""

    def __init__(self, codec: str, message: str) -> None:
        super().__init__(f"{codec}: {message}")
        self.codec = codec
