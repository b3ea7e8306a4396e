"""
Codec backends — one streaming encoder/decoder pair per format.

get_codec(name)          → Codec           (raises UnsupportedFormatError)
get_extension(name)      → ".gz" | ".zst" | ".lz4" | ".zip" | ".unknown"

Codec.encoder(sink, level, entry_name)   context manager → writable stream
Codec.decoder(source)                    context manager → readable stream

Encoders finalize their stream (gzip trailer, zstd/lz4 frame end, zip
central directory) when the ``with`` block exits. Neither side closes the
file object it was handed; the caller owns it.
"""

from __future__ import annotations

import abc
import gzip
import logging
import zipfile
import zlib
from contextlib import contextmanager
from typing import BinaryIO, ContextManager, Generator, Optional

import lz4.frame
import zstandard as zstd

from .errors import CodecError, UnsupportedFormatError

log = logging.getLogger("shrink.codecs")


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CHUNK_SIZE: int = 8192               # bytes per read in the copy loop
DEFAULT_FORMAT: str = "gzip"
FORMATS: tuple[str, ...] = ("gzip", "zstd", "lz4", "zip")
UNKNOWN_EXTENSION: str = ".unknown"

_GZIP_DEFAULT_LEVEL: int = 9         # same default as gzip.open()
_ZSTD_DEFAULT_LEVEL: int = 3
_LZ4_DEFAULT_LEVEL: int = lz4.frame.COMPRESSIONLEVEL_MIN


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class Codec(abc.ABC):
    """A compression format with a streaming encoder and decoder."""

    name: str = ""
    extension: str = UNKNOWN_EXTENSION
    # Library exceptions that mean "bad settings or bad stream" for this codec.
    errors: tuple[type[BaseException], ...] = ()

    @contextmanager
    def _translate(self) -> Generator[None, None, None]:
        try:
            yield
        except CodecError:
            raise
        except self.errors as exc:
            raise CodecError(self.name, str(exc) or type(exc).__name__) from exc

    @abc.abstractmethod
    def encoder(
        self,
        sink: BinaryIO,
        level: Optional[int] = None,
        entry_name: str = "data",
    ) -> ContextManager[BinaryIO]:
        """Writable stream that compresses into *sink*, finalized on exit."""

    @abc.abstractmethod
    def decoder(self, source: BinaryIO) -> ContextManager[BinaryIO]:
        """Readable stream of the bytes decoded from *source*."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

class GzipCodec(Codec):
    name = "gzip"
    extension = ".gz"
    errors = (gzip.BadGzipFile, EOFError, zlib.error, ValueError)

    @contextmanager
    def encoder(self, sink, level=None, entry_name="data"):
        if level is None:
            level = _GZIP_DEFAULT_LEVEL
        with self._translate(), gzip.GzipFile(
            filename=entry_name, mode="wb", fileobj=sink, compresslevel=level
        ) as gz:
            yield gz

    @contextmanager
    def decoder(self, source):
        # GzipFile reads an empty source as an empty payload.
        start = source.tell()
        if not source.read(1):
            raise CodecError(self.name, "empty stream: no gzip member found")
        source.seek(start)
        with self._translate(), gzip.GzipFile(mode="rb", fileobj=source) as gz:
            yield gz


class _ZstdFrameReader:
    """
    Read-only view over one or more concatenated zstd frames.

    Unlike ZstdDecompressor.stream_reader(), running out of input in the
    middle of a frame is an error, and so is a source holding no frame.
    """

    def __init__(self, dctx: zstd.ZstdDecompressor, source: BinaryIO,
                 read_size: int = zstd.DECOMPRESSION_RECOMMENDED_INPUT_SIZE) -> None:
        self._dctx = dctx
        self._source = source
        self._read_size = read_size
        self._dobj = None            # decompressobj of the current frame
        self._frames = 0
        self._buffer = bytearray()
        self._finished = False

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        while not self._finished and (size < 0 or len(self._buffer) < size):
            self._fill()
        if size < 0:
            size = len(self._buffer)
        out = bytes(self._buffer[:size])
        del self._buffer[:size]
        return out

    def _fill(self) -> None:
        data = self._source.read(self._read_size)
        if not data:
            self._finished = True
            if self._frames == 0:
                raise CodecError("zstd", "empty stream: no zstd frame found")
            if not self._dobj.eof:
                raise CodecError("zstd", "truncated stream: input ended inside a frame")
            return

        while data:
            if self._dobj is None or self._dobj.eof:
                self._dobj = self._dctx.decompressobj()
                self._frames += 1
            self._buffer += self._dobj.decompress(data)
            data = self._dobj.unused_data if self._dobj.eof else b""


class ZstdCodec(Codec):
    name = "zstd"
    extension = ".zst"
    errors = (zstd.ZstdError, ValueError)

    @contextmanager
    def encoder(self, sink, level=None, entry_name="data"):
        if level is None:
            level = _ZSTD_DEFAULT_LEVEL
        with self._translate():
            cctx = zstd.ZstdCompressor(level=level)
            with cctx.stream_writer(sink, closefd=False) as writer:
                yield writer

    @contextmanager
    def decoder(self, source):
        with self._translate():
            yield _ZstdFrameReader(zstd.ZstdDecompressor(), source)


class Lz4Codec(Codec):
    name = "lz4"
    extension = ".lz4"
    # lz4.frame reports LZ4F_* failures as RuntimeError.
    errors = (RuntimeError, EOFError, ValueError)

    @contextmanager
    def encoder(self, sink, level=None, entry_name="data"):
        if level is None:
            level = _LZ4_DEFAULT_LEVEL
        with self._translate(), lz4.frame.LZ4FrameFile(
            sink, mode="wb", compression_level=level
        ) as fh:
            yield fh

    @contextmanager
    def decoder(self, source):
        with self._translate(), lz4.frame.LZ4FrameFile(source, mode="rb") as fh:
            yield fh


class ZipCodec(Codec):
    """
    Single-entry deflate archive.

    Only the first entry of an archive is ever decoded; later entries are
    skipped with a warning.
    """

    name = "zip"
    extension = ".zip"
    errors = (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, zlib.error, ValueError)

    @contextmanager
    def encoder(self, sink, level=None, entry_name="data"):
        with self._translate():
            if level is not None:
                # zipfile only builds the compressor after marking the entry
                # as open, which leaves the archive unclosable on a bad level.
                zlib.compressobj(level)
            with zipfile.ZipFile(
                sink, mode="w", compression=zipfile.ZIP_DEFLATED, compresslevel=level
            ) as zf:
                with zf.open(entry_name, mode="w", force_zip64=True) as entry:
                    yield entry

    @contextmanager
    def decoder(self, source):
        with self._translate(), zipfile.ZipFile(source, mode="r") as zf:
            infos = zf.infolist()
            if not infos:
                raise CodecError(self.name, "archive contains no entries")
            if len(infos) > 1:
                log.warning("Archive holds %d entries; extracting only %r",
                            len(infos), infos[0].filename)
            with zf.open(infos[0], mode="r") as entry:
                yield entry


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_CODECS: dict[str, Codec] = {
    c.name: c for c in (GzipCodec(), ZstdCodec(), Lz4Codec(), ZipCodec())
}


def get_codec(name: str) -> Codec:
    """Return the codec registered under *name*."""
    try:
        return _CODECS[name]
    except KeyError:
        raise UnsupportedFormatError(name) from None


def get_extension(name: str) -> str:
    """File extension appended to compressed output for format *name*."""
    codec = _CODECS.get(name)
    return codec.extension if codec is not None else UNKNOWN_EXTENSION
