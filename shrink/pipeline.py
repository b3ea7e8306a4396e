"""
Chunked streaming pipeline: source file → codec → destination file.

compress_file(src, dst, fmt, level)   → Result   (dst used verbatim)
compress_to(src, dst, fmt, level)     → Result   (dst + format extension)
decompress_file(src, dst, fmt)        → Result
copy_stream(reader, writer)           → int      (bytes copied)

Every operation resolves the codec before touching the filesystem and opens
the source before creating the destination, so an unknown format or a
missing input never leaves an output file behind. Anything that fails after
that point propagates as-is; a partially written destination is not removed.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from .codecs import CHUNK_SIZE, DEFAULT_FORMAT, get_codec, get_extension
from .progress import AnyProgress, NullProgress

log = logging.getLogger("shrink.pipeline")


@dataclass
class Result:
    source: Path         # file that was read
    dest: Path           # file that was written
    format: str          # codec name
    bytes_in: int        # size of the source file
    bytes_out: int       # size of the destination file
    elapsed: float       # wall-clock seconds

    @property
    def ratio(self) -> float:
        """bytes_out / bytes_in, 0.0 for an empty source."""
        if self.bytes_in == 0:
            return 0.0
        return self.bytes_out / self.bytes_in


def copy_stream(
    reader: BinaryIO,
    writer: BinaryIO,
    chunk_size: int = CHUNK_SIZE,
    on_chunk: Optional[Callable[[int], None]] = None,
) -> int:
    """
    Copy *reader* into *writer* in blocks of up to *chunk_size* bytes.
    Calls *on_chunk(len(block))* after each block is written.
    Returns the number of bytes copied.
    """
    total = 0
    while True:
        block = reader.read(chunk_size)
        if not block:
            break
        writer.write(block)
        total += len(block)
        if on_chunk is not None:
            on_chunk(len(block))
    return total


def compress_file(
    input_path: str | Path,
    output_path: str | Path,
    fmt: str = DEFAULT_FORMAT,
    level: Optional[int] = None,
    progress: AnyProgress | None = None,
    chunk_size: int = CHUNK_SIZE,
) -> Result:
    """Compress *input_path* into exactly *output_path* with codec *fmt*."""
    codec = get_codec(fmt)
    source, dest = Path(input_path), Path(output_path)
    progress = progress or NullProgress()

    t0 = time.perf_counter()
    with open(source, "rb") as src:
        size = os.fstat(src.fileno()).st_size
        log.info("Compressing %s (%d bytes) → %s [%s, level=%s]",
                 source, size, dest, codec.name, level)
        with open(dest, "wb") as dst, progress.file(source.name, size) as fp:
            with codec.encoder(dst, level, entry_name=source.name) as enc:
                copied = copy_stream(src, enc, chunk_size,
                                     lambda _n: fp.update_to(src.tell()))
    elapsed = time.perf_counter() - t0

    result = Result(source, dest, codec.name, copied, dest.stat().st_size, elapsed)
    log.info("Compressed %d → %d bytes in %.3fs", result.bytes_in, result.bytes_out, elapsed)
    return result


def compress_to(
    input_path: str | Path,
    output_path: str | Path,
    fmt: str = DEFAULT_FORMAT,
    level: Optional[int] = None,
    progress: AnyProgress | None = None,
    chunk_size: int = CHUNK_SIZE,
) -> Result:
    """Like compress_file(), but writes to *output_path* + the format's extension."""
    dest = Path(f"{output_path}{get_extension(fmt)}")
    return compress_file(input_path, dest, fmt, level, progress, chunk_size)


def decompress_file(
    input_path: str | Path,
    output_path: str | Path,
    fmt: str = DEFAULT_FORMAT,
    progress: AnyProgress | None = None,
    chunk_size: int = CHUNK_SIZE,
) -> Result:
    """Decode *input_path* with codec *fmt* and write the raw bytes to *output_path*."""
    codec = get_codec(fmt)
    source, dest = Path(input_path), Path(output_path)
    progress = progress or NullProgress()

    t0 = time.perf_counter()
    with open(source, "rb") as src:
        size = os.fstat(src.fileno()).st_size
        log.info("Decompressing %s (%d bytes) → %s [%s]", source, size, dest, codec.name)
        with open(dest, "wb") as dst, progress.file(source.name, size) as fp:
            with codec.decoder(src) as dec:
                written = copy_stream(dec, dst, chunk_size,
                                      lambda _n: fp.update_to(src.tell()))
    elapsed = time.perf_counter() - t0

    result = Result(source, dest, codec.name, size, written, elapsed)
    log.info("Decompressed %d → %d bytes in %.3fs", result.bytes_in, result.bytes_out, elapsed)
    return result
