"""
shrink — single-file compressor  CLI entry point.

Usage:
    python -m shrink compress <input> <output> [--format F] [--compression-level N] [--quiet]
    python -m shrink decompress <input> <output> [--format F] [--quiet]

Formats: gzip (default), zstd, lz4, zip.
"""

from __future__ import annotations

import argparse
import logging
import sys

from .codecs import DEFAULT_FORMAT, FORMATS
from .errors import ShrinkError
from .pipeline import compress_to, decompress_file
from .progress import AnyProgress, NullProgress, ProgressTracker


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        level=level,
    )


# ---------------------------------------------------------------------------
# Sub-commands
# ---------------------------------------------------------------------------

def cmd_compress(args: argparse.Namespace) -> int:
    """Compress one file; the format's extension is appended to <output>."""
    progress = _make_progress(args.quiet, "compress")
    exit_code = 0
    try:
        result = compress_to(
            args.input,
            args.output,
            fmt=args.format,
            level=args.compression_level,
            progress=progress,
        )
        print(f"[shrink] ✓ Compression complete — {result.dest}  "
              f"{_fmt_size(result.bytes_in)} → {_fmt_size(result.bytes_out)} "
              f"({result.ratio * 100:.2f}%)")
    except (ShrinkError, OSError) as exc:
        print(f"[shrink] Compression failed: {exc}", file=sys.stderr)
        exit_code = 1
    finally:
        progress.stop()

    return exit_code


def cmd_decompress(args: argparse.Namespace) -> int:
    """Decompress one file to exactly <output>."""
    progress = _make_progress(args.quiet, "decompress")
    exit_code = 0
    try:
        result = decompress_file(
            args.input,
            args.output,
            fmt=args.format,
            progress=progress,
        )
        print(f"[shrink] ✓ Decompression complete — {result.dest}  "
              f"{_fmt_size(result.bytes_out)}")
    except (ShrinkError, OSError) as exc:
        print(f"[shrink] Decompression failed: {exc}", file=sys.stderr)
        exit_code = 1
    finally:
        progress.stop()

    return exit_code


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_progress(quiet: bool, action: str) -> AnyProgress:
    if quiet:
        return NullProgress()
    tracker = ProgressTracker(action=action)
    tracker.start()
    return tracker


def _fmt_size(n: float) -> str:
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} PB"


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shrink",
        description="Compress and decompress a single file (gzip, zstd, lz4, zip)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    formats = ", ".join(FORMATS)

    # --- compress ---
    p_comp = sub.add_parser("compress", help="Compress <input> into <output>.<ext>")
    p_comp.add_argument("input", help="File to compress")
    p_comp.add_argument("output", help="Output path; the format's extension is appended")
    p_comp.add_argument("-f", "--format", default=DEFAULT_FORMAT, metavar="FORMAT",
                        help=f"Codec to use: {formats} (default {DEFAULT_FORMAT})")
    p_comp.add_argument("-c", "--compression-level", type=int, default=None,
                        metavar="N",
                        help="Codec-specific compression level (default: codec's own)")
    p_comp.add_argument("--quiet", action="store_true", help="No progress bar")

    # --- decompress ---
    p_dec = sub.add_parser("decompress", help="Decompress <input> into <output>")
    p_dec.add_argument("input", help="Compressed file")
    p_dec.add_argument("output", help="Where to write the decoded bytes")
    p_dec.add_argument("-f", "--format", default=DEFAULT_FORMAT, metavar="FORMAT",
                       help=f"Codec the input was written with: {formats} (default {DEFAULT_FORMAT})")
    p_dec.add_argument("--quiet", action="store_true", help="No progress bar")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    handlers = {
        "compress":   cmd_compress,
        "decompress": cmd_decompress,
    }
    sys.exit(handlers[args.command](args))


if __name__ == "__main__":
    main()
