"""
Command line entry point.

    qrfountain encode report.pdf --gif frames.gif --lines frames.txt
    qrfountain decode frames.txt --out-dir received/
    qrfountain info <base64 block>
"""

from __future__ import annotations

import argparse
import logging
import math
import random
import sys
from pathlib import Path
from typing import List, Optional

from .fountain.decoder import LTDecoder
from .fountain.encoder import LTEncoder
from .fountain.errors import FountainError
from .shared.config import COMPRESSORS, QR_ERROR_LEVELS, FountainConfig
from .shared.meta import append_file_header, read_file_header
from .shared.metrics import FountainMetrics

logger = logging.getLogger("qrfountain")


def _config_from_args(args: argparse.Namespace) -> FountainConfig:
    base = FountainConfig.from_json(args.config) if args.config else None
    return FountainConfig.from_mapping(
        {
            "slice_size": args.slice_size,
            "compress": False if args.no_compress else None,
            "compression": args.compression,
            "qr_error_correction": args.ecc,
            "frame_duration_ms": getattr(args, "duration", None),
            "prefix": args.prefix,
        },
        base=base,
    )


def default_frame_count(k: int) -> int:
    """About 50% overhead plus a few spares."""
    return math.ceil(1.5 * k) + 4


def cmd_encode(args: argparse.Namespace) -> int:
    from . import display

    config = _config_from_args(args)
    path = Path(args.file)
    payload = append_file_header(path.read_bytes(), path.name, args.content_type)

    metrics = FountainMetrics()
    encoder = LTEncoder.from_config(payload, config, metrics=metrics)
    count = args.count or default_frame_count(encoder.k)
    rng = random.Random(args.seed) if args.seed is not None else None
    blocks = encoder.encode(count, rng)

    print(
        f"{path.name}: {len(payload)} bytes -> {encoder.orig_len} compressed, "
        f"k={encoder.k}, {count} frames"
    )

    if args.lines:
        text = "\n".join(display.block_to_base64(b, config.prefix) for b in blocks)
        Path(args.lines).write_text(text + "\n", encoding="utf-8")
        print(f"wrote {args.lines}")
    if args.gif:
        display.write_gif(
            blocks,
            args.gif,
            duration_ms=config.frame_duration_ms,
            prefix=config.prefix,
            border=config.qr_border,
            error_correction=config.qr_error_correction,
        )
        print(f"wrote {args.gif}")
    if args.svg_dir:
        paths = display.write_svgs(
            blocks,
            args.svg_dir,
            prefix=config.prefix,
            border=config.qr_border,
            error_correction=config.qr_error_correction,
        )
        print(f"wrote {len(paths)} SVG frames to {args.svg_dir}")

    summary = metrics.summary()
    print(f"average degree {summary['average_degree']:.2f}")
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    from .display import block_from_base64

    config = _config_from_args(args)
    metrics = FountainMetrics()
    decoder = LTDecoder(compressor=config.compressor, metrics=metrics)

    for line in Path(args.lines).read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        try:
            block = block_from_base64(line, config.prefix)
        except FountainError as exc:
            logger.warning("skipping line: %s", exc)
            metrics.record_block_rejected("malformed")
            continue
        decoder.add_block(block)
        if decoder.is_complete:
            break

    payload = decoder.decode()
    if payload is None:
        print(
            f"incomplete: {decoder.recovered_count}/{decoder.k or '?'} slices recovered",
            file=sys.stderr,
        )
        return 1

    data, meta = read_file_header(payload)
    name = Path(str(meta.get("filename") or "")).name
    if name in ("", ".", ".."):
        name = "received.bin"
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / name
    target.write_bytes(data)
    print(f"recovered {name} ({meta['contentType']}, {len(data)} bytes) -> {target}")
    rejected = metrics.summary()["rejected_blocks"]
    if rejected:
        print(f"rejected blocks: {rejected}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    from .display import block_from_base64

    block = block_from_base64(args.block, args.prefix or "")
    print(f"degree   {block.degree}")
    print(f"indices  {list(block.indices)}")
    print(f"k        {block.k}")
    print(f"bytes    {block.orig_len}")
    print(f"checksum {block.checksum:#010x}")
    print(f"data     {len(block.data)} bytes")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="qrfountain", description="Fountain-coded QR file transfer"
    )
    ap.add_argument("-v", "--verbose", action="count", default=0)
    sub = ap.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", help="JSON file with FountainConfig fields")
        p.add_argument("--slice-size", type=int, help="slice size in bytes")
        p.add_argument("--no-compress", action="store_true")
        p.add_argument("--compression", choices=sorted(COMPRESSORS))
        p.add_argument("--ecc", choices=QR_ERROR_LEVELS, help="QR error correction")
        p.add_argument("--prefix", help="text prepended to every QR payload")

    enc = sub.add_parser("encode", help="file -> QR frames")
    add_common(enc)
    enc.add_argument("file")
    enc.add_argument("--content-type")
    enc.add_argument("--count", type=int, help="frames to emit")
    enc.add_argument("--seed", type=int, help="seed for a reproducible stream")
    enc.add_argument("--duration", type=int, help="GIF frame duration in ms")
    enc.add_argument("--gif", help="write an animated GIF")
    enc.add_argument("--svg-dir", help="write one SVG per frame")
    enc.add_argument("--lines", help="write one base64 block per line")
    enc.set_defaults(func=cmd_encode)

    dec = sub.add_parser("decode", help="base64 lines -> file")
    add_common(dec)
    dec.add_argument("lines")
    dec.add_argument("--out-dir", default=".")
    dec.set_defaults(func=cmd_decode)

    info = sub.add_parser("info", help="print the header of one block")
    info.add_argument("block")
    info.add_argument("--prefix")
    info.set_defaults(func=cmd_info)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
