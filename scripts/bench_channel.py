#!/usr/bin/env python3
"""
Channel benchmark for fountain encoder/decoder.

Runs Monte Carlo trials across a parameter grid and prints success rate,
average blocks used, and decode latency. Every frame goes through the wire
format, so corrupted frames exercise the decoder's malformed-block path.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path

# Ensure project root import
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from qrfountain.fountain.block import block_to_bytes
from qrfountain.fountain.decoder import LTDecoder
from qrfountain.fountain.encoder import LTEncoder
from qrfountain.fountain.errors import IntegrityError
from qrfountain.fountain.sim import burst_eraser, corrupt_frames, gilbert_elliott_eraser
from qrfountain.shared.demo_payloads import random_bytes
from qrfountain.shared.metrics import FountainMetrics


def run_trial(
    payload_len: int,
    slice_size: int,
    overhead: float,
    channel: str,
    channel_kwargs: dict,
    corrupt_rate: float,
    rng: random.Random,
) -> tuple[bool, FountainMetrics]:
    payload = random_bytes(payload_len, seed=rng.randrange(1 << 30))
    metrics = FountainMetrics()

    enc = LTEncoder(payload, slice_size, compress=False, metrics=metrics)
    n = int((1.0 + overhead) * enc.k)
    frames = [block_to_bytes(b) for b in enc.encode(n, rng)]

    if channel == "burst":
        received = burst_eraser(frames, rng=rng, **channel_kwargs)
    elif channel == "ge":
        received = gilbert_elliott_eraser(frames, rng=rng, **channel_kwargs)
    else:
        raise ValueError(f"Unknown channel: {channel}")
    received = corrupt_frames(received, rate=corrupt_rate, rng=rng)

    dec = LTDecoder(compressor=enc.compressor, metrics=metrics)
    for frame in received:
        dec.add_block(frame)
        if dec.is_complete:
            break

    try:
        recovered = dec.decode()
    except IntegrityError:
        return False, metrics
    return (recovered == payload), metrics


def main() -> int:
    ap = argparse.ArgumentParser(description="Fountain channel benchmark")
    ap.add_argument("--payload", type=int, default=16_384, help="payload bytes")
    ap.add_argument("--slice", type=int, default=256, help="slice size bytes")
    ap.add_argument(
        "--overheads", type=str, default="0.2,0.5,1.0,1.5", help="comma list"
    )
    ap.add_argument("--trials", type=int, default=50, help="trials per config")
    ap.add_argument("--channel", choices=["burst", "ge"], default="ge")
    ap.add_argument("--ge", type=str, default="p=0.05,r=0.25,good=0.02,bad=0.8")
    ap.add_argument(
        "--burst", type=str, default="loss=0.2,burst=3", help="loss and burst len"
    )
    ap.add_argument("--corrupt", type=float, default=0.0, help="frame corrupt rate")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    rng = random.Random(args.seed)
    overheads = [float(x) for x in args.overheads.split(",")]

    if args.channel == "ge":
        kv = dict(x.split("=") for x in args.ge.split(","))
        channel_kwargs = dict(
            p=float(kv.get("p", 0.05)),
            r=float(kv.get("r", 0.25)),
            good_loss=float(kv.get("good", 0.02)),
            bad_loss=float(kv.get("bad", 0.8)),
        )
    else:
        kv = dict(x.split("=") for x in args.burst.split(","))
        channel_kwargs = dict(
            loss_rate=float(kv.get("loss", 0.2)),
            burst_len=int(kv.get("burst", 3)),
        )

    print(
        f"Payload={args.payload}B slice={args.slice} channel={args.channel} params={channel_kwargs} trials={args.trials}"
    )
    for oh in overheads:
        successes = 0
        merged = FountainMetrics()
        for _ in range(args.trials):
            ok, m = run_trial(
                payload_len=args.payload,
                slice_size=args.slice,
                overhead=oh,
                channel=args.channel,
                channel_kwargs=channel_kwargs,
                corrupt_rate=args.corrupt,
                rng=rng,
            )
            successes += 1 if ok else 0
            merged.merge(m)

        summary = merged.summary()
        rate = successes / args.trials
        avg_used = summary.get("average_blocks_used", 0.0)
        avg_latency_ms = summary.get("average_decode_duration", 0.0) * 1000.0
        print(
            f"overhead={oh:.2f} -> success={rate * 100:5.1f}% used≈{avg_used:.1f} lat≈{avg_latency_ms:.2f}ms avg_degree={summary['average_degree']:.2f} rejected={summary['rejected_blocks']}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
