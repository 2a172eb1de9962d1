"""
Channel simulators for fountain testing.

Models a viewer's camera missing QR frames: a simple burst eraser, a
Gilbert-Elliott two-state channel, and a corrupter that flips bytes in
serialized blocks the way a mis-scan would.
"""

from __future__ import annotations

import random
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def burst_eraser(
    frames: Sequence[T],
    loss_rate: float = 0.2,
    burst_len: int = 5,
    rng: random.Random | None = None,
) -> List[T]:
    """Simulate random bursts of erasures over the frame list.

    loss_rate controls how often a burst begins; burst_len controls the
    maximum length of each burst.
    """
    rng = rng or random.Random()
    n = len(frames)
    keep = []
    i = 0
    while i < n:
        if rng.random() < loss_rate:
            i += rng.randint(1, burst_len)
        else:
            keep.append(frames[i])
            i += 1
    return keep


def gilbert_elliott_eraser(
    frames: Sequence[T],
    p: float = 0.05,
    r: float = 0.25,
    good_loss: float = 0.0,
    bad_loss: float = 0.8,
    start_state: str = "good",
    rng: random.Random | None = None,
) -> List[T]:
    """Gilbert-Elliott channel eraser.

    - p: Probability to transition Good -> Bad each step
    - r: Probability to transition Bad -> Good each step
    - good_loss: Erasure probability in Good state
    - bad_loss: Erasure probability in Bad state
    - start_state: "good" or "bad"
    """
    rng = rng or random.Random()
    bad = not start_state.lower().startswith("g")
    out = []
    for frame in frames:
        loss = bad_loss if bad else good_loss
        if rng.random() >= loss:
            out.append(frame)
        if rng.random() < (r if bad else p):
            bad = not bad
    return out


def corrupt_frames(
    frames: Sequence[bytes],
    rate: float = 0.05,
    rng: random.Random | None = None,
) -> List[bytes]:
    """Flip one random byte in roughly ``rate`` of the serialized frames."""
    rng = rng or random.Random()
    out = []
    for frame in frames:
        if frame and rng.random() < rate:
            damaged = bytearray(frame)
            pos = rng.randrange(len(damaged))
            damaged[pos] ^= rng.randint(1, 255)
            frame = bytes(damaged)
        out.append(frame)
    return out


__all__ = ["burst_eraser", "gilbert_elliott_eraser", "corrupt_frames"]
