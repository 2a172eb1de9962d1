"""
Metrics collection helpers for fountain encoder/decoder instrumentation.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from statistics import fmean
from typing import Dict, List


@dataclass
class FountainMetrics:
    """Track statistics for fountain encoding/decoding runs."""

    degree_hist: Counter[int] = field(default_factory=Counter)
    decode_durations: List[float] = field(default_factory=list)
    decode_attempts: int = 0
    decode_successes: int = 0
    decode_failures: int = 0
    blocks_used: List[int] = field(default_factory=list)
    rejected_blocks: Counter[str] = field(default_factory=Counter)
    integrity_failures: int = 0
    header_rebinds: int = 0

    def record_degree(self, degree: int) -> None:
        """Record the degree of an emitted block."""
        if degree <= 0:
            return
        self.degree_hist[degree] += 1

    def record_decode(self, duration: float, success: bool, blocks_used: int) -> None:
        """Record a completed decode with its duration and outcome."""
        self.decode_attempts += 1
        self.decode_durations.append(duration)
        self.blocks_used.append(blocks_used)
        if success:
            self.decode_successes += 1
        else:
            self.decode_failures += 1

    def record_block_rejected(self, reason: str) -> None:
        """Record a block that was dropped (malformed, mismatched header...)."""
        self.rejected_blocks[reason] += 1

    def record_integrity_failure(self) -> None:
        self.integrity_failures += 1

    def record_header_rebind(self) -> None:
        """Record the decoder switching to a better-supported header."""
        self.header_rebinds += 1

    def merge(self, other: "FountainMetrics") -> None:
        """Merge another metrics object into this one."""
        self.degree_hist.update(other.degree_hist)
        self.decode_durations.extend(other.decode_durations)
        self.decode_attempts += other.decode_attempts
        self.decode_successes += other.decode_successes
        self.decode_failures += other.decode_failures
        self.blocks_used.extend(other.blocks_used)
        self.rejected_blocks.update(other.rejected_blocks)
        self.integrity_failures += other.integrity_failures
        self.header_rebinds += other.header_rebinds

    def summary(self) -> Dict[str, object]:
        """Return aggregated metrics suitable for logging."""
        total_blocks = sum(self.degree_hist.values())
        avg_degree = (
            sum(degree * count for degree, count in self.degree_hist.items())
            / total_blocks
            if total_blocks
            else 0.0
        )
        avg_duration = fmean(self.decode_durations) if self.decode_durations else 0.0
        success_rate = (
            self.decode_successes / self.decode_attempts
            if self.decode_attempts
            else 0.0
        )
        avg_blocks_used = fmean(self.blocks_used) if self.blocks_used else 0.0

        return {
            "total_blocks": total_blocks,
            "degree_hist": dict(self.degree_hist),
            "average_degree": avg_degree,
            "decode_attempts": self.decode_attempts,
            "decode_success_rate": success_rate,
            "average_decode_duration": avg_duration,
            "average_blocks_used": avg_blocks_used,
            "rejected_blocks": dict(self.rejected_blocks),
            "integrity_failures": self.integrity_failures,
            "header_rebinds": self.header_rebinds,
        }


__all__ = ["FountainMetrics"]
