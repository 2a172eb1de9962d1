"""
Deterministic payload generators shared across tests, the CLI, and the
channel benchmark.
"""

from __future__ import annotations

import json
import random
from datetime import datetime, timedelta

SERVICES = (
    "auth-service",
    "payment-gateway",
    "user-service",
    "database",
    "api-gateway",
    "cache-service",
)

EVENTS = (
    ("INFO", "Request processed successfully"),
    ("INFO", "User authentication successful"),
    ("WARN", "High memory usage detected"),
    ("WARN", "Slow query detected"),
    ("ERROR", "Database connection timeout"),
    ("ERROR", "Failed to process payment"),
    ("DEBUG", "API rate limit check"),
)


def generate_log_lines(num_entries: int = 100, seed: int = 0) -> bytes:
    """
    Return JSON-lines service logs; identical for identical arguments.

    The repetition in these logs compresses well, which makes them a fair
    stand-in for the text files people move over QR.
    """
    rng = random.Random(seed)
    base_time = datetime(2024, 1, 1)
    lines = []
    for i in range(num_entries):
        level, message = rng.choice(EVENTS)
        entry = {
            "timestamp": (base_time + timedelta(seconds=rng.randint(0, 86_400))).isoformat(),
            "requestId": f"req-{i:06d}",
            "service": rng.choice(SERVICES),
            "level": level,
            "message": message,
            "latency_ms": rng.randint(1, 5000),
        }
        lines.append(json.dumps(entry, separators=(",", ":")))
    return "\n".join(lines).encode("utf-8")


def random_bytes(nbytes: int, seed: int | None = None) -> bytes:
    """Incompressible payload of ``nbytes`` bytes."""
    rnd = random.Random(seed)
    return bytes(rnd.getrandbits(8) for _ in range(nbytes))


__all__ = ["generate_log_lines", "random_bytes"]
