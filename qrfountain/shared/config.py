"""
Runtime configuration for encoding sessions and the compression registry.
"""

from __future__ import annotations

import json
import zlib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Callable, Dict, Mapping, NamedTuple, Optional


class Compressor(NamedTuple):
    """An invertible byte transform applied before slicing."""

    compress: Callable[[bytes], bytes]
    decompress: Callable[[bytes], bytes]


def _identity(data: bytes) -> bytes:
    return bytes(data)


IDENTITY = Compressor(_identity, _identity)

COMPRESSORS: Dict[str, Compressor] = {
    "zlib": Compressor(lambda data: zlib.compress(data, 9), zlib.decompress),
    "none": IDENTITY,
}

QR_ERROR_LEVELS = ("L", "M", "Q", "H")


def get_compressor(name: str) -> Compressor:
    try:
        return COMPRESSORS[name]
    except KeyError:
        raise ValueError(
            f"unknown compression {name!r}; choose from {sorted(COMPRESSORS)}"
        ) from None


@dataclass(frozen=True)
class FountainConfig:
    """Tunables for one transmission; defaults match the browser sender."""

    slice_size: int = 512
    compress: bool = True
    compression: str = "zlib"
    qr_border: int = 5
    qr_error_correction: str = "M"
    frame_duration_ms: int = 800
    prefix: str = ""

    def validate(self) -> "FountainConfig":
        if self.slice_size < 1:
            raise ValueError(f"slice_size must be positive, got {self.slice_size}")
        get_compressor(self.compression)
        if self.qr_error_correction not in QR_ERROR_LEVELS:
            raise ValueError(
                f"qr_error_correction must be one of {QR_ERROR_LEVELS}, "
                f"got {self.qr_error_correction!r}"
            )
        if self.qr_border < 0:
            raise ValueError(f"qr_border must be >= 0, got {self.qr_border}")
        if self.frame_duration_ms < 1:
            raise ValueError("frame_duration_ms must be positive")
        return self

    @property
    def compressor(self) -> Compressor:
        if not self.compress:
            return IDENTITY
        return get_compressor(self.compression)

    @classmethod
    def from_mapping(
        cls, values: Mapping[str, object], base: Optional["FountainConfig"] = None
    ) -> "FountainConfig":
        """Overlay ``values`` on ``base`` (or the defaults); ``None`` is skipped."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"unknown config keys: {unknown}")
        overrides = {key: value for key, value in values.items() if value is not None}
        return replace(base or cls(), **overrides).validate()

    @classmethod
    def from_json(cls, path: str | Path) -> "FountainConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_mapping(json.load(f))


__all__ = [
    "Compressor",
    "COMPRESSORS",
    "IDENTITY",
    "QR_ERROR_LEVELS",
    "FountainConfig",
    "get_compressor",
]
