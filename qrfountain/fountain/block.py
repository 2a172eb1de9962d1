"""
Encoded block type and its wire format.

Every integer is an unsigned 32-bit big-endian word::

    degree | indices[0..degree) | k | orig_len | checksum | data...

The index list is prefixed by its own length, so the header needs no separate
size field. ``data`` is whatever follows the header.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Tuple

from .errors import MalformedBlockError

WORD = 4
_U32 = struct.Struct(">I")


@dataclass(frozen=True)
class EncodedBlock:
    """One fountain symbol: the XOR of the slices named by ``indices``."""

    k: int
    orig_len: int
    checksum: int
    indices: Tuple[int, ...]
    data: bytes

    @property
    def degree(self) -> int:
        return len(self.indices)

    @property
    def header(self) -> Tuple[int, int, int]:
        """The ``(k, orig_len, checksum)`` triple shared by a transmission."""
        return (self.k, self.orig_len, self.checksum)

    def header_size(self) -> int:
        return (self.degree + 4) * WORD


def block_to_bytes(block: EncodedBlock) -> bytes:
    """Serialize a block: header words followed by ``data`` verbatim."""
    words = (block.degree, *block.indices, block.k, block.orig_len, block.checksum)
    header = struct.pack(f">{len(words)}I", *words)
    return header + bytes(block.data)


def block_from_bytes(buffer: bytes) -> EncodedBlock:
    """
    Parse a serialized block.

    Raises ``MalformedBlockError`` when the buffer is shorter than the header
    its degree declares, when the degree is zero, or when an index repeats or
    is not below ``k``. The data length is not checked here.
    """
    buffer = bytes(buffer)
    if len(buffer) < WORD:
        raise MalformedBlockError(f"buffer of {len(buffer)} bytes has no degree word")

    (degree,) = _U32.unpack_from(buffer, 0)
    if degree == 0:
        raise MalformedBlockError("degree must be at least 1")

    header_len = (degree + 4) * WORD
    if len(buffer) < header_len:
        raise MalformedBlockError(
            f"degree {degree} needs a {header_len}-byte header, got {len(buffer)} bytes"
        )

    words = struct.unpack_from(f">{degree + 3}I", buffer, WORD)
    indices = tuple(words[:degree])
    k, orig_len, checksum = words[degree:]

    if len(set(indices)) != degree:
        raise MalformedBlockError(f"duplicate index in {list(indices)}")
    out_of_range = [i for i in indices if i >= k]
    if out_of_range:
        raise MalformedBlockError(f"indices {out_of_range} out of range for k={k}")

    return EncodedBlock(
        k=k,
        orig_len=orig_len,
        checksum=checksum,
        indices=indices,
        data=buffer[header_len:],
    )


__all__ = ["EncodedBlock", "block_to_bytes", "block_from_bytes", "WORD"]
