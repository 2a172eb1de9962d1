"""
CRC32 helpers binding a reconstructed payload to its slice count.
"""

import zlib


def crc32(data: bytes) -> int:
    """IEEE 802.3 CRC-32 (reflected, poly 0xEDB88320) as an unsigned int."""
    return zlib.crc32(data) & 0xFFFFFFFF


def checksum(payload: bytes, k: int) -> int:
    """CRC32 of the original payload XOR the slice count."""
    return (crc32(payload) ^ k) & 0xFFFFFFFF


__all__ = ["crc32", "checksum"]
