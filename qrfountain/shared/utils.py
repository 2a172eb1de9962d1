"""
Utility functions for splitting data into slices and combining them again.
"""


def split_blocks(data: bytes, block_size: int) -> list[bytes]:
    """Split data into fixed-size blocks, padding the last block with zeros."""
    if block_size < 1:
        raise ValueError(f"block_size must be positive, got {block_size}")
    blocks = [bytes(data[i : i + block_size]) for i in range(0, len(data), block_size)]
    if blocks and len(blocks[-1]) < block_size:
        blocks[-1] = blocks[-1] + b"\x00" * (block_size - len(blocks[-1]))
    return blocks


def combine_blocks(blocks: list[bytes], orig_len: int) -> bytes:
    """Combine blocks and truncate to original length."""
    data = b"".join(blocks)
    return data[:orig_len]


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """XOR two equal-length byte strings."""
    if len(a) != len(b):
        raise ValueError(f"length mismatch: {len(a)} != {len(b)}")
    value = int.from_bytes(a, "big") ^ int.from_bytes(b, "big")
    return value.to_bytes(len(a), "big")
