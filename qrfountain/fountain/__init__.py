"""
Fountain Code Module
Exports LTEncoder, LTDecoder, the block codec, and helper functions
"""

from .block import EncodedBlock, block_from_bytes, block_to_bytes
from .checksum import checksum, crc32
from .decoder import LTDecoder
from .encoder import FountainStream, LTEncoder
from .errors import (
    EmptyPayloadError,
    FountainError,
    IntegrityError,
    MalformedBlockError,
)
from .sim import burst_eraser, gilbert_elliott_eraser
from .soliton import sample_degree, sample_indices

__all__ = [
    "EncodedBlock",
    "block_from_bytes",
    "block_to_bytes",
    "checksum",
    "crc32",
    "LTDecoder",
    "LTEncoder",
    "FountainStream",
    "FountainError",
    "EmptyPayloadError",
    "MalformedBlockError",
    "IntegrityError",
    "burst_eraser",
    "gilbert_elliott_eraser",
    "sample_degree",
    "sample_indices",
]
