"""
LT fountain encoder using the Ideal Soliton Distribution.

The payload is optionally compressed, cut into ``k`` zero-padded slices, and
turned into an endless stream of blocks, each the XOR of a random subset of
slices.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, Iterator, List, Optional

import numpy as np

from ..shared.config import IDENTITY, Compressor, FountainConfig
from ..shared.metrics import FountainMetrics
from ..shared.utils import split_blocks
from .block import EncodedBlock
from .checksum import checksum
from .errors import EmptyPayloadError
from .soliton import sample_degree, sample_indices

logger = logging.getLogger(__name__)


class LTEncoder:
    def __init__(
        self,
        data: bytes,
        slice_size: int,
        compress: bool = True,
        *,
        compressor: Optional[Compressor] = None,
        metrics: Optional[FountainMetrics] = None,
    ):
        """
        Parameters
        ----------
        data:
            The raw payload. The checksum is taken over these bytes.
        slice_size:
            Size in bytes of every slice and of every block's data.
        compress:
            Run ``compressor.compress`` over the payload before slicing.
        compressor:
            Transform used when ``compress`` is True; defaults to zlib.
        metrics:
            Optional FountainMetrics collector; records emitted degrees.
        """
        if slice_size < 1:
            raise ValueError(f"slice_size must be positive, got {slice_size}")

        self.data = bytes(data)
        self.slice_size = slice_size
        self.compress = compress
        if compress:
            self.compressor = compressor or FountainConfig().compressor
        else:
            self.compressor = IDENTITY
        self.metrics = metrics

        self.compressed = self.compressor.compress(self.data)
        if not self.compressed:
            raise EmptyPayloadError("cannot build a fountain over an empty payload")

        self.slices = split_blocks(self.compressed, slice_size)
        self.k = len(self.slices)
        self.orig_len = len(self.compressed)
        self.checksum = checksum(self.data, self.k)
        self._matrix = np.frombuffer(b"".join(self.slices), dtype=np.uint8).reshape(
            self.k, slice_size
        )
        self._matrix.flags.writeable = False

        logger.debug(
            "LT encoder ready: %d bytes -> %d compressed, k=%d, slice_size=%d",
            len(self.data),
            self.orig_len,
            self.k,
            slice_size,
        )

    @classmethod
    def from_config(
        cls,
        data: bytes,
        config: FountainConfig,
        *,
        metrics: Optional[FountainMetrics] = None,
    ) -> "LTEncoder":
        config.validate()
        return cls(
            data,
            config.slice_size,
            config.compress,
            compressor=config.compressor,
            metrics=metrics,
        )

    def create_block(self, indices: Iterable[int]) -> EncodedBlock:
        """XOR the named slices into one block. Pure function of ``indices``."""
        idxs = tuple(sorted(set(indices)))
        if not idxs:
            raise ValueError("a block needs at least one index")
        if idxs[0] < 0 or idxs[-1] >= self.k:
            raise IndexError(f"indices {list(idxs)} out of range for k={self.k}")

        data = np.bitwise_xor.reduce(self._matrix[list(idxs)], axis=0)
        return EncodedBlock(
            k=self.k,
            orig_len=self.orig_len,
            checksum=self.checksum,
            indices=idxs,
            data=data.tobytes(),
        )

    def encode_block(self, rng: random.Random) -> EncodedBlock:
        """Draw a degree and an index set, then build the block."""
        degree = sample_degree(self.k, rng)
        block = self.create_block(sample_indices(self.k, degree, rng))
        if self.metrics:
            self.metrics.record_degree(block.degree)
        return block

    def fountain(self, rng: Optional[random.Random] = None) -> "FountainStream":
        """Return a fresh, endless stream of blocks over this encoder."""
        return FountainStream(self, rng)

    def encode(self, n: int, rng: Optional[random.Random] = None) -> List[EncodedBlock]:
        stream = self.fountain(rng)
        return [next(stream) for _ in range(n)]


class FountainStream(Iterator[EncodedBlock]):
    """
    Pull-based, never-ending block iterator.

    Each pull is independent of the last; creating a new stream over the same
    encoder is equivalent to restarting. Drop the stream to stop.
    """

    def __init__(self, encoder: LTEncoder, rng: Optional[random.Random] = None):
        self.encoder = encoder
        self.rng = rng if rng is not None else random.Random()
        self.emitted = 0

    def __iter__(self) -> "FountainStream":
        return self

    def __next__(self) -> EncodedBlock:
        block = self.encoder.encode_block(self.rng)
        self.emitted += 1
        return block


__all__ = ["LTEncoder", "FountainStream"]
