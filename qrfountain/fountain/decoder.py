"""
LT fountain decoder: incremental peeling with a GF(2) elimination fallback.

Blocks may arrive in any order, repeated, or corrupted. Degree-1 blocks reveal
a slice outright; every revealed slice is XORed out of the blocks still
waiting on it, which may drop them to degree 1 and cascade. If peeling stalls
while enough independent blocks are buffered, ``decode`` solves the remaining
system by Gaussian elimination.
"""

from __future__ import annotations

import logging
from time import perf_counter
from typing import Dict, List, Optional, Set, Tuple, Union

from ..shared.config import Compressor, FountainConfig
from ..shared.metrics import FountainMetrics
from ..shared.utils import combine_blocks
from .block import EncodedBlock, block_from_bytes
from .checksum import checksum
from .errors import IntegrityError, MalformedBlockError
from .matrix import solve_gf2

logger = logging.getLogger(__name__)

BlockLike = Union[EncodedBlock, bytes, bytearray, memoryview]
BlockKey = Tuple[Tuple[int, ...], bytes]


def _block_key(block: EncodedBlock) -> BlockKey:
    return (tuple(block.indices), bytes(block.data))


class LTDecoder:
    """Recover the original payload from LT fountain blocks."""

    def __init__(
        self,
        k: Optional[int] = None,
        orig_len: Optional[int] = None,
        checksum: Optional[int] = None,
        slice_size: Optional[int] = None,
        *,
        compressor: Optional[Compressor] = None,
        metrics: Optional[FountainMetrics] = None,
    ):
        """
        Parameters
        ----------
        k, orig_len, checksum:
            The transmission header. When given, blocks with any other header
            are rejected. When omitted, the first plausible block binds the
            header provisionally; blocks with a different header are held,
            and if one of those headers gathers more distinct blocks than the
            bound one (at least two), the decoder switches to it.
        slice_size:
            Expected length of every block's data. Defaults to the length of
            the first accepted block.
        compressor:
            Transform the sender applied; its ``decompress`` is run on the
            reassembled bytes. Defaults to zlib.
        metrics:
            Optional FountainMetrics collector for instrumentation.
        """
        given = (k, orig_len, checksum)
        if any(v is None for v in given) and any(v is not None for v in given):
            raise ValueError("k, orig_len and checksum must be given together")

        self.header: Optional[Tuple[int, int, int]] = None
        self.slice_size = slice_size
        self.compressor = compressor or FountainConfig().compressor
        self.metrics = metrics
        self._pinned = k is not None
        self._slice_size_given = slice_size is not None
        self._held: Dict[Tuple[int, int, int], Dict[BlockKey, EncodedBlock]] = {}
        self._result: Optional[bytes] = None
        self._reset_state()

        if k is not None:
            self._set_header((k, orig_len, checksum))

    def _reset_state(self) -> None:
        self.slices: List[Optional[int]] = [None] * (self.k or 0)
        self.recovered_count = 0
        self.accepted = 0
        self._blocks: Dict[BlockKey, EncodedBlock] = {}
        self._pending: Dict[int, List] = {}
        self._waiting_on: Dict[int, Set[int]] = {}
        self._next_pending_id = 0
        self._rows: List[Tuple[int, int]] = []
        self._rows_at_last_solve = 0

    @classmethod
    def from_config(
        cls, config: FountainConfig, *, metrics: Optional[FountainMetrics] = None
    ) -> "LTDecoder":
        config.validate()
        return cls(
            slice_size=config.slice_size,
            compressor=config.compressor,
            metrics=metrics,
        )

    @property
    def k(self) -> Optional[int]:
        return self.header[0] if self.header else None

    @property
    def orig_len(self) -> Optional[int]:
        return self.header[1] if self.header else None

    @property
    def checksum(self) -> Optional[int]:
        return self.header[2] if self.header else None

    @property
    def is_complete(self) -> bool:
        return self.header is not None and self.recovered_count == self.k

    @property
    def progress(self) -> float:
        """Fraction of slices recovered so far."""
        if not self.header:
            return 0.0
        return self.recovered_count / self.k

    def _set_header(self, header: Tuple[int, int, int]) -> None:
        k, orig_len, _ = header
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        self.header = header
        self.slices = [None] * k
        logger.debug("LT decoder bound to k=%d orig_len=%d", k, orig_len)

    def _header_consistent(self, block: EncodedBlock) -> bool:
        """orig_len must fit in exactly k slices of the block's size."""
        size = self.slice_size if self._slice_size_given else len(block.data)
        if block.k < 1 or size < 1:
            return False
        return (block.k - 1) * size < block.orig_len <= block.k * size

    def _reject(self, reason: str) -> bool:
        if self.metrics:
            self.metrics.record_block_rejected(reason)
        return False

    def add_block(self, block: BlockLike) -> bool:
        """
        Feed one block (parsed or serialized).

        Returns True when the block was accepted. Malformed, mismatched, and
        duplicate blocks are dropped and counted; they never raise. Once the
        decoder is complete every further block is ignored.
        """
        if self.is_complete:
            return False

        if not isinstance(block, EncodedBlock):
            try:
                block = block_from_bytes(block)
            except MalformedBlockError as exc:
                logger.warning("dropping malformed block: %s", exc)
                return self._reject("malformed")

        if self.header is None:
            if not self._header_consistent(block):
                logger.warning(
                    "dropping block with inconsistent header k=%d orig_len=%d",
                    block.k,
                    block.orig_len,
                )
                return self._reject("inconsistent_header")
            self._set_header(block.header)
        elif block.header != self.header:
            return self._hold(block)

        return self._accept(block)

    def _accept(self, block: EncodedBlock) -> bool:
        if self.slice_size is None:
            self.slice_size = len(block.data)
        if len(block.data) != self.slice_size:
            return self._reject("wrong_length")

        key = _block_key(block)
        if key in self._blocks:
            return self._reject("duplicate")
        self._blocks[key] = block
        self.accepted += 1

        value = int.from_bytes(block.data, "big")
        mask = 0
        for i in block.indices:
            mask |= 1 << i
        self._rows.append((mask, value))

        unknown = set()
        for i in block.indices:
            known = self.slices[i]
            if known is None:
                unknown.add(i)
            else:
                value ^= known

        if len(unknown) == 1:
            self._resolve(unknown.pop(), value)
        elif unknown:
            pid = self._next_pending_id
            self._next_pending_id += 1
            self._pending[pid] = [unknown, value]
            for i in unknown:
                self._waiting_on.setdefault(i, set()).add(pid)

        if self.is_complete:
            self._held.clear()
        return True

    def _hold(self, block: EncodedBlock) -> bool:
        """Keep a block whose header disagrees; switch headers if it wins."""
        if self._pinned or not self._header_consistent(block):
            return self._reject("mismatched_header")

        held = self._held.setdefault(block.header, {})
        key = _block_key(block)
        if key in held:
            return self._reject("duplicate")
        held[key] = block

        if len(held) >= 2 and len(held) > self.accepted:
            self._rebind(block.header)
            return True
        return self._reject("mismatched_header")

    def _rebind(self, header: Tuple[int, int, int]) -> None:
        """Replace the bound header and replay the blocks held for it."""
        logger.warning(
            "header %s outvoted %s (%d blocks vs %d); rebinding",
            header,
            self.header,
            len(self._held[header]),
            self.accepted,
        )
        winners = list(self._held.pop(header).values())
        if self.header is not None and self._blocks:
            self._held[self.header] = dict(self._blocks)
        if self.metrics:
            self.metrics.record_header_rebind()

        if not self._slice_size_given:
            self.slice_size = len(winners[0].data)
        self._set_header(header)
        self._reset_state()
        for block in winners:
            self._accept(block)

    def _resolve(self, index: int, value: int) -> None:
        """Record a slice and peel it out of every block waiting on it."""
        queue = [(index, value)]
        while queue:
            i, v = queue.pop()
            if self.slices[i] is not None:
                continue
            self.slices[i] = v
            self.recovered_count += 1
            for pid in self._waiting_on.pop(i, ()):
                entry = self._pending.get(pid)
                if entry is None:
                    continue
                unknown = entry[0]
                unknown.discard(i)
                entry[1] ^= v
                if len(unknown) <= 1:
                    del self._pending[pid]
                    if unknown:
                        queue.append((next(iter(unknown)), entry[1]))

        logger.debug("recovered %d/%d slices", self.recovered_count, self.k)

    def _solve_remaining(self) -> None:
        """Gaussian elimination over every accepted block."""
        if len(self._rows) < self.k or len(self._rows) == self._rows_at_last_solve:
            return
        self._rows_at_last_solve = len(self._rows)

        masks = [mask for mask, _ in self._rows]
        values = [value for _, value in self._rows]
        solution = solve_gf2(masks, values, self.k)
        if solution is None:
            return

        logger.info("peeling stalled at %d/%d; solved by elimination",
                    self.recovered_count, self.k)
        for i, v in enumerate(solution):
            if self.slices[i] is None:
                self.slices[i] = v
                self.recovered_count += 1
        self._pending.clear()
        self._waiting_on.clear()
        self._held.clear()

    def decode(self) -> bytes | None:
        """
        Attempt to reconstruct the original payload.

        Returns ``None`` while slices are still missing. Raises
        ``IntegrityError`` if the reassembled payload does not decompress or
        its checksum differs from the one the blocks carry.
        """
        if self._result is not None:
            return self._result
        if self.header is None:
            return None

        start = perf_counter()
        if not self.is_complete:
            self._solve_remaining()
        if not self.is_complete:
            return None

        k, orig_len, expected = self.header
        chunks = [v.to_bytes(self.slice_size, "big") for v in self.slices]
        compressed = combine_blocks(chunks, orig_len)

        try:
            payload = self.compressor.decompress(compressed)
        except Exception as exc:
            self._integrity_failed(start)
            raise IntegrityError(f"payload does not decompress: {exc}") from exc

        actual = checksum(payload, k)
        if actual != expected:
            self._integrity_failed(start)
            raise IntegrityError.checksum_mismatch(expected, actual)

        if self.metrics:
            self.metrics.record_decode(perf_counter() - start, True, self.accepted)
        logger.info("decoded %d bytes from %d blocks", len(payload), self.accepted)
        self._result = payload
        return payload

    def _integrity_failed(self, start: float) -> None:
        logger.warning("reconstruction failed integrity check")
        if self.metrics:
            self.metrics.record_integrity_failure()
            self.metrics.record_decode(perf_counter() - start, False, self.accepted)


__all__ = ["LTDecoder", "BlockLike"]
