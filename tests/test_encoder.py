"""
Slicing, XOR combination, and the block stream of the LT encoder.
"""
import itertools
import random
import zlib

import pytest

from qrfountain.fountain.checksum import checksum
from qrfountain.fountain.encoder import FountainStream, LTEncoder
from qrfountain.fountain.errors import EmptyPayloadError
from qrfountain.shared.config import FountainConfig
from qrfountain.shared.metrics import FountainMetrics
from qrfountain.shared.utils import xor_bytes


def test_slicing_pads_only_the_last_slice():
    encoder = LTEncoder(b"hello world", 4, compress=False)

    assert encoder.k == 3
    assert encoder.orig_len == 11
    assert encoder.slices == [b"hell", b"o wo", b"rld\x00"]


@pytest.mark.parametrize("length, slice_size", [(1, 1), (7, 3), (64, 16), (65, 16), (100, 1000)])
def test_slice_count_is_ceiling(length, slice_size):
    payload = bytes(range(256))[:length] if length <= 256 else bytes(length)
    encoder = LTEncoder(payload, slice_size, compress=False)
    assert encoder.k == -(-length // slice_size)
    assert all(len(s) == slice_size for s in encoder.slices)


def test_compressed_slicing_uses_compressed_length():
    payload = b"abc" * 500
    encoder = LTEncoder(payload, 16)
    compressed = zlib.compress(payload, 9)

    assert encoder.compressed == compressed
    assert encoder.orig_len == len(compressed)
    assert encoder.k == -(-len(compressed) // 16)


def test_checksum_covers_original_payload():
    payload = b"the checksum ignores compression" * 10
    plain = LTEncoder(payload, 32, compress=False)
    packed = LTEncoder(payload, 32, compress=True)

    assert plain.checksum == checksum(payload, plain.k)
    assert packed.checksum == checksum(payload, packed.k)


def test_empty_payload_raises():
    with pytest.raises(EmptyPayloadError):
        LTEncoder(b"", 8, compress=False)


def test_empty_payload_is_fine_once_compressed():
    encoder = LTEncoder(b"", 8, compress=True)
    assert encoder.k >= 1


def test_non_positive_slice_size_raises():
    with pytest.raises(ValueError):
        LTEncoder(b"data", 0)


def test_degree_one_block_is_the_slice():
    encoder = LTEncoder(b"0123456789abcdef!", 4, compress=False)
    for i, expected in enumerate(encoder.slices):
        block = encoder.create_block([i])
        assert block.data == expected
        assert block.indices == (i,)
        assert block.header == (encoder.k, encoder.orig_len, encoder.checksum)


def test_block_data_is_xor_of_named_slices():
    encoder = LTEncoder(bytes(range(40)), 8, compress=False)
    block = encoder.create_block([4, 1, 2])
    expected = xor_bytes(xor_bytes(encoder.slices[1], encoder.slices[2]), encoder.slices[4])

    assert block.indices == (1, 2, 4)
    assert block.data == expected
    assert encoder.create_block([1, 2, 4]) == block


def test_create_block_rejects_bad_indices():
    encoder = LTEncoder(b"abcdefgh", 4, compress=False)
    with pytest.raises(ValueError):
        encoder.create_block([])
    with pytest.raises(IndexError):
        encoder.create_block([2])


def test_fountain_is_unbounded_and_seedable():
    encoder = LTEncoder(bytes(range(200)), 10, compress=False)
    first = list(itertools.islice(encoder.fountain(random.Random(5)), 300))
    again = list(itertools.islice(encoder.fountain(random.Random(5)), 300))

    assert len(first) == 300
    assert first == again
    for block in first:
        assert 1 <= block.degree <= encoder.k
        assert len(block.data) == 10


def test_stream_counts_pulls():
    encoder = LTEncoder(b"counting", 2, compress=False)
    stream = encoder.fountain(random.Random(0))
    assert isinstance(stream, FountainStream)
    assert iter(stream) is stream
    next(stream)
    next(stream)
    assert stream.emitted == 2


def test_encode_records_degrees():
    metrics = FountainMetrics()
    encoder = LTEncoder(b"metrics-matter" * 4, 4, compress=False, metrics=metrics)
    blocks = encoder.encode(25, random.Random(11))

    assert sum(metrics.degree_hist.values()) == 25
    assert sum(b.degree for b in blocks) == sum(
        d * c for d, c in metrics.degree_hist.items()
    )


def test_from_config():
    config = FountainConfig(slice_size=16, compress=False)
    encoder = LTEncoder.from_config(b"x" * 40, config)
    assert encoder.k == 3
    assert encoder.compressed == b"x" * 40
