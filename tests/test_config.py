import json
import zlib

import pytest

from qrfountain.shared.config import IDENTITY, FountainConfig, get_compressor


def test_defaults_validate():
    config = FountainConfig().validate()
    assert config.slice_size == 512
    assert config.compressor.decompress(config.compressor.compress(b"abc")) == b"abc"


def test_compress_false_selects_identity():
    assert FountainConfig(compress=False).compressor is IDENTITY


def test_zlib_compressor_produces_deflate_stream():
    packed = get_compressor("zlib").compress(b"hello" * 10)
    assert zlib.decompress(packed) == b"hello" * 10


def test_from_mapping_overlays_and_skips_none():
    base = FountainConfig(slice_size=100)
    config = FountainConfig.from_mapping({"prefix": "QF:", "slice_size": None}, base=base)
    assert config.slice_size == 100
    assert config.prefix == "QF:"


@pytest.mark.parametrize("values", [
    {"slice_size": 0},
    {"compression": "lzma-but-not-registered"},
    {"qr_error_correction": "X"},
    {"frame_duration_ms": 0},
    {"no_such_key": 1},
])
def test_invalid_values_rejected(values):
    with pytest.raises(ValueError):
        FountainConfig.from_mapping(values)


def test_from_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"slice_size": 64, "compress": False}))
    config = FountainConfig.from_json(path)
    assert config.slice_size == 64
    assert config.compressor is IDENTITY
