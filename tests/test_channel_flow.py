"""
Send -> encode -> lossy QR channel -> decode, using seeded randomness.

Frames travel as serialized bytes, are dropped in bursts, and a few are
damaged the way a mis-scan would damage them. The decoder keeps pulling from
the fountain until it finishes, which is how a viewer pointing a camera at the
display loop behaves.
"""
import random

from qrfountain.fountain.block import block_from_bytes, block_to_bytes
from qrfountain.fountain.decoder import LTDecoder
from qrfountain.fountain.encoder import LTEncoder
from qrfountain.fountain.errors import IntegrityError, MalformedBlockError
from qrfountain.fountain.sim import burst_eraser, corrupt_frames, gilbert_elliott_eraser
from qrfountain.shared.demo_payloads import generate_log_lines
from qrfountain.shared.metrics import FountainMetrics


def test_sim_helpers_are_deterministic_with_seeded_rng():
    frames = list(range(200))
    assert burst_eraser(frames, rng=random.Random(3)) == burst_eraser(frames, rng=random.Random(3))
    kept = gilbert_elliott_eraser(frames, rng=random.Random(4))
    assert kept == gilbert_elliott_eraser(frames, rng=random.Random(4))
    assert len(kept) < len(frames)
    assert set(kept) <= set(frames)


def test_corrupt_frames_changes_some_frames_only():
    frames = [bytes(8) for _ in range(100)]
    damaged = corrupt_frames(frames, rate=0.3, rng=random.Random(8))
    changed = sum(1 for a, b in zip(frames, damaged) if a != b)
    assert len(damaged) == len(frames)
    assert 0 < changed < len(frames)


def test_log_payload_survives_burst_loss():
    rng = random.Random(1337)
    payload = generate_log_lines(120, seed=7)
    metrics = FountainMetrics()
    encoder = LTEncoder(payload, 64, metrics=metrics)
    decoder = LTDecoder(compressor=encoder.compressor, metrics=metrics)

    stream = encoder.fountain(rng)
    rounds = 0
    while not decoder.is_complete and rounds < 100:
        batch = [block_to_bytes(next(stream)) for _ in range(encoder.k)]
        delivered = burst_eraser(batch, loss_rate=0.2, burst_len=3, rng=rng)
        for frame in delivered:
            decoder.add_block(frame)
        rounds += 1

    assert decoder.is_complete
    assert decoder.decode() == payload
    assert metrics.summary()["decode_success_rate"] == 1.0


def _damage_checksum(frame):
    """Flip bit 8 of the checksum word of a serialized block."""
    degree = int.from_bytes(frame[:4], "big")
    offset = 4 + 4 * degree + 8
    damaged = bytearray(frame)
    damaged[offset + 2] ^= 0x01
    return bytes(damaged)


def test_mis_scans_are_rejected_or_caught_by_checksum():
    rng = random.Random(2)
    payload = generate_log_lines(40, seed=3)
    encoder = LTEncoder(payload, 32)
    true_header = (encoder.k, encoder.orig_len, encoder.checksum)
    stream = encoder.fountain(rng)

    recovered = None
    for attempt in range(30):
        decoder = LTDecoder(compressor=encoder.compressor)
        damaged_headers = set()
        for pulled in range(encoder.k * 30):
            clean = block_to_bytes(next(stream))
            if attempt == 0 and pulled == 0:
                frame = _damage_checksum(clean)
            else:
                frame = corrupt_frames([clean], rate=0.02, rng=rng)[0]
                if frame != clean:
                    try:
                        damaged_headers.add(block_from_bytes(frame).header)
                    except MalformedBlockError:
                        pass
            decoder.add_block(frame)
            if decoder.is_complete:
                break

        if attempt == 0:
            assert decoder.header == true_header
        try:
            recovered = decoder.decode()
        except IntegrityError:
            # Only a damaged frame that still parsed under the bound header
            # can poison the reconstruction.
            assert decoder.header in damaged_headers
            continue
        if recovered is not None:
            break

    assert recovered == payload
