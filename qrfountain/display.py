"""
Render serialized fountain blocks as QR codes.

Each block travels as ``prefix + base64(block_to_bytes(block))``. Frames can be
produced as SVG strings, PIL images, or a looping animated GIF.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Iterable, List

import imageio.v3 as iio
import numpy as np
import qrcode
from PIL import Image
from qrcode.constants import (
    ERROR_CORRECT_H,
    ERROR_CORRECT_L,
    ERROR_CORRECT_M,
    ERROR_CORRECT_Q,
)
from qrcode.image.svg import SvgPathImage

from .fountain.block import EncodedBlock, block_from_bytes, block_to_bytes
from .fountain.errors import MalformedBlockError

logger = logging.getLogger(__name__)

_ECC_MAP = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

DEFAULT_BORDER = 5
DEFAULT_ECC = "M"


def block_to_base64(block: EncodedBlock, prefix: str = "") -> str:
    return prefix + base64.b64encode(block_to_bytes(block)).decode("ascii")


def block_from_base64(text: str, prefix: str = "") -> EncodedBlock:
    """Inverse of ``block_to_base64``; bad Base64 is a malformed block too."""
    text = text.strip()
    if prefix:
        if not text.startswith(prefix):
            raise MalformedBlockError(f"missing prefix {prefix!r}")
        text = text[len(prefix) :]
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedBlockError(f"invalid base64: {exc}") from exc
    return block_from_bytes(raw)


def make_qr(
    text: str,
    border: int = DEFAULT_BORDER,
    error_correction: str = DEFAULT_ECC,
    box_size: int = 6,
) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,  # Auto-size
        error_correction=_ECC_MAP[error_correction],
        box_size=box_size,
        border=border,
    )
    qr.add_data(text)
    qr.make(fit=True)
    return qr


def block_to_svg(
    block: EncodedBlock,
    prefix: str = "",
    border: int = DEFAULT_BORDER,
    error_correction: str = DEFAULT_ECC,
) -> str:
    qr = make_qr(block_to_base64(block, prefix), border, error_correction)
    img = qr.make_image(image_factory=SvgPathImage)
    buf = io.BytesIO()
    img.save(buf)
    return buf.getvalue().decode("utf-8")


def block_to_image(
    block: EncodedBlock,
    prefix: str = "",
    border: int = DEFAULT_BORDER,
    error_correction: str = DEFAULT_ECC,
    box_size: int = 6,
) -> Image.Image:
    qr = make_qr(block_to_base64(block, prefix), border, error_correction, box_size)
    img = qr.make_image(fill_color="black", back_color="white")
    # convert() also unwraps qrcode's PilImage into a plain PIL image.
    return img.convert("RGB")


def _pad_to(img: Image.Image, width: int, height: int) -> Image.Image:
    """Center ``img`` on a white canvas; GIF frames must share one size."""
    if img.size == (width, height):
        return img
    canvas = Image.new("RGB", (width, height), "white")
    canvas.paste(img, ((width - img.width) // 2, (height - img.height) // 2))
    return canvas


def render_frames(
    blocks: Iterable[EncodedBlock],
    prefix: str = "",
    border: int = DEFAULT_BORDER,
    error_correction: str = DEFAULT_ECC,
) -> List[Image.Image]:
    images = [block_to_image(b, prefix, border, error_correction) for b in blocks]
    if not images:
        return []
    width = max(img.width for img in images)
    height = max(img.height for img in images)
    return [_pad_to(img, width, height) for img in images]


def write_gif(
    blocks: Iterable[EncodedBlock],
    path: str | Path,
    duration_ms: int = 800,
    prefix: str = "",
    border: int = DEFAULT_BORDER,
    error_correction: str = DEFAULT_ECC,
) -> int:
    """Write a looping QR animation; returns the number of frames."""
    frames = render_frames(blocks, prefix, border, error_correction)
    if not frames:
        raise ValueError("no blocks to render")
    iio.imwrite(
        path,
        [np.array(frame) for frame in frames],
        duration=duration_ms,
        loop=0,  # Infinite loop
    )
    logger.info("wrote %d QR frames to %s", len(frames), path)
    return len(frames)


def write_svgs(
    blocks: Iterable[EncodedBlock],
    out_dir: str | Path,
    prefix: str = "",
    border: int = DEFAULT_BORDER,
    error_correction: str = DEFAULT_ECC,
) -> List[Path]:
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    paths = []
    for i, block in enumerate(blocks, start=1):
        path = out / f"frame_{i:04d}.svg"
        path.write_text(
            block_to_svg(block, prefix, border, error_correction), encoding="utf-8"
        )
        paths.append(path)
    return paths


__all__ = [
    "block_to_base64",
    "block_from_base64",
    "make_qr",
    "block_to_svg",
    "block_to_image",
    "render_frames",
    "write_gif",
    "write_svgs",
]
