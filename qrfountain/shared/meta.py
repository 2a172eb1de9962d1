"""
Length-prefixed framing used to carry file metadata alongside the payload.

A framed buffer is a sequence of chunks, each preceded by its length as a
4-byte big-endian word. ``append_meta`` writes two chunks: a JSON object,
then the data.
"""

from __future__ import annotations

import json
import struct
from typing import Dict, Iterable, List, Tuple

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_LEN = struct.Struct(">I")


def merge_chunks(chunks: Iterable[bytes]) -> bytes:
    out = bytearray()
    for chunk in chunks:
        out += _LEN.pack(len(chunk))
        out += chunk
    return bytes(out)


def split_chunks(buffer: bytes) -> List[bytes]:
    chunks = []
    offset = 0
    while offset < len(buffer):
        if offset + _LEN.size > len(buffer):
            raise ValueError(f"truncated length prefix at offset {offset}")
        (length,) = _LEN.unpack_from(buffer, offset)
        offset += _LEN.size
        if offset + length > len(buffer):
            raise ValueError(
                f"chunk at offset {offset} claims {length} bytes, "
                f"{len(buffer) - offset} available"
            )
        chunks.append(bytes(buffer[offset : offset + length]))
        offset += length
    return chunks


def append_meta(data: bytes, meta: Dict[str, object]) -> bytes:
    header = json.dumps(meta, separators=(",", ":")).encode("utf-8")
    return merge_chunks([header, data])


def read_meta(buffer: bytes) -> Tuple[bytes, Dict[str, object]]:
    chunks = split_chunks(buffer)
    if len(chunks) != 2:
        raise ValueError(f"expected 2 chunks (meta, data), found {len(chunks)}")
    header, data = chunks
    meta = json.loads(header.decode("utf-8"))
    if not isinstance(meta, dict):
        raise ValueError("metadata chunk is not a JSON object")
    return data, meta


def append_file_header(
    data: bytes, filename: str, content_type: str | None = None
) -> bytes:
    """Prefix a file's bytes with its name and MIME type."""
    meta = {
        "filename": filename,
        "contentType": content_type or DEFAULT_CONTENT_TYPE,
    }
    return append_meta(data, meta)


def read_file_header(buffer: bytes) -> Tuple[bytes, Dict[str, object]]:
    data, meta = read_meta(buffer)
    if not meta.get("contentType"):
        meta["contentType"] = DEFAULT_CONTENT_TYPE
    return data, meta


__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "merge_chunks",
    "split_chunks",
    "append_meta",
    "read_meta",
    "append_file_header",
    "read_file_header",
]
