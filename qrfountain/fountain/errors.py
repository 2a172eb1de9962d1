"""
Exceptions raised by the fountain encoder, block codec, and decoder.
"""

from typing import Optional


class FountainError(ValueError):
    """Base class for fountain-code errors."""


class EmptyPayloadError(FountainError):
    """The (compressed) payload has zero length, so no slices can be formed."""


class MalformedBlockError(FountainError):
    """A serialized block's header is structurally inconsistent."""


class IntegrityError(FountainError):
    """Reconstruction finished but the payload does not verify."""

    def __init__(
        self,
        message: str,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual

    @classmethod
    def checksum_mismatch(cls, expected: int, actual: int) -> "IntegrityError":
        return cls(
            f"checksum mismatch: expected {expected:#010x}, got {actual:#010x}",
            expected,
            actual,
        )


__all__ = [
    "FountainError",
    "EmptyPayloadError",
    "MalformedBlockError",
    "IntegrityError",
]
