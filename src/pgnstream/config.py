"""Reader configuration."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_BUFFER_SIZE = 0x1000


@dataclass(frozen=True, slots=True)
class ReaderConfig:
    """Settings used when a reader opens its own file.

    Args:
        buffer_size: Characters fetched from the stream per refill.
        encoding: Text encoding of the PGN file.
        errors: Decoding error policy passed to :func:`open`.
    """

    buffer_size: int = DEFAULT_BUFFER_SIZE
    encoding: str = "utf-8-sig"
    errors: str = "replace"

    def __post_init__(self) -> None:
        validate_buffer_size(self.buffer_size)


def validate_buffer_size(buffer_size: int) -> int:
    if buffer_size < 1:
        raise ValueError(f"buffer_size must be positive, got {buffer_size}")
    return buffer_size
