"""Refillable character buffer with one character of lookahead."""

from __future__ import annotations

import logging
from typing import Protocol

from pgnstream.config import DEFAULT_BUFFER_SIZE, validate_buffer_size

_LOGGER = logging.getLogger(__name__)

END_OF_STREAM = "\0"
BYTE_ORDER_MARK = "\ufeff"


class CharacterSource(Protocol):
    """Anything with a text ``read(size)`` method (files, ``io.StringIO``...)."""

    def read(self, size: int = -1, /) -> str: ...


class InputBuffer:
    """Pull characters from *stream* in chunks of *buffer_size*.

    :meth:`next_pair` hands out each character exactly once together with
    the character that follows it, fetching the next chunk when the
    lookahead lies past the end of the current one.
    """

    __slots__ = (
        "_stream",
        "_buffer_size",
        "_chunk",
        "_position",
        "_exhausted",
        "_started",
        "line",
        "column",
    )

    def __init__(
        self, stream: CharacterSource, buffer_size: int = DEFAULT_BUFFER_SIZE
    ) -> None:
        self._stream = stream
        self._buffer_size = validate_buffer_size(buffer_size)
        self._chunk = ""
        self._position = 0
        self._exhausted = False
        self._started = False
        self.line = 1
        self.column = 0

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    @property
    def exhausted(self) -> bool:
        """True once the stream has no characters left to hand out.

        After :meth:`next_pair` this tells whether its lookahead is the
        end-of-stream sentinel rather than a real character.
        """
        return self._exhausted

    def next_pair(self) -> tuple[str, str, bool]:
        """Return ``(current, next, more)``.

        Once the stream is drained every call yields
        ``(END_OF_STREAM, END_OF_STREAM, False)``.
        """
        if not self._available():
            return END_OF_STREAM, END_OF_STREAM, False

        current = self._chunk[self._position]
        self._position += 1
        self._advance_position(current)

        lookahead = END_OF_STREAM
        if self._available():
            lookahead = self._chunk[self._position]
        return current, lookahead, True

    # ── Internal helpers ─────────────────────────────────────────────────

    def _available(self) -> bool:
        if self._position < len(self._chunk):
            return True
        return self._refill()

    def _refill(self) -> bool:
        # Only called once the current chunk is fully consumed.
        if self._exhausted:
            return False

        data = self._read_chunk()
        if not self._started:
            self._started = True
            if data.startswith(BYTE_ORDER_MARK):
                data = data[1:] or self._read_chunk()
        if not data:
            _LOGGER.debug("End of PGN stream reached at line %d", self.line)
            self._exhausted = True
            self._chunk = ""
            self._position = 0
            return False

        _LOGGER.debug("Buffered %d characters", len(data))
        self._chunk = data
        self._position = 0
        return True

    def _read_chunk(self) -> str:
        data = self._stream.read(self._buffer_size)
        if isinstance(data, bytes):
            raise TypeError("PGN source must be opened in text mode")
        return data

    def _advance_position(self, char: str) -> None:
        if char == "\n":
            self.line += 1
            self.column = 0
        else:
            self.column += 1
